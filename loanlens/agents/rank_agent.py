"""
Rank Agent
Orders the scored lenders and attaches unlock hints.
"""

from .base import BaseAgent
from loanlens.schemas.results import RankedLender, ScoredLender
from loanlens.domain.ranking import Ranker


class RankInput:
    """Rank Agent input"""
    def __init__(self, scored: list[ScoredLender], include_locked: bool = True):
        self.scored = scored
        self.include_locked = include_locked


class RankAgent(BaseAgent[RankInput, list[RankedLender]]):
    """Ranker Agent"""

    name = "RankAgent"

    def __init__(self):
        super().__init__()
        self.ranker = Ranker()

    def _process(self, input_data: RankInput) -> list[RankedLender]:
        return self.ranker.rank(input_data.scored, input_data.include_locked)
