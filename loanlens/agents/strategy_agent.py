"""
Strategy Agent
Picks the pillar weights for the applicant's urgency zone.
"""

from typing import Optional

from .base import BaseAgent
from loanlens.schemas.context import ScoringContext
from loanlens.schemas.results import StrategyWeights
from loanlens.domain.strategy import Strategist, StrategySelector


class StrategyAgent(BaseAgent[ScoringContext, StrategyWeights]):
    """Strategist Agent (layer 3)"""

    name = "StrategyAgent"

    def __init__(self, selector: Optional[StrategySelector] = None):
        super().__init__()
        self.selector = selector or Strategist()

    def _process(self, context: ScoringContext) -> StrategyWeights:
        weights = self.selector.select(context.urgency_zone)
        self.logger.info(
            f"Zone {context.urgency_zone.value} -> {weights.name} "
            f"(future={weights.future}, financial={weights.financial}, past={weights.past})"
        )
        return weights
