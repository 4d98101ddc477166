"""
Score Agent
Computes pillar scores and the weighted composite for each lender.
"""

from typing import Optional

from .base import BaseAgent
from loanlens.schemas.context import ScoringContext
from loanlens.schemas.lender import LenderProfile
from loanlens.schemas.request import PriorOverride
from loanlens.schemas.results import KnockoutResult, ScoredLender, StrategyWeights
from loanlens.domain.scoring import PillarScoringEngine


class ScoreInput:
    """Score Agent input"""
    def __init__(
        self,
        context: ScoringContext,
        lenders: list[LenderProfile],
        knockouts: list[KnockoutResult],
        weights: StrategyWeights,
        prior_override: Optional[PriorOverride] = None,
    ):
        self.context = context
        self.lenders = lenders
        self.knockouts = knockouts
        self.weights = weights
        self.prior_override = prior_override


class ScoreAgent(BaseAgent[ScoreInput, list[ScoredLender]]):
    """
    Pillar Scorer Agent (layer 4)

    Rule-based PillarScoringEngine. No LLM is used.
    """

    name = "ScoreAgent"

    def __init__(self):
        super().__init__()
        self.engine = PillarScoringEngine()

    def _validate_input(self, input_data: ScoreInput) -> None:
        super()._validate_input(input_data)
        if len(input_data.lenders) != len(input_data.knockouts):
            raise ValueError(f"{self.name}: every lender needs a knockout result")

    def _process(self, input_data: ScoreInput) -> list[ScoredLender]:
        return [
            self.engine.score(
                context=input_data.context,
                lender=lender,
                knockout=knockout,
                weights=input_data.weights,
                prior_override=input_data.prior_override,
            )
            for lender, knockout in zip(input_data.lenders, input_data.knockouts)
        ]
