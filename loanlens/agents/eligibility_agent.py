"""
Eligibility Agent
Runs the knockout rules against every candidate lender.
"""

from .base import BaseAgent
from loanlens.schemas.context import ScoringContext
from loanlens.schemas.lender import LenderProfile
from loanlens.schemas.results import KnockoutResult
from loanlens.domain.knockouts import KnockoutEngine


class EligibilityInput:
    """Eligibility Agent input"""
    def __init__(self, context: ScoringContext, lenders: list[LenderProfile]):
        self.context = context
        self.lenders = lenders


class EligibilityAgent(BaseAgent[EligibilityInput, list[KnockoutResult]]):
    """
    Eligibility Filter Agent (layer 2)

    Rule-based KnockoutEngine only. A failing lender is marked locked,
    never dropped, so the output lines up one-to-one with the input.
    """

    name = "EligibilityAgent"

    def __init__(self):
        super().__init__()
        self.engine = KnockoutEngine()

    def _process(self, input_data: EligibilityInput) -> list[KnockoutResult]:
        results = [
            self.engine.evaluate(input_data.context, lender)
            for lender in input_data.lenders
        ]
        locked = sum(1 for r in results if r.locked)
        self.logger.info(f"Eligible: {len(results) - locked}, locked: {locked}")
        return results
