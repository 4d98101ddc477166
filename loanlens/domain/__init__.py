"""
LoanLens domain logic package
Rule-based normalization, knockouts, strategy, scoring and ranking.
No LLM is involved in this layer.
"""

from .normalization import Normalizer, derive_tier, derive_urgency
from .knockouts import KnockoutEngine
from .strategy import Strategist, StrategySelector, STRATEGY_TABLE
from .scoring import PillarScoringEngine, LOCKED_PENALTY, NEUTRAL_SCORE
from .ranking import Ranker

__all__ = [
    "Normalizer",
    "derive_tier",
    "derive_urgency",
    "KnockoutEngine",
    "Strategist",
    "StrategySelector",
    "STRATEGY_TABLE",
    "PillarScoringEngine",
    "LOCKED_PENALTY",
    "NEUTRAL_SCORE",
    "Ranker",
]
