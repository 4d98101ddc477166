"""
LoanLens Agent package
Each agent has a single responsibility and fixed input/output schemas.
"""

from .base import BaseAgent
from .normalize_agent import NormalizeAgent, NormalizeInput
from .eligibility_agent import EligibilityAgent, EligibilityInput
from .strategy_agent import StrategyAgent
from .score_agent import ScoreAgent, ScoreInput
from .rank_agent import RankAgent, RankInput
from .explain_agent import ExplainAgent, ExplainInput

__all__ = [
    "BaseAgent",
    "NormalizeAgent",
    "NormalizeInput",
    "EligibilityAgent",
    "EligibilityInput",
    "StrategyAgent",
    "ScoreAgent",
    "ScoreInput",
    "RankAgent",
    "RankInput",
    "ExplainAgent",
    "ExplainInput",
]
