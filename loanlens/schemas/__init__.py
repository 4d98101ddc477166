"""
LoanLens schema package
Input and output models of every pipeline stage.
"""

from .applicant import ApplicantProfile, CoApplicant, EmploymentType, UniversityRecord
from .context import NormalizedFinancials, ScoringContext, UniversityTier, UrgencyZone
from .lender import LenderProfile
from .request import PriorOverride, RecommendationRequest
from .results import (
    Eligible,
    Locked,
    KnockoutFailure,
    KnockoutResult,
    StrategyWeights,
    PillarScore,
    ScoreBreakdown,
    ScoredLender,
    RankedLender,
    RecommendationResult,
    RecommendationContext,
    RecommendationResponse,
    ResponseMetadata,
)

__all__ = [
    "ApplicantProfile",
    "CoApplicant",
    "EmploymentType",
    "UniversityRecord",
    "NormalizedFinancials",
    "ScoringContext",
    "UniversityTier",
    "UrgencyZone",
    "LenderProfile",
    "PriorOverride",
    "RecommendationRequest",
    "Eligible",
    "Locked",
    "KnockoutFailure",
    "KnockoutResult",
    "StrategyWeights",
    "PillarScore",
    "ScoreBreakdown",
    "ScoredLender",
    "RankedLender",
    "RecommendationResult",
    "RecommendationContext",
    "RecommendationResponse",
    "ResponseMetadata",
]
