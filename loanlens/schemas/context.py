"""
Scoring context schema
Canonical inputs produced by the Normalizer and consumed by every later stage.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict

from .applicant import ApplicantProfile


class UniversityTier(str, Enum):
    """University tier derived from the QS rank"""
    S = "S"  # QS 1-100
    A = "A"  # QS 101-300
    B = "B"  # QS 301-500
    C = "C"  # everything else, unranked or unknown

    @property
    def level(self) -> int:
        """Ordinal level, higher is better"""
        return _TIER_LEVELS[self]


_TIER_LEVELS = {
    UniversityTier.S: 4,
    UniversityTier.A: 3,
    UniversityTier.B: 2,
    UniversityTier.C: 1,
}


class UrgencyZone(str, Enum):
    """How soon the applicant needs funding"""
    RED = "RED"        # urgent, speed first
    YELLOW = "YELLOW"  # moderate, balanced
    GREEN = "GREEN"    # relaxed, cost first

    @property
    def level(self) -> int:
        """Ordinal urgency, higher is more urgent"""
        return _URGENCY_LEVELS[self]


_URGENCY_LEVELS = {
    UrgencyZone.GREEN: 1,
    UrgencyZone.YELLOW: 2,
    UrgencyZone.RED: 3,
}


class NormalizedFinancials(BaseModel):
    """Financial inputs in canonical units (INR)"""
    model_config = ConfigDict(frozen=True)

    loan_amount: float
    co_applicant_monthly_income: Optional[float] = None
    co_applicant_annual_income: Optional[float] = None
    loan_to_income_ratio: Optional[float] = Field(
        default=None,
        description="Loan amount / co-applicant annual income"
    )
    employment_type: Optional[str] = None
    has_collateral: bool = False
    collateral_value: Optional[float] = None
    credit_score: Optional[int] = None


class ScoringContext(BaseModel):
    """
    Normalizer output

    Attached to the run once and never mutated afterwards.
    """
    model_config = ConfigDict(frozen=True)

    applicant: ApplicantProfile
    university_id: Optional[str] = None
    qs_rank: Optional[int] = None
    tier: UniversityTier
    destination: str = Field(description="Canonical destination country code")
    course_type: Optional[str] = None
    days_until_intake: int
    effective_days: int = Field(description="Days left after the processing buffer")
    urgency_zone: UrgencyZone
    financials: NormalizedFinancials
