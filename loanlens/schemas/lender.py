"""
Lender schema
Static reference data per lender. Read-only during a recommendation run.
"""

from typing import Optional
from pydantic import BaseModel, Field, ConfigDict

from .context import UniversityTier


class LenderProfile(BaseModel):
    """
    Lender reference record

    Every rule and scoring input is optional. A missing eligibility field
    means the rule does not apply; a missing history field makes the
    scorer fall back to its neutral default.
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": "lender_hdfc_credila",
                "name": "HDFC Credila",
                "code": "CREDILA",
                "loan_amount_min": 500000,
                "loan_amount_max": 7500000,
                "supported_countries": ["USA", "UK", "CANADA"],
                "min_co_applicant_income": 40000,
                "collateral_required_above": 4000000,
                "approval_rate": 0.78,
                "processing_time_days": 10,
                "preferred_rank": 1,
                "tier_approval_rates": {"S": 0.92, "A": 0.85, "B": 0.7, "C": 0.5}
            }
        }
    )

    # === Identity ===
    id: str
    name: str
    code: Optional[str] = None
    is_active: bool = True

    # === Eligibility rules (knockouts) ===
    loan_amount_min: Optional[float] = Field(default=None, ge=0)
    loan_amount_max: Optional[float] = Field(default=None, ge=0)
    supported_countries: list[str] = Field(
        default_factory=list,
        description="Destinations funded by the lender (empty means all)"
    )
    min_co_applicant_income: Optional[float] = Field(
        default=None,
        ge=0,
        description="Co-applicant monthly income floor (INR)"
    )
    income_expectations_max: Optional[float] = Field(
        default=None,
        ge=0,
        description="Upper end of the co-applicant monthly income the lender targets"
    )
    collateral_required_above: Optional[float] = Field(
        default=None,
        ge=0,
        description="Loan amount above which collateral is mandatory"
    )
    min_university_tier: Optional[UniversityTier] = None
    min_credit_score: Optional[int] = Field(default=None, ge=300, le=900)

    # === Commercials ===
    interest_rate_min: Optional[float] = None
    interest_rate_max: Optional[float] = None

    # === Track record ===
    approval_rate: Optional[float] = Field(default=None, ge=0, le=1)
    processing_time_days: Optional[int] = Field(default=None, ge=0)
    preferred_rank: Optional[int] = Field(default=None, ge=1)

    # === Historical approval pattern ===
    tier_approval_rates: dict[UniversityTier, float] = Field(default_factory=dict)
    destination_approval_rates: dict[str, float] = Field(default_factory=dict)
    course_approval_rates: dict[str, float] = Field(default_factory=dict)
    university_grade_mapping: dict[str, UniversityTier] = Field(
        default_factory=dict,
        description="Per-lender tier override by university id"
    )
