"""
Request schema
The single object a caller submits to get a recommendation.
"""

from typing import Literal, Optional
from pydantic import BaseModel, Field, ConfigDict, model_validator

from .applicant import ApplicantProfile


class PriorOverride(BaseModel):
    """
    Earlier admin decision on this applicant, if any

    Optional feedback signal: an accepted lender gets a small boost,
    a rejected one a small cut.
    """
    model_config = ConfigDict(frozen=True)

    lender_id: str
    decision: Literal["accepted", "rejected"]
    reason: Optional[str] = None


class RecommendationRequest(BaseModel):
    """
    Recommendation request

    Either an inline applicant or an applicant_id to look up.
    lender_ids=None means "all active lenders".
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "applicant": ApplicantProfile.model_config["json_schema_extra"]["example"],
                "lender_ids": None,
                "include_locked": True
            }
        }
    )

    applicant: Optional[ApplicantProfile] = None
    applicant_id: Optional[str] = None
    lender_ids: Optional[list[str]] = Field(
        default=None,
        description="Candidate lenders; omit to use every active lender"
    )
    include_locked: bool = Field(
        default=True,
        description="Keep locked lenders in the output (ranked below eligible ones)"
    )
    prior_override: Optional[PriorOverride] = None

    @model_validator(mode="after")
    def _require_applicant(self):
        if self.applicant is None and not self.applicant_id:
            raise ValueError("either applicant or applicant_id is required")
        return self
