"""
Result schemas
Outputs of each pipeline stage and the final response.
"""

from datetime import datetime, timezone
from typing import Annotated, Literal, Optional, Union
from pydantic import BaseModel, Field, ConfigDict, computed_field, model_validator

from .context import UniversityTier, UrgencyZone
from .lender import LenderProfile


class KnockoutFailure(BaseModel):
    """A single failed knockout rule"""
    model_config = ConfigDict(frozen=True)

    rule: str = Field(examples=["max_loan_amount"])
    reason: str = Field(
        description="Human-readable failure reason",
        examples=["Requested ₹90,00,000 exceeds the ₹75,00,000 maximum"]
    )
    hint: str = Field(description="Remediation that would clear this rule")
    impact: float = Field(description="Estimated score points restored if resolved")


class Eligible(BaseModel):
    """Lender passed every knockout rule"""
    model_config = ConfigDict(frozen=True)

    status: Literal["eligible"] = "eligible"


class Locked(BaseModel):
    """Lender failed one or more knockout rules; kept and ranked lower"""
    model_config = ConfigDict(frozen=True)

    status: Literal["locked"] = "locked"
    failures: list[KnockoutFailure] = Field(min_length=1)


Eligibility = Annotated[Union[Eligible, Locked], Field(discriminator="status")]


class KnockoutResult(BaseModel):
    """
    Eligibility Filter output

    Carries every failure reason, not just the first, so the unlock
    hint can be chosen from the full list.
    """
    model_config = ConfigDict(frozen=True)

    lender_id: str
    eligibility: Eligibility

    @computed_field
    @property
    def eligible(self) -> bool:
        return isinstance(self.eligibility, Eligible)

    @computed_field
    @property
    def locked(self) -> bool:
        return isinstance(self.eligibility, Locked)

    @computed_field
    @property
    def reasons(self) -> list[str]:
        return [f.reason for f in self.failures]

    @property
    def failures(self) -> list[KnockoutFailure]:
        if isinstance(self.eligibility, Locked):
            return list(self.eligibility.failures)
        return []


class StrategyWeights(BaseModel):
    """Strategist output: pillar weights for the active urgency zone"""
    model_config = ConfigDict(frozen=True)

    name: str = Field(examples=["SPEED_PRIORITY", "BALANCED", "COST_OPTIMIZED"])
    zone: UrgencyZone
    future: float = Field(ge=0, le=1)
    financial: float = Field(ge=0, le=1)
    past: float = Field(ge=0, le=1)

    @model_validator(mode="after")
    def _check_sum(self):
        total = self.future + self.financial + self.past
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"strategy weights must sum to 1.0, got {total}")
        return self


class PillarScore(BaseModel):
    """One pillar sub-score with its reasoning"""
    model_config = ConfigDict(frozen=True)

    pillar: str = Field(examples=["future", "financial", "past"])
    score: float = Field(ge=0, le=100)
    reason: str


class ScoreBreakdown(BaseModel):
    """Per-lender pillar scores and weighted composite"""
    model_config = ConfigDict(frozen=True)

    future: float = Field(ge=0, le=100)
    financial: float = Field(ge=0, le=100)
    past: float = Field(ge=0, le=100)
    base_composite: float = Field(description="Weighted pillar sum before penalties")
    penalty: float = Field(default=0.0, description="Locked-lender penalty")
    adjustment: float = Field(default=0.0, description="Prior-override adjustment")
    composite: float
    details: list[PillarScore] = Field(default_factory=list)


class ScoredLender(BaseModel):
    """Pillar Scorer output for one lender"""
    model_config = ConfigDict(frozen=True)

    lender: LenderProfile
    knockout: KnockoutResult
    breakdown: ScoreBreakdown


class RankedLender(BaseModel):
    """Ranker output for one lender, before justification"""
    model_config = ConfigDict(frozen=True)

    lender: LenderProfile
    knockout: KnockoutResult
    breakdown: ScoreBreakdown
    rank: int = Field(ge=1)
    unlock_hint: Optional[str] = None


class RecommendationResult(BaseModel):
    """Final per-lender record"""
    model_config = ConfigDict(frozen=True)

    lender_id: str
    lender_name: str
    composite_score: float
    rank: int = Field(ge=1)
    eligible: bool
    locked: bool
    reasons: list[str] = Field(default_factory=list)
    unlock_hint: Optional[str] = None
    justification: str
    justification_source: Literal["generator", "template"] = "template"
    breakdown: ScoreBreakdown


class ResponseMetadata(BaseModel):
    """Traceability metadata"""
    version: str = Field(description="Ranking-algorithm revision")
    computed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class RecommendationContext(BaseModel):
    """Normalized context and strategy used for the run"""
    tier: UniversityTier
    qs_rank: Optional[int] = None
    urgency_zone: UrgencyZone
    days_until_intake: int
    effective_days: int
    strategy: str
    weights: dict[str, float]


class RecommendationResponse(BaseModel):
    """
    Pipeline output

    Ordered by rank. Recomputed fresh for every request.
    """
    metadata: ResponseMetadata
    context: RecommendationContext
    results: list[RecommendationResult] = Field(default_factory=list)

    # summary
    total_candidates: int
    eligible_count: int
    locked_count: int
    top_score: float = 0.0
    needs_human_review: bool = False
    inputs_snapshot: dict = Field(default_factory=dict)
