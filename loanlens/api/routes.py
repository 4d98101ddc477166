"""
LoanLens API router
"""

from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException

from loanlens.errors import InvalidInput, ReferenceDataUnavailable
from loanlens.data_sources import get_reference_store
from loanlens.domain.knockouts import KnockoutEngine
from loanlens.domain.strategy import STRATEGY_TABLE
from loanlens.llm import get_justification_generator
from loanlens.pipeline import RecommendationPipeline
from loanlens.schemas.applicant import ApplicantProfile
from loanlens.schemas.lender import LenderProfile
from loanlens.schemas.request import RecommendationRequest
from loanlens.schemas.results import RecommendationResponse, StrategyWeights

router = APIRouter()


@lru_cache
def get_pipeline() -> RecommendationPipeline:
    """Pipeline for the configured store and generator (replaced in tests)"""
    return RecommendationPipeline(
        store=get_reference_store(),
        generator=get_justification_generator(),
    )


@router.post("/recommendations", response_model=RecommendationResponse)
async def create_recommendation(
    request: RecommendationRequest,
    pipeline: RecommendationPipeline = Depends(get_pipeline),
) -> RecommendationResponse:
    """
    Rank lenders for one applicant

    - university tier and urgency zone from the applicant profile
    - knockout rules per lender (locked lenders stay in the list)
    - strategy weights from the urgency zone
    - pillar scores, ranking and a justification per lender
    """
    try:
        return await pipeline.arun(request)

    except InvalidInput as e:
        raise HTTPException(
            status_code=422,
            detail={"message": str(e), "errors": e.errors},
        )
    except ReferenceDataUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.get("/lenders", response_model=list[LenderProfile])
def list_lenders(
    pipeline: RecommendationPipeline = Depends(get_pipeline),
) -> list[LenderProfile]:
    """Active lenders in preferred order"""
    try:
        return pipeline.store.list_active_lenders()
    except ReferenceDataUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.get("/strategies", response_model=list[StrategyWeights])
async def list_strategies() -> list[StrategyWeights]:
    """Pillar weights per urgency zone"""
    return list(STRATEGY_TABLE.values())


@router.get("/knockout-rules")
async def list_knockout_rules():
    """Knockout rules in evaluation order"""
    return {"rules": KnockoutEngine().rule_names}


@router.get("/schema/request")
async def get_request_schema():
    """Recommendation request schema"""
    return RecommendationRequest.model_json_schema()


@router.get("/schema/applicant")
async def get_applicant_schema():
    """Applicant profile schema"""
    return ApplicantProfile.model_json_schema()


@router.get("/schema/response")
async def get_response_schema():
    """Recommendation response schema"""
    return RecommendationResponse.model_json_schema()
