"""
Pipeline Orchestrator
Controls the order the agents run in and assembles the response.
"""

import asyncio
from datetime import date
from typing import Any, Optional, Union

from loguru import logger
from pydantic import ValidationError

from loanlens.config import settings
from loanlens.errors import InvalidInput, ReferenceDataUnavailable
from loanlens.data_sources.reference_store import ReferenceDataStore
from loanlens.domain.strategy import StrategySelector
from loanlens.llm.justification import JustificationGenerator
from loanlens.schemas.applicant import ApplicantProfile, UniversityRecord
from loanlens.schemas.context import ScoringContext
from loanlens.schemas.lender import LenderProfile
from loanlens.schemas.request import RecommendationRequest
from loanlens.schemas.results import (
    RecommendationContext,
    RecommendationResponse,
    RecommendationResult,
    ResponseMetadata,
    StrategyWeights,
)
from loanlens.agents.normalize_agent import NormalizeAgent, NormalizeInput
from loanlens.agents.eligibility_agent import EligibilityAgent, EligibilityInput
from loanlens.agents.strategy_agent import StrategyAgent
from loanlens.agents.score_agent import ScoreAgent, ScoreInput
from loanlens.agents.rank_agent import RankAgent, RankInput
from loanlens.agents.explain_agent import ExplainAgent, ExplainInput


class RecommendationPipeline:
    """
    Recommendation pipeline

    [Phase 1: input]
    Request validation → applicant / lender / university lookup

    [Phase 2: four layers]
    Normalize → Eligibility (knockouts) → Strategy → Score

    [Phase 3: output]
    Rank → Explain (justifications, template fallback)

    Each call fetches its own reference data; nothing is shared between
    requests.
    """

    def __init__(
        self,
        store: ReferenceDataStore,
        generator: Optional[JustificationGenerator] = None,
        strategist: Optional[StrategySelector] = None,
        version: Optional[str] = None,
        review_threshold: Optional[float] = None,
        justification_timeout: Optional[float] = None,
        request_timeout: Optional[float] = None,
        concurrency: Optional[int] = None,
    ):
        self.store = store
        self.version = version or settings.ALGORITHM_VERSION
        self.review_threshold = (
            review_threshold if review_threshold is not None
            else settings.HUMAN_REVIEW_THRESHOLD
        )

        self.normalize_agent = NormalizeAgent()
        self.eligibility_agent = EligibilityAgent()
        self.strategy_agent = StrategyAgent(strategist)
        self.score_agent = ScoreAgent()
        self.rank_agent = RankAgent()
        self.explain_agent = ExplainAgent(
            generator=generator,
            concurrency=concurrency,
            call_timeout=justification_timeout,
            deadline=request_timeout,
        )

        self.logger = logger.bind(component="Pipeline")

    def run(
        self,
        request: Union[RecommendationRequest, dict],
        today: Optional[date] = None,
    ) -> RecommendationResponse:
        """Synchronous entry point. Must not be called from a running event loop."""
        return asyncio.run(self.arun(request, today=today))

    async def arun(
        self,
        request: Union[RecommendationRequest, dict],
        today: Optional[date] = None,
    ) -> RecommendationResponse:
        """
        Run the full pipeline.

        Args:
            request: RecommendationRequest or its dict form
            today: reference date for the urgency zone, defaults to today

        Returns:
            RecommendationResponse ordered by rank

        Raises:
            InvalidInput: malformed request or unknown applicant
            ReferenceDataUnavailable: lenders cannot be fetched or none remain
        """
        self.logger.info("Starting recommendation pipeline")

        # 1. validate the request and resolve the applicant
        self.logger.info("Step 1: Validating request...")
        request = self._parse_request(request)
        applicant = await self._resolve_applicant(request)

        # 2. reference data for this run
        self.logger.info("Step 2: Fetching reference data...")
        lenders = await self._fetch_lenders(request)
        university = await self._resolve_university(applicant)
        self.logger.info(f"Candidate lenders: {len(lenders)}")

        # 3. normalize
        self.logger.info("Step 3: Normalizing applicant...")
        context = self.normalize_agent.run(NormalizeInput(
            applicant=applicant,
            university=university,
            today=today,
        ))

        # 4. knockouts
        self.logger.info("Step 4: Running eligibility filter...")
        knockouts = self.eligibility_agent.run(EligibilityInput(context, lenders))

        # 5. strategy
        self.logger.info("Step 5: Selecting strategy...")
        weights = self.strategy_agent.run(context)

        # 6. pillar scores
        self.logger.info("Step 6: Scoring lenders...")
        scored = self.score_agent.run(ScoreInput(
            context=context,
            lenders=lenders,
            knockouts=knockouts,
            weights=weights,
            prior_override=request.prior_override,
        ))

        # 7. rank
        self.logger.info("Step 7: Ranking lenders...")
        ranked = self.rank_agent.run(RankInput(scored, request.include_locked))

        # 8. justifications
        self.logger.info("Step 8: Generating justifications...")
        results = await self.explain_agent.arun(ExplainInput(ranked))

        response = self._build_response(applicant, context, weights, results, len(lenders))
        self.logger.info(
            f"Pipeline complete: {response.eligible_count} eligible, "
            f"{response.locked_count} locked, top score {response.top_score}"
        )
        return response

    # ==================== Input ====================
    def _parse_request(self, request: Union[RecommendationRequest, dict]) -> RecommendationRequest:
        if isinstance(request, RecommendationRequest):
            return request
        try:
            return RecommendationRequest.model_validate(request)
        except ValidationError as e:
            raise InvalidInput("invalid recommendation request", errors=e.errors()) from e

    async def _resolve_applicant(self, request: RecommendationRequest) -> ApplicantProfile:
        if request.applicant is not None:
            return request.applicant

        try:
            applicant = await asyncio.to_thread(self.store.get_applicant, request.applicant_id)
        except ValidationError as e:
            raise InvalidInput(
                f"stored applicant {request.applicant_id} is invalid", errors=e.errors()
            ) from e

        if applicant is None:
            raise InvalidInput(f"unknown applicant: {request.applicant_id}")
        return applicant

    async def _fetch_lenders(self, request: RecommendationRequest) -> list[LenderProfile]:
        if request.lender_ids is None:
            lenders = await asyncio.to_thread(self.store.list_active_lenders)
        else:
            lenders = await asyncio.to_thread(self.store.get_lenders, request.lender_ids)
            found = {lender.id for lender in lenders}
            missing = [i for i in request.lender_ids if i not in found]
            if missing:
                self.logger.warning(f"Unknown lender ids ignored: {missing}")

        if not lenders:
            raise ReferenceDataUnavailable("no candidate lenders available")
        return lenders

    async def _resolve_university(self, applicant: ApplicantProfile) -> Optional[UniversityRecord]:
        if applicant.university is not None:
            return applicant.university
        if not applicant.university_id:
            return None

        university = await asyncio.to_thread(self.store.get_university, applicant.university_id)
        if university is None:
            self.logger.warning(
                f"University {applicant.university_id} not found, treating as unranked"
            )
        return university

    # ==================== Output ====================
    def _build_response(
        self,
        applicant: ApplicantProfile,
        context: ScoringContext,
        weights: StrategyWeights,
        results: list[RecommendationResult],
        total_candidates: int,
    ) -> RecommendationResponse:
        metadata = ResponseMetadata(version=self.version)

        eligible = [r for r in results if r.eligible]
        top_score = results[0].composite_score if results else 0.0

        return RecommendationResponse(
            metadata=metadata,
            context=RecommendationContext(
                tier=context.tier,
                qs_rank=context.qs_rank,
                urgency_zone=context.urgency_zone,
                days_until_intake=context.days_until_intake,
                effective_days=context.effective_days,
                strategy=weights.name,
                weights={
                    "future": weights.future,
                    "financial": weights.financial,
                    "past": weights.past,
                },
            ),
            results=results,
            total_candidates=total_candidates,
            eligible_count=len(eligible),
            locked_count=total_candidates - len(eligible),
            top_score=top_score,
            needs_human_review=top_score < self.review_threshold,
            inputs_snapshot=self._snapshot(applicant, context, metadata),
        )

    @staticmethod
    def _snapshot(
        applicant: ApplicantProfile,
        context: ScoringContext,
        metadata: ResponseMetadata,
    ) -> dict[str, Any]:
        """Inputs used for this run, kept with the recommendation history"""
        return {
            "applicant_id": applicant.applicant_id,
            "loan_amount": applicant.loan_amount,
            "study_destination": context.destination,
            "co_applicant_income": context.financials.co_applicant_monthly_income,
            "intake": applicant.intake.isoformat(),
            "university_id": context.university_id,
            "timestamp": metadata.computed_at.isoformat(),
        }
