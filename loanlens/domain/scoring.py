"""
Pillar scoring engine
Scores every candidate lender on the Future, Financial and Past pillars
and combines them with the strategy weights.
"""

from typing import Optional
from loguru import logger

from loanlens.domain.normalization import effective_tier, normalize_country, normalize_course
from loanlens.schemas.context import ScoringContext
from loanlens.schemas.lender import LenderProfile
from loanlens.schemas.request import PriorOverride
from loanlens.schemas.results import (
    KnockoutResult,
    PillarScore,
    ScoreBreakdown,
    ScoredLender,
    StrategyWeights,
)

# Midpoint of the 0-100 range, used when a lender has no data for a component
NEUTRAL_SCORE = 50.0

OVERRIDE_ADJUSTMENT = 5.0

# Subtracted from a locked lender's composite. Exceeds the 0-100 pillar
# range plus the widest gap two overrides can open, so every locked lender
# sits below every eligible one; a constant keeps locked lenders in order.
LOCKED_PENALTY = 120.0


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def _mean(values: list[float]) -> float:
    return sum(values) / len(values)


class PillarScoringEngine:
    """
    Rule-based pillar scorer

    Each pillar is normalized to 0-100. Eligible and locked lenders are
    scored the same way; locked ones then take LOCKED_PENALTY.
    """

    # Processing days upper bound -> score
    PROCESSING_SPEED_BANDS = [(7, 100.0), (15, 80.0), (30, 60.0)]
    SLOW_PROCESSING_SCORE = 40.0

    # preferred_rank -> score
    PREFERRED_RANK_SCORES = {1: 100.0, 2: 90.0, 3: 80.0}
    UNRANKED_PREFERENCE_SCORE = 60.0

    STABLE_EMPLOYMENT = {"salaried", "government"}
    STRONG_CO_APPLICANT_INCOME = 75000  # INR / month
    STABILITY_BONUS = 5.0
    STRONG_INCOME_BONUS = 5.0
    COLLATERAL_BONUS = 5.0

    def score(
        self,
        context: ScoringContext,
        lender: LenderProfile,
        knockout: KnockoutResult,
        weights: StrategyWeights,
        prior_override: Optional[PriorOverride] = None,
    ) -> ScoredLender:
        """
        Score one lender.

        Args:
            context: normalized scoring context
            lender: lender reference record
            knockout: the lender's eligibility outcome
            weights: active strategy weights
            prior_override: optional earlier admin decision

        Returns:
            ScoredLender
        """
        future = self._score_future(context, lender)
        financial = self._score_financial(context, lender)
        past = self._score_past(lender)

        base = round(
            weights.future * future.score
            + weights.financial * financial.score
            + weights.past * past.score,
            2,
        )
        penalty = LOCKED_PENALTY if knockout.locked else 0.0

        adjustment = 0.0
        if prior_override and prior_override.lender_id == lender.id:
            adjustment = (
                OVERRIDE_ADJUSTMENT if prior_override.decision == "accepted"
                else -OVERRIDE_ADJUSTMENT
            )

        breakdown = ScoreBreakdown(
            future=future.score,
            financial=financial.score,
            past=past.score,
            base_composite=base,
            penalty=penalty,
            adjustment=adjustment,
            composite=round(base - penalty + adjustment, 2),
            details=[future, financial, past],
        )

        logger.debug(
            f"Score for {lender.id}: F={future.score} Fin={financial.score} "
            f"P={past.score} -> {breakdown.composite}"
        )
        return ScoredLender(lender=lender, knockout=knockout, breakdown=breakdown)

    def _score_future(
        self, context: ScoringContext, lender: LenderProfile
    ) -> PillarScore:
        """Future pillar: lender's approval history for similar profiles"""
        components = []
        reasons = []

        tier = effective_tier(context, lender)
        tier_rate = lender.tier_approval_rates.get(tier)
        if tier_rate is not None:
            components.append(tier_rate * 100)
            reasons.append(f"tier {tier.value} approval {tier_rate:.0%}")

        destination_rates = {
            normalize_country(k): v for k, v in lender.destination_approval_rates.items()
        }
        destination_rate = destination_rates.get(context.destination)
        if destination_rate is not None:
            components.append(destination_rate * 100)
            reasons.append(f"{context.destination} approval {destination_rate:.0%}")

        if context.course_type:
            course_rates = {
                normalize_course(k): v for k, v in lender.course_approval_rates.items()
            }
            course_rate = course_rates.get(context.course_type)
            if course_rate is not None:
                components.append(course_rate * 100)
                reasons.append(f"{context.course_type} approval {course_rate:.0%}")

        if not components:
            return PillarScore(
                pillar="future",
                score=NEUTRAL_SCORE,
                reason="No approval history for this profile, neutral score",
            )

        return PillarScore(
            pillar="future",
            score=round(_clamp(_mean(components)), 1),
            reason=", ".join(reasons),
        )

    def _score_financial(
        self, context: ScoringContext, lender: LenderProfile
    ) -> PillarScore:
        """Financial pillar: loan amount and co-applicant income against lender bands"""
        financials = context.financials
        components = []
        reasons = []

        # loan amount within the lender's band
        amount_fit = self._amount_fit(financials.loan_amount, lender)
        if amount_fit is not None:
            components.append(amount_fit[0])
            reasons.append(amount_fit[1])

        # co-applicant income against expectations
        income_fit = self._income_fit(financials.co_applicant_monthly_income, lender)
        if income_fit is not None:
            components.append(income_fit[0])
            reasons.append(income_fit[1])

        if components:
            score = _mean(components)
        else:
            score = NEUTRAL_SCORE
            reasons.append("No lender bands configured, neutral score")

        if financials.employment_type in self.STABLE_EMPLOYMENT:
            score += self.STABILITY_BONUS
            reasons.append("stable co-applicant employment")
        income = financials.co_applicant_monthly_income
        if income is not None and income >= self.STRONG_CO_APPLICANT_INCOME:
            score += self.STRONG_INCOME_BONUS
            reasons.append("strong co-applicant income")
        if financials.has_collateral:
            score += self.COLLATERAL_BONUS
            reasons.append("collateral offered")

        return PillarScore(
            pillar="financial",
            score=round(_clamp(score), 1),
            reason=", ".join(reasons),
        )

    def _amount_fit(
        self, amount: float, lender: LenderProfile
    ) -> Optional[tuple[float, str]]:
        low = lender.loan_amount_min
        high = lender.loan_amount_max
        if low is None and high is None:
            return None

        if low is not None and amount < low:
            return 30.0, "amount below lender minimum"
        if high is not None and amount > high:
            return 20.0, "amount above lender maximum"
        if high is None:
            return 80.0, "amount within lender range"

        # lower utilisation of the lender's ceiling leaves more headroom
        utilisation = amount / high if high else 1.0
        if utilisation <= 0.7:
            return 100.0, f"uses {utilisation:.0%} of lender maximum"
        if utilisation <= 0.85:
            return 90.0, f"uses {utilisation:.0%} of lender maximum"
        return 75.0, f"uses {utilisation:.0%} of lender maximum (near limit)"

    def _income_fit(
        self, income: Optional[float], lender: LenderProfile
    ) -> Optional[tuple[float, str]]:
        floor = lender.min_co_applicant_income
        ceiling = lender.income_expectations_max
        if floor is None and ceiling is None:
            return None
        if income is None:
            return 20.0, "no co-applicant income"

        if floor:
            ratio = income / floor
            if ratio >= 2.0:
                fit = 100.0
            elif ratio >= 1.5:
                fit = 90.0
            elif ratio >= 1.0:
                fit = 75.0
            else:
                fit = 60.0 * ratio
            reason = f"co-applicant income {ratio:.1f}x lender floor"
        else:
            fit = 80.0
            reason = "co-applicant income within lender expectations"

        if ceiling is not None and income > ceiling:
            fit = min(fit, 70.0)
            reason = "co-applicant income above the lender's target segment"

        return fit, reason

    def _score_past(self, lender: LenderProfile) -> PillarScore:
        """Past pillar: approval rate, processing speed and partner preference"""
        components = []
        reasons = []

        if lender.approval_rate is not None:
            components.append(lender.approval_rate * 100)
            reasons.append(f"approval rate {lender.approval_rate:.0%}")

        if lender.processing_time_days is not None:
            days = lender.processing_time_days
            speed = self.SLOW_PROCESSING_SCORE
            for limit, band_score in self.PROCESSING_SPEED_BANDS:
                if days <= limit:
                    speed = band_score
                    break
            components.append(speed)
            reasons.append(f"processes in ~{days} days")

        if lender.preferred_rank is not None:
            components.append(
                self.PREFERRED_RANK_SCORES.get(
                    lender.preferred_rank, self.UNRANKED_PREFERENCE_SCORE
                )
            )
            reasons.append(f"partner priority {lender.preferred_rank}")

        if not components:
            return PillarScore(
                pillar="past",
                score=NEUTRAL_SCORE,
                reason="No track record on file, neutral score",
            )

        return PillarScore(
            pillar="past",
            score=round(_clamp(_mean(components)), 1),
            reason=", ".join(reasons),
        )
