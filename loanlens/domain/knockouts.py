"""
Knockout engine ("Bouncer")
Applies hard eligibility rules per lender. A failing lender is locked,
never removed from the candidate set.
"""

from typing import Callable, Optional
from loguru import logger

from loanlens.domain.normalization import effective_tier, normalize_country
from loanlens.schemas.context import ScoringContext, UniversityTier
from loanlens.schemas.lender import LenderProfile
from loanlens.schemas.results import Eligible, KnockoutFailure, KnockoutResult, Locked

# (passed, reason, hint)
CheckResult = tuple[bool, str, str]


def format_inr(amount: float) -> str:
    return f"₹{amount:,.0f}"


class KnockoutEngine:
    """
    Rule-based knockout engine

    Rules run in a fixed order and every failure is collected.
    A rule whose lender field is not configured always passes.
    """

    # Estimated composite points recovered when the rule is cleared.
    # Used to pick the single most useful unlock hint.
    RULE_IMPACTS = {
        "destination_supported": 30.0,
        "min_loan_amount": 10.0,
        "max_loan_amount": 22.0,
        "co_applicant_income_floor": 20.0,
        "collateral_required": 15.0,
        "min_university_tier": 25.0,
        "min_credit_score": 12.0,
    }

    def __init__(self):
        # ordered rule registry: rule name -> check function
        self._rules: dict[str, Callable[[ScoringContext, LenderProfile], CheckResult]] = {
            "destination_supported": self._check_destination,
            "min_loan_amount": self._check_min_loan_amount,
            "max_loan_amount": self._check_max_loan_amount,
            "co_applicant_income_floor": self._check_co_applicant_income,
            "collateral_required": self._check_collateral,
            "min_university_tier": self._check_university_tier,
            "min_credit_score": self._check_credit_score,
        }

    @property
    def rule_names(self) -> list[str]:
        return list(self._rules)

    def evaluate(self, context: ScoringContext, lender: LenderProfile) -> KnockoutResult:
        """
        Run every knockout rule for one lender.

        Args:
            context: normalized scoring context
            lender: lender reference record

        Returns:
            KnockoutResult: Eligible, or Locked with all failures
        """
        failures = []

        for rule, check in self._rules.items():
            passed, reason, hint = check(context, lender)
            if not passed:
                failures.append(KnockoutFailure(
                    rule=rule,
                    reason=reason,
                    hint=hint,
                    impact=self.RULE_IMPACTS[rule],
                ))

        eligibility = Locked(failures=failures) if failures else Eligible()
        result = KnockoutResult(lender_id=lender.id, eligibility=eligibility)

        logger.debug(
            f"Knockout result for {lender.id}: "
            f"{'locked ' + str([f.rule for f in failures]) if failures else 'eligible'}"
        )
        return result

    # === Individual rules ===

    def _check_destination(
        self, context: ScoringContext, lender: LenderProfile
    ) -> CheckResult:
        if not lender.supported_countries:
            return True, "", ""
        supported = [normalize_country(c) for c in lender.supported_countries]
        if context.destination in supported:
            return True, "", ""
        return (
            False,
            f"{lender.name} does not fund study in {context.destination}",
            f"Consider a university in a supported destination ({', '.join(supported)})",
        )

    def _check_min_loan_amount(
        self, context: ScoringContext, lender: LenderProfile
    ) -> CheckResult:
        if lender.loan_amount_min is None:
            return True, "", ""
        amount = context.financials.loan_amount
        if amount >= lender.loan_amount_min:
            return True, "", ""
        return (
            False,
            f"Requested loan amount {format_inr(amount)} is below the "
            f"{format_inr(lender.loan_amount_min)} minimum",
            f"Increase the loan amount to at least {format_inr(lender.loan_amount_min)}",
        )

    def _check_max_loan_amount(
        self, context: ScoringContext, lender: LenderProfile
    ) -> CheckResult:
        if lender.loan_amount_max is None:
            return True, "", ""
        amount = context.financials.loan_amount
        if amount <= lender.loan_amount_max:
            return True, "", ""
        return (
            False,
            f"Requested loan amount {format_inr(amount)} exceeds the "
            f"{format_inr(lender.loan_amount_max)} maximum",
            f"Reduce the loan amount to {format_inr(lender.loan_amount_max)} or less, "
            f"funding the gap through higher co-applicant income or savings",
        )

    def _check_co_applicant_income(
        self, context: ScoringContext, lender: LenderProfile
    ) -> CheckResult:
        floor = lender.min_co_applicant_income
        if floor is None:
            return True, "", ""
        income = context.financials.co_applicant_monthly_income
        if income is None:
            return (
                False,
                f"A co-applicant earning at least {format_inr(floor)}/month is required",
                f"Add a co-applicant with monthly income of {format_inr(floor)} or more",
            )
        if income >= floor:
            return True, "", ""
        return (
            False,
            f"Co-applicant income {format_inr(income)}/month is below the "
            f"{format_inr(floor)}/month floor",
            f"Increase co-applicant income to {format_inr(floor)}/month, "
            f"for example by adding an earning co-applicant",
        )

    def _check_collateral(
        self, context: ScoringContext, lender: LenderProfile
    ) -> CheckResult:
        threshold = lender.collateral_required_above
        if threshold is None:
            return True, "", ""
        if context.financials.loan_amount <= threshold or context.financials.has_collateral:
            return True, "", ""
        return (
            False,
            f"Loans above {format_inr(threshold)} require collateral",
            f"Offer collateral, or reduce the loan amount to {format_inr(threshold)}",
        )

    def _check_university_tier(
        self, context: ScoringContext, lender: LenderProfile
    ) -> CheckResult:
        if lender.min_university_tier is None:
            return True, "", ""
        required = UniversityTier(lender.min_university_tier)
        tier = effective_tier(context, lender)
        if tier.level >= required.level:
            return True, "", ""
        return (
            False,
            f"University tier {tier.value} is below the required tier {required.value}",
            f"Apply to a tier {required.value} or higher university",
        )

    def _check_credit_score(
        self, context: ScoringContext, lender: LenderProfile
    ) -> CheckResult:
        minimum = lender.min_credit_score
        score: Optional[int] = context.financials.credit_score
        if minimum is None or score is None:
            return True, "", ""  # bureau check happens at sanction
        if score >= minimum:
            return True, "", ""
        return (
            False,
            f"Credit score {score} is below the lender minimum of {minimum}",
            f"Improve the credit score to {minimum} or add a co-applicant with a stronger bureau record",
        )
