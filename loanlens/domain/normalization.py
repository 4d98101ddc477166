"""
Normalization engine
Maps raw applicant and university data to the canonical scoring context.
"""

import math
import re
from datetime import date
from typing import Optional, Union

from loguru import logger

from loanlens.schemas.applicant import ApplicantProfile, UniversityRecord
from loanlens.schemas.context import (
    NormalizedFinancials,
    ScoringContext,
    UniversityTier,
    UrgencyZone,
)
from loanlens.schemas.lender import LenderProfile

# QS rank upper bounds per tier, best first
QS_TIER_THRESHOLDS: list[tuple[int, UniversityTier]] = [
    (100, UniversityTier.S),
    (300, UniversityTier.A),
    (500, UniversityTier.B),
]

# Days reserved for document collection and sanction before disbursement
PROCESSING_BUFFER_DAYS = 7

# Effective-day upper bounds per zone, most urgent first
URGENCY_THRESHOLDS: list[tuple[int, UrgencyZone]] = [
    (30, UrgencyZone.RED),
    (90, UrgencyZone.YELLOW),
]

COUNTRY_ALIASES = {
    "US": "USA",
    "U.S.": "USA",
    "U.S.A.": "USA",
    "UNITED STATES": "USA",
    "UNITED STATES OF AMERICA": "USA",
    "AMERICA": "USA",
    "UNITED KINGDOM": "UK",
    "GREAT BRITAIN": "UK",
    "ENGLAND": "UK",
    "SCOTLAND": "UK",
    "CA": "CANADA",
    "AU": "AUSTRALIA",
    "AUS": "AUSTRALIA",
    "DE": "GERMANY",
    "NZ": "NEW ZEALAND",
    "IE": "IRELAND",
}


def normalize_country(value: Optional[str]) -> str:
    """Canonical upper-case country name ("United States" -> "USA")."""
    if not value:
        return ""
    text = re.sub(r"\s+", " ", value.strip()).upper()
    return COUNTRY_ALIASES.get(text, text)


def normalize_course(value: Optional[str]) -> Optional[str]:
    if not value or not value.strip():
        return None
    return re.sub(r"[\s\-]+", "_", value.strip()).upper()


def parse_rank(raw: Union[int, float, str, None]) -> Optional[int]:
    """
    Parse a raw QS rank into an integer

    Ranges use their lower bound ("101-150" -> 101), tied ranks drop the
    "=" prefix. Anything else returns None.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        if isinstance(raw, float) and math.isnan(raw):
            return None
        value = int(raw)
        return value if value > 0 else None

    match = re.match(r"^\s*[=#]?\s*(\d+)", str(raw))
    if not match:
        return None
    value = int(match.group(1))
    return value if value > 0 else None


def derive_tier(raw_rank: Union[int, float, str, None]) -> UniversityTier:
    """QS rank to tier. Unknown or missing ranks fall to the lowest tier."""
    rank = parse_rank(raw_rank)
    if rank is None:
        return UniversityTier.C
    for limit, tier in QS_TIER_THRESHOLDS:
        if rank <= limit:
            return tier
    return UniversityTier.C


def days_until(intake: date, today: date) -> int:
    """Whole days from today to the intake (negative once it has passed)."""
    return (intake - today).days


def derive_urgency(days_until_intake: int) -> UrgencyZone:
    """
    Bucket days-to-intake into an urgency zone

    The processing buffer is subtracted first. A passed intake lands in
    the most urgent zone.
    """
    effective = days_until_intake - PROCESSING_BUFFER_DAYS
    for limit, zone in URGENCY_THRESHOLDS:
        if effective <= limit:
            return zone
    return UrgencyZone.GREEN


def effective_tier(context: ScoringContext, lender: LenderProfile) -> UniversityTier:
    """Applicant's tier as seen by a lender, honouring its grade overrides."""
    if context.university_id and context.university_id in lender.university_grade_mapping:
        return UniversityTier(lender.university_grade_mapping[context.university_id])
    return context.tier


class Normalizer:
    """
    Normalization engine

    Pure function of its inputs: the same applicant, university and date
    always produce the same context.
    """

    def normalize(
        self,
        applicant: ApplicantProfile,
        university: Optional[UniversityRecord] = None,
        today: Optional[date] = None,
    ) -> ScoringContext:
        """
        Build the scoring context.

        Args:
            applicant: applicant profile
            university: university record (None means unranked)
            today: reference date, defaults to the current date

        Returns:
            ScoringContext
        """
        today = today or date.today()

        qs_rank = parse_rank(university.qs_rank) if university else None
        tier = derive_tier(qs_rank)

        days = days_until(applicant.intake, today)
        zone = derive_urgency(days)

        context = ScoringContext(
            applicant=applicant,
            university_id=(university.id if university else applicant.university_id),
            qs_rank=qs_rank,
            tier=tier,
            destination=normalize_country(applicant.study_destination),
            course_type=normalize_course(applicant.course_type),
            days_until_intake=days,
            effective_days=days - PROCESSING_BUFFER_DAYS,
            urgency_zone=zone,
            financials=self._normalize_financials(applicant),
        )

        logger.debug(
            f"Normalized {applicant.applicant_id or 'applicant'}: "
            f"tier={tier.value}, days={days}, zone={zone.value}"
        )
        return context

    def _normalize_financials(self, applicant: ApplicantProfile) -> NormalizedFinancials:
        co_applicant = applicant.co_applicant
        monthly = co_applicant.monthly_income if co_applicant else None
        annual = monthly * 12 if monthly is not None else None

        ratio = None
        if annual:
            ratio = round(applicant.loan_amount / annual, 2)

        return NormalizedFinancials(
            loan_amount=applicant.loan_amount,
            co_applicant_monthly_income=monthly,
            co_applicant_annual_income=annual,
            loan_to_income_ratio=ratio,
            employment_type=co_applicant.employment_type if co_applicant else None,
            has_collateral=applicant.has_collateral,
            collateral_value=applicant.collateral_value,
            credit_score=applicant.credit_score,
        )
