"""
Supabase reference data client
Reads lenders, leads and universities through the PostgREST API.
- active lenders ordered by preferred_rank
- lead (applicant) lookup with student / co-applicant joins
- university lookup for the QS rank

Environment:
- SUPABASE_URL: project URL
- SUPABASE_KEY: service or anon key with read access
"""

from typing import Any, Optional

import httpx
from loguru import logger

from loanlens.config import settings
from loanlens.errors import ReferenceDataUnavailable
from loanlens.schemas.applicant import ApplicantProfile, UniversityRecord
from loanlens.schemas.lender import LenderProfile
from .reference_store import lender_from_record, sort_lenders

LEAD_SELECT = (
    "id,loan_amount,study_destination,intake_month,intake_year,"
    "student:students(name,credit_score,bachelors_percentage,twelfth_percentage),"
    "co_applicant:co_applicants(name,monthly_salary,employment_type,relationship),"
    "lead_universities(university_id)"
)

# rule and history fields that live in the lender's BRE json
BRE_FIELDS = (
    "collateral_required_above",
    "min_university_tier",
    "min_credit_score",
    "tier_approval_rates",
    "destination_approval_rates",
    "course_approval_rates",
    "university_grade_mapping",
)


class SupabaseReferenceStore:
    """
    Supabase (PostgREST) reference data store

    Read-only. Every fetch failure is raised as ReferenceDataUnavailable.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[int] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.url = (url or settings.SUPABASE_URL).rstrip("/")
        self.api_key = api_key or settings.SUPABASE_KEY
        self.client = httpx.Client(
            base_url=f"{self.url}/rest/v1",
            timeout=timeout or settings.SUPABASE_TIMEOUT,
            headers={
                "apikey": self.api_key,
                "Authorization": f"Bearer {self.api_key}",
                "Accept": "application/json",
            },
            transport=transport,
        )
        self.logger = logger.bind(source="Supabase")

        if not self.api_key:
            self.logger.warning("SUPABASE_KEY is not set")

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def close(self):
        self.client.close()

    # ==================== HTTP ====================
    def _get(self, table: str, params: dict[str, str]) -> list[dict]:
        try:
            response = self.client.get(f"/{table}", params=params)
            response.raise_for_status()
            rows = response.json()
        except (httpx.HTTPError, ValueError) as e:
            self.logger.error(f"Fetch from {table} failed: {e}")
            raise ReferenceDataUnavailable(f"cannot fetch {table}: {e}") from e

        if not isinstance(rows, list):
            raise ReferenceDataUnavailable(f"unexpected {table} payload")
        return rows

    # ==================== Lenders ====================
    def list_active_lenders(self) -> list[LenderProfile]:
        rows = self._get("lenders", {
            "select": "*",
            "is_active": "eq.true",
            "order": "preferred_rank.asc.nullslast",
        })
        return sort_lenders(self._parse_lenders(rows))

    def get_lenders(self, lender_ids: list[str]) -> list[LenderProfile]:
        if not lender_ids:
            return []
        rows = self._get("lenders", {
            "select": "*",
            "id": f"in.({','.join(lender_ids)})",
        })
        return sort_lenders(self._parse_lenders(rows))

    def _parse_lenders(self, rows: list[dict]) -> list[LenderProfile]:
        lenders = [lender_from_record(self._lender_from_row(row), self.logger) for row in rows]
        return [lender for lender in lenders if lender is not None]

    @staticmethod
    def _lender_from_row(row: dict[str, Any]) -> dict[str, Any]:
        """Map a lenders row to LenderProfile fields"""
        data = {
            "id": row.get("id"),
            "name": row.get("name"),
            "code": row.get("code"),
            "is_active": row.get("is_active", True),
            "loan_amount_min": row.get("loan_amount_min"),
            "loan_amount_max": row.get("loan_amount_max"),
            "supported_countries": row.get("country_restrictions") or [],
            "min_co_applicant_income": row.get("income_expectations_min"),
            "income_expectations_max": row.get("income_expectations_max"),
            "interest_rate_min": row.get("interest_rate_min"),
            "interest_rate_max": row.get("interest_rate_max"),
            "approval_rate": row.get("approval_rate"),
            "processing_time_days": row.get("processing_time_days"),
            "preferred_rank": row.get("preferred_rank"),
        }

        bre = row.get("bre_json") or {}
        if isinstance(bre, dict):
            for field in BRE_FIELDS:
                if bre.get(field) is not None:
                    data[field] = bre[field]
        return data

    # ==================== Applicants ====================
    def get_applicant(self, applicant_id: str) -> Optional[ApplicantProfile]:
        rows = self._get("leads_new", {
            "select": LEAD_SELECT,
            "id": f"eq.{applicant_id}",
            "limit": "1",
        })
        if not rows:
            return None
        # invalid lead data surfaces as ValidationError to the caller
        return ApplicantProfile.model_validate(self._applicant_from_row(rows[0]))

    @staticmethod
    def _applicant_from_row(row: dict[str, Any]) -> dict[str, Any]:
        """Map a leads_new row (with joins) to ApplicantProfile fields"""
        student = row.get("student") or {}
        co_applicant = row.get("co_applicant") or None
        universities = row.get("lead_universities") or []

        academic = student.get("bachelors_percentage") or student.get("twelfth_percentage")

        data = {
            "applicant_id": row.get("id"),
            "name": student.get("name"),
            "academic_score": academic,
            "credit_score": student.get("credit_score"),
            "loan_amount": row.get("loan_amount"),
            "study_destination": row.get("study_destination"),
            "intake_month": row.get("intake_month"),
            "intake_year": row.get("intake_year"),
            "university_id": universities[0].get("university_id") if universities else None,
        }
        if co_applicant:
            data["co_applicant"] = {
                "name": co_applicant.get("name"),
                "relationship": co_applicant.get("relationship"),
                "monthly_income": co_applicant.get("monthly_salary"),
                "employment_type": co_applicant.get("employment_type"),
            }
        return data

    # ==================== Universities ====================
    def get_university(self, university_id: str) -> Optional[UniversityRecord]:
        rows = self._get("universities", {
            "select": "id,name,country,global_rank",
            "id": f"eq.{university_id}",
            "limit": "1",
        })
        if not rows:
            return None
        row = rows[0]
        return UniversityRecord(
            id=row["id"],
            name=row.get("name"),
            country=row.get("country"),
            qs_rank=row.get("global_rank"),
        )
