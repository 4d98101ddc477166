"""
Reference data stores
Read-only access to lender, applicant and university records.
The engine never writes through these.
"""

import json
from pathlib import Path
from typing import Optional, Protocol

from loguru import logger
from pydantic import ValidationError

from loanlens.config import settings
from loanlens.errors import ReferenceDataUnavailable
from loanlens.schemas.applicant import ApplicantProfile, UniversityRecord
from loanlens.schemas.lender import LenderProfile


class ReferenceDataStore(Protocol):
    """Read-only reference data collaborator"""

    def list_active_lenders(self) -> list[LenderProfile]:
        ...

    def get_lenders(self, lender_ids: list[str]) -> list[LenderProfile]:
        ...

    def get_applicant(self, applicant_id: str) -> Optional[ApplicantProfile]:
        ...

    def get_university(self, university_id: str) -> Optional[UniversityRecord]:
        ...


def sort_lenders(lenders: list[LenderProfile]) -> list[LenderProfile]:
    """Stable order: preferred_rank first (unranked last), then id."""
    return sorted(
        lenders,
        key=lambda lender: (
            lender.preferred_rank is None,
            lender.preferred_rank or 0,
            lender.id,
        ),
    )


def normalize_approval_rate(value):
    """Rates stored as a percentage (78) become a fraction (0.78)."""
    if isinstance(value, (int, float)) and not isinstance(value, bool) and value > 1:
        return value / 100
    return value


def lender_from_record(raw: dict, log=logger) -> Optional[LenderProfile]:
    """
    Build a LenderProfile from a raw record, keeping incomplete ones

    Only `id` is required. A missing name falls back to the id and any
    optional field that fails validation is dropped back to its default,
    so the lender is still scored (from neutral defaults) instead of
    disappearing from the candidate set.
    """
    lender_id = raw.get("id") if isinstance(raw, dict) else None
    if lender_id is None or str(lender_id).strip() == "":
        log.warning(f"Skipping lender record without an id: {raw}")
        return None

    data = dict(raw)
    data["id"] = str(lender_id)
    if not data.get("name"):
        data["name"] = data["id"]
    if "approval_rate" in data:
        data["approval_rate"] = normalize_approval_rate(data["approval_rate"])

    try:
        return LenderProfile.model_validate(data)
    except ValidationError as e:
        invalid = {err["loc"][0] for err in e.errors() if err["loc"]} - {"id"}
        log.warning(f"Lender {data['id']}: dropping invalid fields {sorted(invalid)}")
        for field in invalid:
            if field == "name":
                data["name"] = data["id"]
            else:
                data.pop(field, None)

    try:
        return LenderProfile.model_validate(data)
    except ValidationError as e:
        log.warning(f"Skipping unusable lender record {data['id']}: {e}")
        return None


class InMemoryReferenceStore:
    """Reference data held in memory (tests, embedding callers)"""

    def __init__(
        self,
        lenders: Optional[list[LenderProfile]] = None,
        applicants: Optional[list[ApplicantProfile]] = None,
        universities: Optional[list[UniversityRecord]] = None,
    ):
        self._lenders = {lender.id: lender for lender in (lenders or [])}
        self._applicants = {
            a.applicant_id: a for a in (applicants or []) if a.applicant_id
        }
        self._universities = {u.id: u for u in (universities or [])}

    def list_active_lenders(self) -> list[LenderProfile]:
        return sort_lenders([l for l in self._lenders.values() if l.is_active])

    def get_lenders(self, lender_ids: list[str]) -> list[LenderProfile]:
        return sort_lenders([self._lenders[i] for i in lender_ids if i in self._lenders])

    def get_applicant(self, applicant_id: str) -> Optional[ApplicantProfile]:
        return self._applicants.get(applicant_id)

    def get_university(self, university_id: str) -> Optional[UniversityRecord]:
        return self._universities.get(university_id)


class JsonReferenceStore:
    """
    Reference data from a JSON file

    Layout: {"lenders": [...], "applicants": [...], "universities": [...]}.
    The file is read on every call so each run sees its own fresh copy.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path or settings.REFERENCE_DATA_PATH)
        self.logger = logger.bind(source="JsonReferenceStore")

    def _load(self) -> dict:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ReferenceDataUnavailable(
                f"cannot read reference data from {self.path}: {e}"
            ) from e

    def _load_lenders(self) -> list[LenderProfile]:
        records = self._load().get("lenders", [])
        lenders = [lender_from_record(raw, self.logger) for raw in records]
        return [lender for lender in lenders if lender is not None]

    def list_active_lenders(self) -> list[LenderProfile]:
        return sort_lenders([l for l in self._load_lenders() if l.is_active])

    def get_lenders(self, lender_ids: list[str]) -> list[LenderProfile]:
        wanted = set(lender_ids)
        return sort_lenders([l for l in self._load_lenders() if l.id in wanted])

    def get_applicant(self, applicant_id: str) -> Optional[ApplicantProfile]:
        for raw in self._load().get("applicants", []):
            if raw.get("applicant_id") == applicant_id:
                # invalid stored profiles surface as ValidationError to the caller
                return ApplicantProfile.model_validate(raw)
        return None

    def get_university(self, university_id: str) -> Optional[UniversityRecord]:
        for raw in self._load().get("universities", []):
            if raw.get("id") == university_id:
                try:
                    return UniversityRecord.model_validate(raw)
                except ValidationError as e:
                    self.logger.warning(f"Invalid university record {university_id}: {e}")
                    return None
        return None


def get_reference_store() -> ReferenceDataStore:
    """Store for the current settings: Supabase when configured, else the JSON file."""
    if settings.SUPABASE_URL:
        from .supabase_store import SupabaseReferenceStore

        return SupabaseReferenceStore()
    return JsonReferenceStore()
