"""
LoanLens tests - Reference data stores
"""

import json
from urllib.parse import unquote

import httpx
import pytest
import sys
sys.path.insert(0, ".")

from loanlens.data_sources import (
    InMemoryReferenceStore,
    JsonReferenceStore,
    SupabaseReferenceStore,
)
from loanlens.errors import ReferenceDataUnavailable
from loanlens.schemas.context import UniversityTier
from loanlens.schemas.lender import LenderProfile


REFERENCE_DATA = {
    "lenders": [
        {"id": "lender_z", "name": "Zeta", "preferred_rank": 2},
        {"id": "lender_y", "name": "Yield"},
        {"id": "lender_x", "name": "Xeno", "preferred_rank": 1},
        {"id": "lender_off", "name": "Retired", "is_active": False},
        {"id": "lender_bad", "name": "Broken", "approval_rate": 7.5},
    ],
    "universities": [
        {"id": "uni_1", "name": "Carnegie Mellon University", "qs_rank": 52},
    ],
    "applicants": [
        {
            "applicant_id": "lead_1",
            "loan_amount": 3000000,
            "study_destination": "USA",
            "intake_month": 9,
            "intake_year": 2026,
        },
        {"applicant_id": "lead_broken", "study_destination": "USA"},
    ],
}


class TestJsonReferenceStore:
    """JSON file store"""

    def setup_method(self):
        self.data = json.loads(json.dumps(REFERENCE_DATA))

    def _store(self, tmp_path):
        path = tmp_path / "reference_data.json"
        path.write_text(json.dumps(self.data), encoding="utf-8")
        return JsonReferenceStore(str(path))

    def test_active_lenders_sorted(self, tmp_path):
        lenders = self._store(tmp_path).list_active_lenders()
        # preferred rank first, unranked last by id; inactive dropped
        assert [l.id for l in lenders] == ["lender_x", "lender_z", "lender_bad", "lender_y"]

    def test_percentage_approval_rate_becomes_fraction(self, tmp_path):
        lender = self._store(tmp_path).get_lenders(["lender_bad"])[0]
        assert lender.approval_rate == pytest.approx(0.075)

    def test_incomplete_records_are_kept(self, tmp_path):
        self.data["lenders"] = [
            {"id": "ok", "name": "OK"},
            {"id": "no_name", "approval_rate": 0.8},
            {"id": "pct_rate", "name": "Pct", "approval_rate": 85},
            {"id": "slow", "name": "Slow", "processing_time_days": "fast", "preferred_rank": 0},
            {"name": "No id at all"},
        ]
        lenders = {l.id: l for l in self._store(tmp_path).list_active_lenders()}

        assert set(lenders) == {"ok", "no_name", "pct_rate", "slow"}
        assert lenders["no_name"].name == "no_name"
        assert lenders["no_name"].approval_rate == pytest.approx(0.8)
        assert lenders["pct_rate"].approval_rate == pytest.approx(0.85)
        # invalid optional fields fall back to their defaults
        assert lenders["slow"].processing_time_days is None
        assert lenders["slow"].preferred_rank is None
        assert lenders["slow"].name == "Slow"

    def test_get_lenders_by_id(self, tmp_path):
        lenders = self._store(tmp_path).get_lenders(["lender_y", "lender_off", "missing"])
        assert [l.id for l in lenders] == ["lender_off", "lender_y"]

    def test_applicant_and_university(self, tmp_path):
        store = self._store(tmp_path)

        assert store.get_applicant("lead_1").loan_amount == 3000000
        assert store.get_applicant("nobody") is None
        assert store.get_university("uni_1").qs_rank == 52
        assert store.get_university("uni_404") is None

    def test_invalid_applicant_raises(self, tmp_path):
        from pydantic import ValidationError

        with pytest.raises(ValidationError):
            self._store(tmp_path).get_applicant("lead_broken")

    def test_missing_file(self, tmp_path):
        store = JsonReferenceStore(str(tmp_path / "nope.json"))
        with pytest.raises(ReferenceDataUnavailable):
            store.list_active_lenders()

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "reference_data.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ReferenceDataUnavailable):
            JsonReferenceStore(str(path)).list_active_lenders()

    def test_bundled_sample_data_loads(self):
        store = JsonReferenceStore("data/reference_data.json")
        lenders = store.list_active_lenders()

        assert len(lenders) == 5
        assert lenders[0].id == "lender_credila"
        assert store.get_applicant("lead_1042") is not None


class TestInMemoryReferenceStore:

    def test_lookup(self):
        store = InMemoryReferenceStore(lenders=[
            LenderProfile(id="b", name="B"),
            LenderProfile(id="a", name="A"),
            LenderProfile(id="c", name="C", is_active=False),
        ])

        assert [l.id for l in store.list_active_lenders()] == ["a", "b"]
        assert [l.id for l in store.get_lenders(["c", "zzz"])] == ["c"]
        assert store.get_applicant("x") is None


LENDER_ROWS = [
    {
        "id": "lender_credila",
        "name": "HDFC Credila",
        "code": "CREDILA",
        "is_active": True,
        "loan_amount_min": 500000,
        "loan_amount_max": 7500000,
        "country_restrictions": ["USA", "UK"],
        "income_expectations_min": 40000,
        "income_expectations_max": 300000,
        "interest_rate_min": 10.5,
        "interest_rate_max": 12.75,
        "approval_rate": 78,
        "processing_time_days": 10,
        "preferred_rank": 1,
        "bre_json": {
            "min_university_tier": "B",
            "tier_approval_rates": {"S": 0.92, "A": 0.85},
        },
    },
    {"id": "lender_plain", "name": "Plain", "is_active": True, "approval_rate": 0.6},
]

LEAD_ROW = {
    "id": "lead_77",
    "loan_amount": 4200000,
    "study_destination": "Canada",
    "intake_month": 1,
    "intake_year": 2027,
    "student": {"name": "Isha Rao", "credit_score": 742, "bachelors_percentage": 81.0},
    "co_applicant": {
        "name": "Suresh Rao",
        "monthly_salary": 90000,
        "employment_type": "salaried",
        "relationship": "father",
    },
    "lead_universities": [{"university_id": "uni_toronto"}],
}


class TestSupabaseReferenceStore:
    """Supabase (PostgREST) store"""

    def setup_method(self):
        self.requests = []

    def _store(self, handler):
        def recording(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        return SupabaseReferenceStore(
            url="https://project.supabase.co",
            api_key="test-key",
            transport=httpx.MockTransport(recording),
        )

    def test_active_lenders(self):
        def handler(request):
            assert request.url.path == "/rest/v1/lenders"
            return httpx.Response(200, json=LENDER_ROWS)

        with self._store(handler) as store:
            lenders = store.list_active_lenders()

        request = self.requests[0]
        assert request.url.params["is_active"] == "eq.true"
        assert request.headers["apikey"] == "test-key"
        assert request.headers["authorization"] == "Bearer test-key"

        credila = lenders[0]
        assert credila.id == "lender_credila"
        assert credila.supported_countries == ["USA", "UK"]
        assert credila.min_co_applicant_income == 40000
        assert credila.approval_rate == pytest.approx(0.78)
        assert credila.min_university_tier == UniversityTier.B
        assert credila.tier_approval_rates[UniversityTier.S] == pytest.approx(0.92)

    def test_get_lenders_filter(self):
        def handler(request):
            return httpx.Response(200, json=LENDER_ROWS[1:])

        with self._store(handler) as store:
            lenders = store.get_lenders(["lender_plain", "lender_other"])

        assert [l.id for l in lenders] == ["lender_plain"]
        assert unquote(str(self.requests[0].url.params["id"])) == "in.(lender_plain,lender_other)"

    def test_incomplete_rows_are_kept(self):
        rows = [
            {"id": "lender_unnamed", "is_active": True, "approval_rate": 64},
            {"id": "lender_odd", "name": "Odd", "processing_time_days": "n/a",
             "bre_json": {"min_university_tier": "Z"}},
            {"name": "Missing id"},
        ]

        with self._store(lambda request: httpx.Response(200, json=rows)) as store:
            lenders = {l.id: l for l in store.list_active_lenders()}

        assert set(lenders) == {"lender_unnamed", "lender_odd"}
        assert lenders["lender_unnamed"].name == "lender_unnamed"
        assert lenders["lender_unnamed"].approval_rate == pytest.approx(0.64)
        assert lenders["lender_odd"].processing_time_days is None
        assert lenders["lender_odd"].min_university_tier is None

    def test_get_applicant(self):
        def handler(request):
            assert request.url.path == "/rest/v1/leads_new"
            return httpx.Response(200, json=[LEAD_ROW])

        with self._store(handler) as store:
            applicant = store.get_applicant("lead_77")

        assert applicant.applicant_id == "lead_77"
        assert applicant.name == "Isha Rao"
        assert applicant.academic_score == 81.0
        assert applicant.co_applicant.monthly_income == 90000
        assert applicant.university_id == "uni_toronto"
        assert applicant.intake.isoformat() == "2027-01-01"

    def test_unknown_applicant(self):
        with self._store(lambda request: httpx.Response(200, json=[])) as store:
            assert store.get_applicant("lead_404") is None

    def test_get_university(self):
        def handler(request):
            return httpx.Response(200, json=[
                {"id": "uni_toronto", "name": "University of Toronto", "country": "Canada", "global_rank": "25"}
            ])

        with self._store(handler) as store:
            university = store.get_university("uni_toronto")

        assert university.qs_rank == "25"
        assert university.country == "Canada"

    def test_http_error_is_unavailable(self):
        with self._store(lambda request: httpx.Response(503)) as store:
            with pytest.raises(ReferenceDataUnavailable):
                store.list_active_lenders()

    def test_connection_error_is_unavailable(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with self._store(handler) as store:
            with pytest.raises(ReferenceDataUnavailable):
                store.get_lenders(["lender_plain"])
