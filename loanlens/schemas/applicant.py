"""
Applicant schema
Structures the loan applicant's profile as submitted by the caller.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional, Union

from dateutil import parser as date_parser
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator


class EmploymentType(str, Enum):
    """Co-applicant employment type"""
    SALARIED = "salaried"
    SELF_EMPLOYED = "self_employed"
    GOVERNMENT = "government"
    BUSINESS = "business"
    RETIRED = "retired"
    UNEMPLOYED = "unemployed"


class CoApplicant(BaseModel):
    """Co-applicant (usually a parent or guardian) backing the loan"""
    model_config = ConfigDict(frozen=True, use_enum_values=True)

    name: Optional[str] = None
    relationship: Optional[str] = Field(
        default=None,
        examples=["father", "mother", "spouse"]
    )
    monthly_income: Optional[float] = Field(
        default=None,
        ge=0,
        description="Monthly income (INR)",
        examples=[85000]
    )
    employment_type: Optional[EmploymentType] = None


class UniversityRecord(BaseModel):
    """
    University reference record

    qs_rank is kept raw: an integer, a numeric string, a range such as
    "101-150", "Unranked" or nothing at all.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    name: Optional[str] = None
    country: Optional[str] = None
    qs_rank: Optional[Union[int, float, str]] = Field(
        default=None,
        examples=[42, "101-150", "Unranked"]
    )


class ApplicantProfile(BaseModel):
    """
    Applicant profile

    Created once per recommendation request and never mutated.
    The intake is given either as a date or as month + year
    (the month form means the 1st of that month).
    """
    model_config = ConfigDict(
        frozen=True,
        use_enum_values=True,
        json_schema_extra={
            "example": {
                "applicant_id": "lead_1042",
                "name": "Aarav Shah",
                "academic_score": 82.5,
                "credit_score": 735,
                "loan_amount": 4500000,
                "study_destination": "USA",
                "course_type": "STEM",
                "intake_month": 9,
                "intake_year": 2027,
                "co_applicant": {
                    "relationship": "father",
                    "monthly_income": 95000,
                    "employment_type": "salaried"
                },
                "has_collateral": False,
                "university_id": "uni_cmu"
            }
        }
    )

    # === Identity ===
    applicant_id: Optional[str] = None
    name: Optional[str] = None

    # === Academics ===
    academic_score: Optional[float] = Field(
        default=None,
        ge=0,
        le=100,
        description="Academic score as a percentage"
    )
    credit_score: Optional[int] = Field(default=None, ge=300, le=900)
    course_type: Optional[str] = Field(
        default=None,
        examples=["STEM", "MBA", "MEDICINE"]
    )

    # === Loan ===
    loan_amount: float = Field(gt=0, description="Requested loan amount (INR)")
    study_destination: str = Field(min_length=1, examples=["USA", "UK", "Canada"])

    # === Intake ===
    intake_date: Optional[date] = None
    intake_month: Optional[int] = Field(default=None, ge=1, le=12)
    intake_year: Optional[int] = Field(default=None, ge=2000, le=2100)

    # === Financials ===
    co_applicant: Optional[CoApplicant] = None
    has_collateral: bool = False
    collateral_value: Optional[float] = Field(default=None, ge=0)

    # === University ===
    university_id: Optional[str] = None
    university: Optional[UniversityRecord] = None

    @field_validator("intake_date", mode="before")
    @classmethod
    def _parse_intake_date(cls, value):
        """Accept free-form dates such as "Sep 2027" or "2027-09-01"."""
        if isinstance(value, datetime):
            return value.date()
        if value is None or isinstance(value, date):
            return value
        if isinstance(value, str):
            if not value.strip():
                return None
            try:
                return date_parser.parse(
                    value, default=datetime(2000, 1, 1)
                ).date()
            except (ValueError, OverflowError) as e:
                raise ValueError(f"unparseable intake date: {value!r}") from e
        return value

    @model_validator(mode="after")
    def _require_intake(self):
        if self.intake_date is None and (
            self.intake_month is None or self.intake_year is None
        ):
            raise ValueError("intake_date or intake_month + intake_year is required")
        return self

    @property
    def intake(self) -> date:
        """Resolved intake date"""
        if self.intake_date is not None:
            return self.intake_date
        return date(self.intake_year, self.intake_month, 1)
