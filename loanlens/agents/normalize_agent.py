"""
Normalize Agent
Turns the raw applicant profile into a scoring context.
"""

from datetime import date
from typing import Optional

from .base import BaseAgent
from loanlens.schemas.applicant import ApplicantProfile, UniversityRecord
from loanlens.schemas.context import ScoringContext
from loanlens.domain.normalization import Normalizer


class NormalizeInput:
    """Normalize Agent input"""
    def __init__(
        self,
        applicant: ApplicantProfile,
        university: Optional[UniversityRecord] = None,
        today: Optional[date] = None,
    ):
        self.applicant = applicant
        self.university = university
        self.today = today


class NormalizeAgent(BaseAgent[NormalizeInput, ScoringContext]):
    """
    Normalization Agent (layer 1)

    - QS rank -> university tier
    - intake date -> days remaining and urgency zone
    - co-applicant income -> annualized financials
    """

    name = "NormalizeAgent"

    def __init__(self):
        super().__init__()
        self.engine = Normalizer()

    def _process(self, input_data: NormalizeInput) -> ScoringContext:
        return self.engine.normalize(
            applicant=input_data.applicant,
            university=input_data.university,
            today=input_data.today,
        )
