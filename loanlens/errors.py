"""
LoanLens error types
"""

from typing import Optional


class LoanLensError(Exception):
    """Base class for all engine errors."""


class InvalidInput(LoanLensError):
    """The request or applicant profile is malformed. Nothing is computed."""

    def __init__(self, message: str, errors: Optional[list] = None):
        super().__init__(message)
        self.errors = errors or []


class ReferenceDataUnavailable(LoanLensError):
    """Lender reference data could not be fetched or the candidate set is empty."""


class JustificationGenerationFailed(LoanLensError):
    """The external text generator failed for one lender."""

    def __init__(self, lender_id: str, message: str):
        super().__init__(f"{lender_id}: {message}")
        self.lender_id = lender_id
