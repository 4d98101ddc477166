"""
LoanLens LLM package
"""

from .runner import LLMRunner, get_llm_runner
from .justification import (
    JustificationGenerator,
    LLMJustificationGenerator,
    HttpJustificationGenerator,
    get_justification_generator,
    template_justification,
)

__all__ = [
    "LLMRunner",
    "get_llm_runner",
    "JustificationGenerator",
    "LLMJustificationGenerator",
    "HttpJustificationGenerator",
    "get_justification_generator",
    "template_justification",
]
