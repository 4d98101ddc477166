"""
Prompt building for lender justifications.
The rules are injected into every prompt and must be followed strictly.
"""

from loanlens.schemas.lender import LenderProfile
from loanlens.schemas.results import ScoreBreakdown

SAFETY_RULES = [
    "Never promise loan approval or a specific interest rate.",
    "Use cautious language (e.g. 'strong fit', 'likely to suit', 'may require').",
    "Only mention facts present in the data provided; never invent lender policies.",
    "If the lender is locked, say plainly what blocks eligibility.",
    "Do not give tax, legal or visa advice.",
    "Answer in at most two sentences of plain text, no markdown.",
]

SYSTEM_ROLE_DEFINITION = (
    "You are an education-loan advisor assistant. You EXPLAIN why a lender "
    "was ranked where it was by a rule-based engine. You do not make decisions."
)


def build_justification_prompt(
    lender: LenderProfile,
    breakdown: ScoreBreakdown,
    locked: bool,
) -> str:
    """Prompt for one lender's justification."""
    rules = "\n".join(f"- {rule}" for rule in SAFETY_RULES)
    pillar_lines = "\n".join(
        f"- {d.pillar.title()}: {d.score:.0f}/100 ({d.reason})" for d in breakdown.details
    )
    status = "LOCKED (fails at least one hard eligibility rule)" if locked else "ELIGIBLE"

    return f"""{SYSTEM_ROLE_DEFINITION}

RULES:
{rules}

LENDER: {lender.name}
STATUS: {status}
COMPOSITE SCORE: {breakdown.composite:.1f}
PILLARS:
{pillar_lines}

Explain this ranking to the applicant.
Answer:"""
