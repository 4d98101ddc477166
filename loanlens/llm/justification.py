"""
Justification generators
Turn a lender's score breakdown into a short explanation. The text is
opaque to the engine; any failure is recovered with a fixed template.
"""

import asyncio
from typing import Optional, Protocol

import httpx
from loguru import logger

from loanlens.config import settings
from loanlens.errors import JustificationGenerationFailed
from loanlens.llm.prompts import build_justification_prompt
from loanlens.llm.runner import LLMRunner, get_llm_runner
from loanlens.schemas.lender import LenderProfile
from loanlens.schemas.results import ScoreBreakdown


class JustificationGenerator(Protocol):
    """External text-generation collaborator. May raise or hang."""

    async def generate(
        self,
        lender: LenderProfile,
        breakdown: ScoreBreakdown,
        locked: bool,
    ) -> str:
        ...


def template_justification(
    lender: LenderProfile,
    breakdown: ScoreBreakdown,
    locked: bool,
) -> str:
    """Fixed fallback text built from the pillar scores. Never empty."""
    pillars = (
        f"Future {breakdown.future:.0f}, Financial {breakdown.financial:.0f}, "
        f"Past {breakdown.past:.0f}"
    )
    if locked:
        return (
            f"{lender.name} is locked by one or more eligibility rules "
            f"(pillar scores: {pillars}); resolving them would move it up the list."
        )

    strongest = "overall"
    if breakdown.details:
        strongest = max(breakdown.details, key=lambda d: d.score).pillar

    if breakdown.composite >= 85:
        return (
            f"{lender.name} is an excellent match with a score of "
            f"{breakdown.composite:.1f} ({pillars}), led by its {strongest} pillar."
        )
    if breakdown.composite >= 70:
        return (
            f"{lender.name} is a good fit with a score of {breakdown.composite:.1f} "
            f"({pillars}), strongest on the {strongest} pillar."
        )
    return (
        f"{lender.name} may work but needs review: score {breakdown.composite:.1f} "
        f"({pillars})."
    )


class LLMJustificationGenerator:
    """Justifications from the local llama.cpp model"""

    def __init__(
        self,
        runner: Optional[LLMRunner] = None,
        max_tokens: int = 160,
        temperature: float = 0.3,
    ):
        self.runner = runner or get_llm_runner()
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def generate(
        self,
        lender: LenderProfile,
        breakdown: ScoreBreakdown,
        locked: bool,
    ) -> str:
        prompt = build_justification_prompt(lender, breakdown, locked)

        # llama.cpp is blocking; keep it off the event loop
        text = await asyncio.to_thread(
            self.runner.generate,
            prompt,
            self.max_tokens,
            self.temperature,
        )
        if not text:
            raise JustificationGenerationFailed(lender.id, "LLM returned no text")
        return text


class HttpJustificationGenerator:
    """
    Justifications from a remote text-generation endpoint

    POSTs {"prompt", "lender_id", "locked", "breakdown"} and expects
    {"text": "..."} back.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.url = url or settings.JUSTIFICATION_URL
        self.timeout = timeout or settings.JUSTIFICATION_TIMEOUT
        self._client = client
        self.logger = logger.bind(source="JustificationAPI")

        if not self.url:
            self.logger.warning("JUSTIFICATION_URL is not set")

    async def generate(
        self,
        lender: LenderProfile,
        breakdown: ScoreBreakdown,
        locked: bool,
    ) -> str:
        if not self.url and self._client is None:
            raise JustificationGenerationFailed(lender.id, "no endpoint configured")

        payload = {
            "prompt": build_justification_prompt(lender, breakdown, locked),
            "lender_id": lender.id,
            "locked": locked,
            "breakdown": breakdown.model_dump(mode="json"),
        }

        try:
            if self._client is not None:
                response = await self._client.post(self.url, json=payload)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.url, json=payload)
            response.raise_for_status()
            text = response.json().get("text")
        except (httpx.HTTPError, ValueError, AttributeError) as e:
            raise JustificationGenerationFailed(lender.id, f"request failed: {e}") from e

        if not text or not str(text).strip():
            raise JustificationGenerationFailed(lender.id, "empty response")
        return str(text).strip()


def get_justification_generator(
    backend: Optional[str] = None,
) -> Optional[JustificationGenerator]:
    """Generator for the configured backend; None means templates only."""
    backend = (backend or settings.JUSTIFICATION_BACKEND).lower()

    if backend == "llm":
        return LLMJustificationGenerator()
    if backend == "http":
        return HttpJustificationGenerator()
    if backend == "none":
        return None
    raise ValueError(f"unknown JUSTIFICATION_BACKEND: {backend}")
