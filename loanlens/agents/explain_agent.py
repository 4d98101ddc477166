"""
Explain Agent
Attaches a justification to every ranked lender.

Generator calls run concurrently with a per-call timeout and an overall
deadline; any failure falls back to the fixed template for that lender.
"""

import asyncio
from typing import Optional

from .base import BaseAgent
from loanlens.config import settings
from loanlens.llm.justification import JustificationGenerator, template_justification
from loanlens.schemas.results import RankedLender, RecommendationResult


class ExplainInput:
    """Explain Agent input"""
    def __init__(self, ranked: list[RankedLender]):
        self.ranked = ranked


class ExplainAgent(BaseAgent[ExplainInput, list[RecommendationResult]]):
    """
    Explainer Agent

    Output order and scores are exactly the Ranker's; only the
    justification text is added here.
    """

    name = "ExplainAgent"

    def __init__(
        self,
        generator: Optional[JustificationGenerator] = None,
        concurrency: Optional[int] = None,
        call_timeout: Optional[float] = None,
        deadline: Optional[float] = None,
    ):
        super().__init__()
        self.generator = generator
        self.concurrency = concurrency or settings.JUSTIFICATION_CONCURRENCY
        self.call_timeout = call_timeout or settings.JUSTIFICATION_TIMEOUT
        self.deadline = deadline or settings.REQUEST_TIMEOUT

    def _process(self, input_data: ExplainInput) -> list[RecommendationResult]:
        return asyncio.run(self._aprocess(input_data))

    async def _aprocess(self, input_data: ExplainInput) -> list[RecommendationResult]:
        ranked = input_data.ranked
        texts: dict[str, str] = {}

        if self.generator is not None and ranked:
            texts = await self._generate_all(ranked)

        results = []
        for item in ranked:
            text = texts.get(item.lender.id)
            source = "generator"
            if not text:
                text = template_justification(item.lender, item.breakdown, item.knockout.locked)
                source = "template"

            results.append(RecommendationResult(
                lender_id=item.lender.id,
                lender_name=item.lender.name,
                composite_score=item.breakdown.composite,
                rank=item.rank,
                eligible=item.knockout.eligible,
                locked=item.knockout.locked,
                reasons=item.knockout.reasons,
                unlock_hint=item.unlock_hint,
                justification=text,
                justification_source=source,
                breakdown=item.breakdown,
            ))

        fallbacks = sum(1 for r in results if r.justification_source == "template")
        if fallbacks and self.generator is not None:
            self.logger.warning(f"Template justification used for {fallbacks}/{len(results)} lenders")
        return results

    async def _generate_all(self, ranked: list[RankedLender]) -> dict[str, str]:
        """Fan out generator calls; returns lender_id -> text for the ones that succeeded."""
        semaphore = asyncio.Semaphore(self.concurrency)

        async def generate_one(item: RankedLender) -> Optional[str]:
            async with semaphore:
                try:
                    text = await asyncio.wait_for(
                        self.generator.generate(
                            item.lender, item.breakdown, item.knockout.locked
                        ),
                        timeout=self.call_timeout,
                    )
                except asyncio.TimeoutError:
                    self.logger.warning(
                        f"Justification for {item.lender.id} timed out after {self.call_timeout}s"
                    )
                    return None
                except Exception as e:
                    self.logger.warning(f"Justification for {item.lender.id} failed: {e}")
                    return None

            if not isinstance(text, str) or not text.strip():
                self.logger.warning(
                    f"Justification for {item.lender.id} returned no usable text ({type(text).__name__})"
                )
                return None
            return text

        tasks = {
            asyncio.create_task(generate_one(item)): item.lender.id
            for item in ranked
        }
        done, pending = await asyncio.wait(tasks, timeout=self.deadline)

        if pending:
            self.logger.warning(
                f"Justification deadline of {self.deadline}s hit, "
                f"{len(pending)} lenders fall back to the template"
            )
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        texts = {}
        for task in done:
            text = task.result()
            if text is not None:
                texts[tasks[task]] = text
        return texts
