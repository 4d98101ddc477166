"""
Ranking engine
Orders scored lenders and picks an unlock hint for each locked one.
"""

from typing import Optional
from loguru import logger

from loanlens.schemas.results import KnockoutResult, RankedLender, ScoredLender


class Ranker:
    """
    Deterministic ranker

    Descending composite score, ties broken by lender id ascending, so
    identical inputs always produce the identical order.
    """

    @staticmethod
    def sort_key(scored: ScoredLender) -> tuple[float, str]:
        return (-scored.breakdown.composite, scored.lender.id)

    def rank(
        self,
        scored: list[ScoredLender],
        include_locked: bool = True,
    ) -> list[RankedLender]:
        """
        Rank the candidates.

        Args:
            scored: every scored candidate
            include_locked: keep locked lenders in the output

        Returns:
            list[RankedLender] with contiguous 1-based ranks
        """
        ordered = sorted(scored, key=self.sort_key)

        if not include_locked:
            ordered = [s for s in ordered if not s.knockout.locked]

        ranked = [
            RankedLender(
                lender=s.lender,
                knockout=s.knockout,
                breakdown=s.breakdown,
                rank=position,
                unlock_hint=self.unlock_hint(s.knockout),
            )
            for position, s in enumerate(ordered, start=1)
        ]

        logger.debug(f"Ranked {len(ranked)}/{len(scored)} lenders")
        return ranked

    def unlock_hint(self, knockout: KnockoutResult) -> Optional[str]:
        """
        Single most impactful remediation for a locked lender

        Highest estimated impact wins; on a tie the earlier rule wins.
        """
        failures = knockout.failures
        if not failures:
            return None

        best_index = 0
        for index, failure in enumerate(failures):
            if failure.impact > failures[best_index].impact:
                best_index = index
        return failures[best_index].hint
