"""Trust enrichment of ranked entries from the Hyperion oracle."""

import asyncio
import logging
from typing import Optional

from trustboard.datasources import TrustOracle
from trustboard.models import RankedEntry, TrustLookup

logger = logging.getLogger(__name__)


class TrustEnricher:
    """
    Fills in ``trust_flag`` for each ranked entry.

    Lookups run concurrently and independently. A failed lookup leaves the
    entry's flag as None; it never fails the batch.
    """

    def __init__(self, oracle: TrustOracle, deadline: Optional[float] = None):
        """
        Args:
            oracle: Trust oracle to query
            deadline: Seconds to wait for the whole fan-out; lookups still
                pending afterwards are cancelled. None waits for all.
        """
        self.oracle = oracle
        self.deadline = deadline

    async def lookup(self, participant: str, period_id: int) -> TrustLookup:
        """Query one participant, folding every failure into the result."""
        try:
            summary = await self.oracle.get_summary(participant, period_id)
        except Exception as e:
            return TrustLookup.failure(participant, f"{type(e).__name__}: {e}")
        if summary is None:
            return TrustLookup.failure(participant, "not found")
        return TrustLookup.success(participant, summary.cheatFlag)

    async def enrich(
        self,
        entries: list[RankedEntry],
        period_id: int,
    ) -> list[RankedEntry]:
        """
        Attach oracle trust flags to ranked entries.

        Args:
            entries: Ranked entries, in rank order
            period_id: Oracle period (0 = all-time, 1 = current period)

        Returns:
            New entries in the same order with ``trust_flag`` set or None
        """
        if not entries:
            return []

        tasks = [
            asyncio.ensure_future(self.lookup(entry.participant, period_id))
            for entry in entries
        ]
        try:
            done, pending = await asyncio.wait(tasks, timeout=self.deadline)
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()

        if pending:
            logger.warning(
                f"Trust enrichment deadline of {self.deadline}s hit; "
                f"{len(pending)}/{len(tasks)} lookups abandoned"
            )
            await asyncio.gather(*pending, return_exceptions=True)

        enriched = []
        failures = 0
        for entry, task in zip(entries, tasks):
            if task in done:
                result = task.result()
            else:
                result = TrustLookup.failure(entry.participant, "deadline exceeded")
            if not result.ok:
                failures += 1
                logger.debug(
                    f"No trust flag for {entry.participant} (period {period_id}): {result.reason}"
                )
            enriched.append(entry.model_copy(update={"trust_flag": result.flag}))

        if failures:
            logger.info(f"Trust enrichment: {failures}/{len(entries)} lookups without a flag")
        return enriched
