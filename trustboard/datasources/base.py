"""Abstract base classes for ledger data sources."""

from abc import ABC, abstractmethod
from typing import Optional

from trustboard.models import PlayerSummary, TaggedValue


class ScriptGateway(ABC):
    """
    Read-only script execution against the primary (Flow) ledger.

    This abstraction lets the leaderboard pipeline run against the public
    REST API in production and against stubs in tests.
    """

    @abstractmethod
    async def run_script(
        self,
        source: str,
        args: list[TaggedValue],
    ) -> TaggedValue:
        """
        Execute a script at the latest sealed block.

        Args:
            source: Cadence source text
            args: Script arguments, in order

        Returns:
            The decoded result value

        Raises:
            UpstreamUnavailable: network error or timeout
            UpstreamRejected: non-2xx response
            DecodeError: malformed response body
        """
        pass

    async def close(self) -> None:
        """
        Clean up resources (e.g., close HTTP sessions).

        Override this if the data source holds resources that need cleanup.
        """
        pass


class TrustOracle(ABC):
    """Read-only view of the trust oracle on the secondary ledger."""

    @abstractmethod
    async def get_summary(
        self,
        participant: str,
        period_id: int,
    ) -> Optional[PlayerSummary]:
        """
        Read the summary posted for a participant and period.

        Args:
            participant: Flow address of the participant (0x...)
            period_id: Period selector (0 = all-time, 1 = current period)

        Returns:
            The summary, or None if the oracle has nothing for this key
        """
        pass

    async def close(self) -> None:
        pass
