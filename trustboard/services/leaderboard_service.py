"""Leaderboard service: Flow scores ranked and enriched with trust flags."""

import json
import logging
from enum import Enum
from typing import Optional

from trustboard.cache import ResultCache, SingleFlight
from trustboard.datasources import ScriptGateway
from trustboard.models import AddressValue, OptionalValue, StringValue, TaggedValue
from .ranking import parse_score_records, rank_records
from .trust_service import TrustEnricher

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL = 30.0

LEADERBOARD_SCRIPT = """
import Leaderboard from {contract}

access(all)
fun main(
  admin: Address,
  periodAlias: String?,
): [Leaderboard.ScoreRecord] {{
  if let adminRef = Leaderboard.borrowLeaderboardAdmin(admin) {{
    return adminRef.getLeaderboardByPeriodAlias(periodAlias)
  }}
  return []
}}
"""


class LeaderboardTab(str, Enum):
    """Leaderboard selectors exposed to clients."""
    OVERALL = "overall"
    CURRENT = "current"

    @classmethod
    def parse(cls, value: Optional[str]) -> "LeaderboardTab":
        """Anything other than ``current`` selects the overall board."""
        return cls.CURRENT if value == cls.CURRENT.value else cls.OVERALL

    @property
    def period_id(self) -> int:
        """Oracle period id: 0 = all-time, 1 = current period."""
        return 0 if self is LeaderboardTab.OVERALL else 1

    @property
    def cache_key(self) -> str:
        return f"leaderboard:{self.value}"


def leaderboard_script_args(admin: str, period_alias: Optional[str]) -> list[TaggedValue]:
    return [
        AddressValue(value=admin),
        OptionalValue(value=StringValue(value=period_alias) if period_alias is not None else None),
    ]


class LeaderboardService:
    """Service for building, enriching and caching the leaderboard."""

    def __init__(
        self,
        gateway: ScriptGateway,
        enricher: TrustEnricher,
        cache: ResultCache,
        leaderboard_contract: str,
        leaderboard_admin: str,
        current_period_alias: str = "week1",
        cache_ttl: float = DEFAULT_CACHE_TTL,
    ):
        self.gateway = gateway
        self.enricher = enricher
        self.cache = cache
        self.leaderboard_admin = leaderboard_admin
        self.current_period_alias = current_period_alias
        self.cache_ttl = cache_ttl
        self.script = LEADERBOARD_SCRIPT.format(contract=leaderboard_contract)
        self._flights = SingleFlight()

    def period_alias(self, tab: LeaderboardTab) -> Optional[str]:
        if tab is LeaderboardTab.CURRENT:
            return self.current_period_alias
        return None

    async def get_leaderboard(self, tab: Optional[str] = None) -> str:
        """
        Get the serialized leaderboard for a tab.

        Args:
            tab: ``overall`` or ``current``; other values fall back to overall

        Returns:
            JSON array of ``{rank, name, score, cheatFlag}`` objects. Repeated
            calls within the cache TTL return the identical text.

        Raises:
            GatewayError: the Flow script call failed
        """
        selected = LeaderboardTab.parse(tab)
        key = selected.cache_key

        cached = await self.cache.get(key)
        if cached is not None:
            return cached

        if self._flights.in_flight(key):
            logger.debug(f"Joining in-flight refresh of {key}")
        return await self._flights.do(key, lambda: self._refresh(selected))

    async def _refresh(self, tab: LeaderboardTab) -> str:
        payload = await self.build_payload(tab)
        await self.cache.set(tab.cache_key, payload, self.cache_ttl)
        return payload

    async def build_payload(self, tab: LeaderboardTab) -> str:
        """Run the full pipeline for a tab without touching the cache."""
        result = await self.gateway.run_script(
            self.script,
            leaderboard_script_args(self.leaderboard_admin, self.period_alias(tab)),
        )
        ranked = rank_records(parse_score_records(result))
        enriched = await self.enricher.enrich(ranked, tab.period_id)

        logger.info(f"Built {tab.value} leaderboard with {len(enriched)} entries")
        rows = [entry.to_row().model_dump() for entry in enriched]
        return json.dumps(rows, separators=(",", ":"))
