"""Application configuration."""

import os
from dataclasses import dataclass
from typing import Optional


def _optional_float(value: Optional[str]) -> Optional[float]:
    if value is None or value.strip() == "":
        return None
    return float(value)


@dataclass
class Config:
    """Application configuration loaded from environment variables."""

    # API settings
    host: str = "0.0.0.0"
    port: int = 4000
    log_level: str = "INFO"

    # Flow (primary ledger) REST API
    flow_rest_url: str = "https://rest-testnet.onflow.org"
    leaderboard_contract: str = "0xb8404e09b36b6623"
    leaderboard_admin: str = "0xe647591c05619dba"
    current_period_alias: str = "week1"

    # Hyperion (secondary ledger) JSON-RPC
    hyperion_rpc_url: str = "https://hyperion-testnet.metisdevops.link"
    hyperion_chain_id: int = 133717
    relayer_private_key: str = ""
    oracle_address: str = ""
    address_mapper_address: str = ""

    # Result cache; empty URL selects the in-process cache
    redis_url: str = ""
    cache_ttl: float = 30.0

    # Identity linking
    app_id: str = "Memoree"
    tx_poll_interval: float = 2.0
    tx_poll_attempts: int = 30

    # Timeouts (seconds)
    request_timeout: float = 10.0
    enrichment_deadline: Optional[float] = None

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        return cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "4000")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            flow_rest_url=os.getenv(
                "FLOW_REST",
                "https://rest-testnet.onflow.org"
            ),
            leaderboard_contract=os.getenv(
                "LEADERBOARD_CONTRACT",
                "0xb8404e09b36b6623"
            ),
            leaderboard_admin=os.getenv(
                "LEADERBOARD_ADMIN",
                "0xe647591c05619dba"
            ),
            current_period_alias=os.getenv("CURRENT_PERIOD_ALIAS", "week1"),
            hyperion_rpc_url=os.getenv(
                "HYPERION_RPC_URL",
                "https://hyperion-testnet.metisdevops.link"
            ),
            hyperion_chain_id=int(os.getenv("HYPERION_CHAIN_ID", "133717")),
            relayer_private_key=os.getenv("RELAYER_PRIVATE_KEY", ""),
            oracle_address=os.getenv("AI_ORACLE_ADDRESS", ""),
            address_mapper_address=os.getenv("ADDRESS_MAPPER_ADDRESS", ""),
            redis_url=os.getenv("REDIS_URL", ""),
            cache_ttl=float(os.getenv("CACHE_TTL", "30")),
            app_id=os.getenv("APP_ID", "Memoree"),
            tx_poll_interval=float(os.getenv("TX_POLL_INTERVAL", "2")),
            tx_poll_attempts=int(os.getenv("TX_POLL_ATTEMPTS", "30")),
            request_timeout=float(os.getenv("REQUEST_TIMEOUT", "10")),
            enrichment_deadline=_optional_float(os.getenv("ENRICHMENT_DEADLINE")),
        )
