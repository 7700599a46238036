from .ranking import parse_score_records, rank_records
from .trust_service import TrustEnricher
from .leaderboard_service import LeaderboardService, LeaderboardTab
from .link_service import IdentityLinker

__all__ = [
    "parse_score_records",
    "rank_records",
    "TrustEnricher",
    "LeaderboardService",
    "LeaderboardTab",
    "IdentityLinker",
]
