"""FastAPI dependencies for dependency injection."""

from fastapi import Request

from trustboard.exceptions import NotConfigured
from trustboard.services import IdentityLinker, LeaderboardService


def get_leaderboard_service(request: Request) -> LeaderboardService:
    """Get the leaderboard service built at app startup."""
    service = getattr(request.app.state, "leaderboard_service", None)
    if service is None:
        raise NotConfigured("Leaderboard service is not configured")
    return service


def get_identity_linker(request: Request) -> IdentityLinker:
    """Get the identity linker built at app startup."""
    linker = getattr(request.app.state, "identity_linker", None)
    if linker is None:
        raise NotConfigured("Identity linking is not configured")
    return linker
