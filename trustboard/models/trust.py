"""Trust signal models read from the Hyperion AI oracle."""

from dataclasses import dataclass
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict


class PlayerSummary(BaseModel):
    """Decoded ``getSummary`` return value."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    deltaRating: int = Field(description="Rating delta posted by the coach model")
    cheatFlag: int = Field(description="0=clean, 1=suspect, 2=banned")
    coachId: str = Field(description="bytes16 coach identifier as 0x-prefixed hex")


@dataclass(frozen=True)
class TrustLookup:
    """Outcome of one oracle lookup: either a flag or a failure reason."""

    participant: str
    flag: Optional[int] = None
    reason: Optional[str] = None

    @classmethod
    def success(cls, participant: str, flag: int) -> "TrustLookup":
        return cls(participant=participant, flag=flag)

    @classmethod
    def failure(cls, participant: str, reason: str) -> "TrustLookup":
        return cls(participant=participant, reason=reason)

    @property
    def ok(self) -> bool:
        return self.reason is None
