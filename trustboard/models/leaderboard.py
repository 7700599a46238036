"""Leaderboard models for the ranking pipeline and API responses."""

from typing import Optional
from pydantic import BaseModel, Field, ConfigDict, field_serializer


class ScoreRecord(BaseModel):
    """One participant/score pair read from the Flow leaderboard script."""
    model_config = ConfigDict(frozen=True)

    participant: str
    score: float


class RankedEntry(BaseModel):
    """
    A ranked leaderboard entry.

    ``trust_flag`` stays None when the oracle lookup failed or had no data;
    None is final, not pending.
    """
    model_config = ConfigDict(frozen=True)

    rank: int = Field(ge=1)
    participant: str
    score: float
    trust_flag: Optional[int] = None

    def to_row(self) -> "LeaderboardRow":
        return LeaderboardRow(
            rank=self.rank,
            name=self.participant,
            score=self.score,
            cheatFlag=self.trust_flag,
        )


class LeaderboardRow(BaseModel):
    """
    A single entry in the leaderboard response.
    """
    model_config = ConfigDict(populate_by_name=True)

    rank: int
    name: str
    score: float
    cheatFlag: Optional[int] = Field(default=None, description="Oracle trust flag: 0=clean, 1=suspect, 2=banned")

    @field_serializer("score")
    def serialize_score(self, score: float):
        # integral scores render as 40, not 40.0
        if score.is_integer() and abs(score) < 1e21:
            return int(score)
        return score
