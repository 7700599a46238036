"""Shared fixtures and stubs for trustboard tests."""

import base64
import json
from typing import Optional

import pytest

from trustboard.datasources import ScriptGateway, TrustOracle
from trustboard.models import PlayerSummary, TaggedValue, tagged_value_adapter

SCORE_RECORD_ID = "A.4fae0a028f1057ae.Leaderboard.ScoreRecord"


def score_struct(participant: str, score: str) -> dict:
    """JSON-Cadence struct as returned by the leaderboard script."""
    return {
        "type": "Struct",
        "value": {
            "id": SCORE_RECORD_ID,
            "fields": [
                {"name": "participant", "value": {"type": "String", "value": participant}},
                {"name": "score", "value": {"type": "UFix64", "value": score}},
            ],
        },
    }


def score_array(*pairs: tuple[str, str]) -> dict:
    return {"type": "Array", "value": [score_struct(p, s) for p, s in pairs]}


def flow_response_body(tree: dict) -> str:
    """Body of a successful ``POST /v1/scripts`` response."""
    encoded = base64.b64encode(json.dumps(tree).encode("utf-8")).decode("ascii")
    return json.dumps(encoded)


class StubGateway(ScriptGateway):
    """Script gateway returning a fixed result and counting calls."""

    def __init__(self, tree: Optional[dict] = None, error: Optional[Exception] = None):
        self.result: Optional[TaggedValue] = (
            tagged_value_adapter.validate_python(tree) if tree is not None else None
        )
        self.error = error
        self.calls: list[tuple[str, list[TaggedValue]]] = []

    async def run_script(self, source, args):
        self.calls.append((source, args))
        if self.error is not None:
            raise self.error
        return self.result


class StubOracle(TrustOracle):
    """Trust oracle answering from a dict; missing keys are not-found."""

    def __init__(self, flags: Optional[dict] = None, error: Optional[Exception] = None):
        self.flags = flags or {}
        self.error = error
        self.calls: list[tuple[str, int]] = []

    async def get_summary(self, participant, period_id):
        self.calls.append((participant, period_id))
        if self.error is not None:
            raise self.error
        flag = self.flags.get(participant)
        if flag is None:
            return None
        return PlayerSummary(deltaRating=0, cheatFlag=flag, coachId="0x" + "00" * 16)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def alice_bob_tree():
    return score_array(("alice", "12.5000"), ("bob", "40.0000"))
