"""Projection of script results into score records, and ranking."""

import logging
import math
from typing import Optional

from trustboard.exceptions import DecodeError
from trustboard.models import (
    AddressValue,
    ArrayValue,
    IntValue,
    RankedEntry,
    ScoreRecord,
    StringValue,
    StructValue,
    TaggedValue,
    UFix64Value,
    UInt64Value,
    to_python,
)

logger = logging.getLogger(__name__)

_PARTICIPANT_TYPES = (StringValue, AddressValue)
_SCORE_TYPES = (UFix64Value, IntValue, UInt64Value, StringValue)


def _parse_record(element: TaggedValue) -> Optional[ScoreRecord]:
    """Return a record, or None if the element is not a usable score struct."""
    if not isinstance(element, StructValue) or len(element.fields) < 2:
        return None

    participant_value = element.fields[0].value
    score_value = element.fields[1].value
    if not isinstance(participant_value, _PARTICIPANT_TYPES):
        return None
    if not isinstance(score_value, _SCORE_TYPES):
        return None

    try:
        score = float(score_value.value)
    except ValueError:
        return None
    if not math.isfinite(score):
        return None

    return ScoreRecord(participant=participant_value.value, score=score)


def parse_score_records(value: TaggedValue) -> list[ScoreRecord]:
    """
    Flatten a ``[Leaderboard.ScoreRecord]`` script result.

    Each element must be a struct whose first field is the participant and
    whose second field is the score as a decimal string. Malformed elements
    are dropped and logged; the remaining records are still returned.

    Raises:
        DecodeError: the result is not an array
    """
    if not isinstance(value, ArrayValue):
        raise DecodeError(f"Expected an Array result, got {value.type}")

    records: list[ScoreRecord] = []
    for index, element in enumerate(value.value):
        record = _parse_record(element)
        if record is None:
            logger.warning(
                f"Dropping malformed leaderboard element {index}: {to_python(element)}"
            )
            continue
        records.append(record)
    return records


def rank_records(records: list[ScoreRecord]) -> list[RankedEntry]:
    """
    Sort by score descending and assign ranks starting at 1.

    The sort is stable, so equal scores keep their input order.
    """
    ordered = sorted(records, key=lambda r: r.score, reverse=True)
    return [
        RankedEntry(rank=i + 1, participant=r.participant, score=r.score)
        for i, r in enumerate(ordered)
    ]
