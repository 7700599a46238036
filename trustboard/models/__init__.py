from .tagged_value import (
    TaggedValue,
    StringValue,
    AddressValue,
    UFix64Value,
    IntValue,
    UInt64Value,
    BoolValue,
    OptionalValue,
    ArrayValue,
    StructValue,
    StructBody,
    StructField,
    DictionaryValue,
    DictionaryEntry,
    tagged_value_adapter,
    to_python,
)
from .leaderboard import ScoreRecord, RankedEntry, LeaderboardRow
from .trust import PlayerSummary, TrustLookup
from .link import (
    LinkState,
    LinkRequest,
    LinkResult,
    LinkAttempt,
    TxStatusResponse,
)

__all__ = [
    "TaggedValue",
    "StringValue",
    "AddressValue",
    "UFix64Value",
    "IntValue",
    "UInt64Value",
    "BoolValue",
    "OptionalValue",
    "ArrayValue",
    "StructValue",
    "StructBody",
    "StructField",
    "DictionaryValue",
    "DictionaryEntry",
    "tagged_value_adapter",
    "to_python",
    "ScoreRecord",
    "RankedEntry",
    "LeaderboardRow",
    "PlayerSummary",
    "TrustLookup",
    "LinkState",
    "LinkRequest",
    "LinkResult",
    "LinkAttempt",
    "TxStatusResponse",
]
