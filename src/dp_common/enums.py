"""Global enums: values must match the ledger program's variant order.

Borsh encodes a fieldless enum as its u8 variant index; ``from_tag`` is the
only way a raw tag becomes a domain value and it rejects unknown tags.
"""

from enum import Enum


class Side(str, Enum):
    BUY = "BUY"  # ledger: Bid
    SELL = "SELL"  # ledger: Ask

    @classmethod
    def from_tag(cls, tag: int) -> "Side":
        try:
            return _SIDE_BY_TAG[tag]
        except KeyError:
            raise ValueError(f"unknown side tag {tag}") from None

    @property
    def tag(self) -> int:
        return _SIDE_TAGS.index(self)


class IntentStatus(str, Enum):
    OPEN = "OPEN"
    PARTIALLY_FILLED = "PARTIALLY_FILLED"
    FILLED = "FILLED"
    CANCELLED = "CANCELLED"

    @classmethod
    def from_tag(cls, tag: int) -> "IntentStatus":
        try:
            return _STATUS_BY_TAG[tag]
        except KeyError:
            raise ValueError(f"unknown status tag {tag}") from None

    @property
    def tag(self) -> int:
        return _STATUS_TAGS.index(self)

    @property
    def is_matchable(self) -> bool:
        return self in (IntentStatus.OPEN, IntentStatus.PARTIALLY_FILLED)


class VerificationMode(str, Enum):
    LOCAL = "local"
    NETWORK = "network"


class JobState(str, Enum):
    QUEUED = "QUEUED"
    FINALIZED = "FINALIZED"
    FAILED = "FAILED"


_SIDE_TAGS = (Side.BUY, Side.SELL)
_STATUS_TAGS = (
    IntentStatus.OPEN,
    IntentStatus.PARTIALLY_FILLED,
    IntentStatus.FILLED,
    IntentStatus.CANCELLED,
)

_SIDE_BY_TAG = dict(enumerate(_SIDE_TAGS))
_STATUS_BY_TAG = dict(enumerate(_STATUS_TAGS))
