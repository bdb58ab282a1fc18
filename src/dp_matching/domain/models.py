from dataclasses import dataclass, field, replace
from datetime import datetime

from src.dp_common.datetime_utils import utc_now


@dataclass(frozen=True)
class Fill:
    """Single match between a BUY intent (order) and a SELL intent (counterparty)."""

    order: str  # buy-side intent address
    counterparty: str  # sell-side intent address
    amount_in: int  # quote released from the buy side to the seller
    amount_out: int  # base released from the sell side to the buyer
    order_owner: str
    counterparty_owner: str


@dataclass(frozen=True)
class AttestationToken:
    """Evidence returned by the computation gateway, carried opaquely to settlement."""

    signature: str
    plan_digest: str  # sha256 of the canonical plan this token was issued for
    computation_offset: int | None = None  # None for the local stub

    def as_bytes(self) -> bytes:
        return self.signature.encode("utf-8")


@dataclass(frozen=True)
class ExecutionPlan:
    market: str
    fills: list[Fill] = field(default_factory=list)
    created_at: datetime = field(default_factory=utc_now)
    attestation: AttestationToken | None = None

    @property
    def is_empty(self) -> bool:
        return not self.fills

    def with_attestation(self, attestation: AttestationToken) -> "ExecutionPlan":
        return replace(self, attestation=attestation)
