"""Intent domain model: pure dataclasses, no ledger SDK dependency."""
from dataclasses import dataclass, field

from src.dp_common.enums import IntentStatus, Side


@dataclass(frozen=True)
class Intent:
    address: str
    owner: str
    market: str
    side: Side
    committed_amount: int  # amount_in locked in the vault
    filled_amount: int
    min_output: int
    status: IntentStatus
    created_at: int  # unix seconds (ledger clock)
    nonce: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.filled_amount <= self.committed_amount:
            raise ValueError(
                f"filled_amount {self.filled_amount} outside [0, {self.committed_amount}]"
            )
        if self.status.is_matchable and self.filled_amount == self.committed_amount:
            raise ValueError(f"status {self.status.value} on a fully filled intent")

    @property
    def remaining(self) -> int:
        return self.committed_amount - self.filled_amount

    @property
    def is_open(self) -> bool:
        return self.status.is_matchable

    @property
    def is_fully_filled(self) -> bool:
        return self.filled_amount == self.committed_amount


@dataclass(frozen=True)
class Market:
    """Read-only view of a Market account: two mints and their vaults."""

    address: str
    base_mint: str
    quote_mint: str
    base_vault: str
    quote_vault: str


@dataclass(frozen=True)
class SkippedRecord:
    address: str
    reason: str


@dataclass
class IntentReadResult:
    """Partitioned bulk read: decodable open intents plus what was skipped."""

    market: str
    intents: list[Intent] = field(default_factory=list)
    skipped: list[SkippedRecord] = field(default_factory=list)

    @property
    def skip_count(self) -> int:
        return len(self.skipped)

    def __len__(self) -> int:
        return len(self.intents)
