from dataclasses import dataclass, field
from datetime import datetime

from src.dp_common.datetime_utils import utc_now


@dataclass(frozen=True)
class SettlementReceipt:
    market: str
    signature: str | None  # None when there was nothing to settle
    fills_settled: int
    submitted_at: datetime = field(default_factory=utc_now)
