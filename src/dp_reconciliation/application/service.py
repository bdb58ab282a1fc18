"""ReconciliationService: closes intents a settlement left fully filled.

Every address touched by the settled fills is re-read from the ledger. Only
intents whose filled amount reached the committed amount are closed; intents
already closed or cancelled are skipped silently, so running cleanup twice
over the same fills is harmless. A failure on one intent is counted and
logged and never aborts the rest of the batch.
"""
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from src.dp_common.enums import IntentStatus
from src.dp_common.errors import AppError, CleanupError
from src.dp_common.ledger_client import LedgerClient
from src.dp_intent.domain.models import Market
from src.dp_intent.domain.repository import IntentStoreProtocol
from src.dp_matching.domain.models import Fill
from src.dp_settlement.domain.instructions import build_cancel_order_instruction

logger = logging.getLogger(__name__)


@dataclass
class CleanupResult:
    closed: int = 0
    failed: int = 0
    skipped: int = 0


def touched_addresses(fills: Sequence[Fill]) -> list[str]:
    """Primary and counterparty addresses in first-seen order, deduplicated."""
    seen: dict[str, None] = {}
    for f in fills:
        seen.setdefault(f.order)
        seen.setdefault(f.counterparty)
    return list(seen)


class ReconciliationService:
    def __init__(self, ledger: LedgerClient, intent_store: IntentStoreProtocol) -> None:
        self._ledger = ledger
        self._intent_store = intent_store

    async def cleanup(self, market: Market, fills: Sequence[Fill]) -> CleanupResult:
        result = CleanupResult()
        for address in touched_addresses(fills):
            try:
                closed = await self._close_if_filled(address, market)
            except CleanupError as e:
                result.failed += 1
                logger.warning("Cleanup of %s failed: %s", address, e.message)
                continue
            if closed:
                result.closed += 1
            else:
                result.skipped += 1
        logger.info(
            "Cleanup for market %s: closed=%d failed=%d skipped=%d",
            market.address, result.closed, result.failed, result.skipped,
        )
        return result

    async def _close_if_filled(self, address: str, market: Market) -> bool:
        try:
            intent = await self._intent_store.get_intent(address)
        except AppError as e:
            raise CleanupError(address, e.message) from e
        except Exception as e:
            raise CleanupError(address, f"re-read failed: {e}") from e

        if intent is None or intent.status == IntentStatus.CANCELLED:
            return False
        if not intent.is_fully_filled:
            return False

        try:
            instruction = build_cancel_order_instruction(self._ledger.program_id, intent, market)
            signature = await self._ledger.send_instructions([instruction])
        except Exception as e:
            raise CleanupError(address, str(e) or type(e).__name__) from e
        logger.info("Closed filled intent %s: %s", address, signature)
        return True
