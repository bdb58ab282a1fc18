"""LedgerIntentStore: reads Order and Market accounts from the ledger.

Bulk reads never fail because of a single bad record: anything the codec
rejects (retired schema versions, unknown enum tags, broken invariants) is
logged and reported in ``IntentReadResult.skipped``.
"""
import logging

from src.dp_common.datetime_utils import from_unix
from src.dp_common.errors import AdapterDecodeError, MarketNotFoundError
from src.dp_common.ledger_client import LedgerClient
from src.dp_intent.domain.codec import (
    ORDER_DISCRIMINATOR,
    ORDER_MARKET_OFFSET,
    decode_address,
    decode_market,
    decode_order,
)
from src.dp_intent.domain.models import Intent, IntentReadResult, Market, SkippedRecord

logger = logging.getLogger(__name__)


class LedgerIntentStore:
    def __init__(self, ledger: LedgerClient) -> None:
        self._ledger = ledger

    async def list_open_intents(self, market: str) -> IntentReadResult:
        accounts = await self._ledger.fetch_program_accounts(
            [(0, ORDER_DISCRIMINATOR), (ORDER_MARKET_OFFSET, decode_address(market))]
        )
        result = IntentReadResult(market=market)
        for address, data in accounts:
            try:
                intent = decode_order(address, data)
            except AdapterDecodeError as e:
                logger.warning("Skipping order %s: %s", address, e.reason)
                result.skipped.append(SkippedRecord(address=address, reason=e.reason))
                continue
            # The RPC filter already matched on market; re-check the decoded value.
            if intent.market != market or not intent.is_open:
                continue
            result.intents.append(intent)
        logger.info(
            "Market %s: %d open intents, %d skipped of %d accounts",
            market, len(result.intents), result.skip_count, len(accounts),
        )
        if result.intents and logger.isEnabledFor(logging.DEBUG):
            oldest = min(i.created_at for i in result.intents)
            logger.debug("Market %s: oldest open intent placed %s", market, from_unix(oldest))
        return result

    async def get_intent(self, address: str) -> Intent | None:
        """Current state of one intent; None once its account has been closed."""
        data = await self._ledger.fetch_account(address)
        if data is None:
            return None
        return decode_order(address, data)

    async def get_market(self, market: str) -> Market:
        data = await self._ledger.fetch_account(market)
        if data is None:
            raise MarketNotFoundError(market)
        try:
            return decode_market(market, data)
        except AdapterDecodeError as e:
            logger.error("Market account %s is not decodable: %s", market, e.reason)
            raise MarketNotFoundError(market) from e
