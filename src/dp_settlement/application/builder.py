"""SettlementBuilder: commits an attested plan as one settle_batch transaction.

The transaction is atomic on the ledger: either every fill of the plan is
applied or none is. A rejection is surfaced as SettlementError with the
underlying exception attached and is never retried.
"""
import logging

from src.dp_common.errors import SettlementError
from src.dp_common.ledger_client import LedgerClient
from src.dp_intent.domain.models import Market
from src.dp_intent.domain.repository import IntentStoreProtocol
from src.dp_matching.domain.models import ExecutionPlan
from src.dp_settlement.domain.instructions import build_settle_batch_instruction
from src.dp_settlement.domain.models import SettlementReceipt

logger = logging.getLogger(__name__)


class SettlementBuilder:
    def __init__(self, ledger: LedgerClient, intent_store: IntentStoreProtocol) -> None:
        self._ledger = ledger
        self._intent_store = intent_store

    async def settle(self, plan: ExecutionPlan, market: Market | None = None) -> SettlementReceipt:
        if plan.is_empty:
            return SettlementReceipt(market=plan.market, signature=None, fills_settled=0)
        if plan.attestation is None:
            raise SettlementError("plan carries no attestation")

        try:
            if market is None:
                market = await self._intent_store.get_market(plan.market)
            instruction = build_settle_batch_instruction(
                program_id=self._ledger.program_id,
                operator=self._ledger.operator,
                market=market,
                fills=plan.fills,
                attestation=plan.attestation.as_bytes(),
            )
            signature = await self._ledger.send_instructions([instruction])
        except Exception as e:
            logger.error("settle_batch for market %s rejected: %s", plan.market, e)
            raise SettlementError(str(e) or type(e).__name__, cause=e) from e

        logger.info(
            "Settled %d fills for market %s: %s", len(plan.fills), plan.market, signature
        )
        return SettlementReceipt(
            market=plan.market, signature=signature, fills_settled=len(plan.fills)
        )
