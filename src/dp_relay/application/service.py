"""MatchAndSettleService: one settlement round for one market.

Flow: read open intents → select batch → match → check plan invariants →
verify through the computation gateway → settle → close filled intents.

A failure before settlement leaves the ledger untouched; a settlement
failure skips cleanup. Rounds for the same market are serialized with a
per-market lock, different markets run concurrently.
"""
import asyncio
import logging
from collections import Counter

from src.dp_common.errors import PlanInvariantError
from src.dp_computation.application.gateway import ComputationGatewayProtocol
from src.dp_intent.domain.models import IntentReadResult
from src.dp_intent.domain.repository import IntentStoreProtocol
from src.dp_matching.domain.models import ExecutionPlan
from src.dp_matching.engine.batch import select_batch
from src.dp_matching.engine.invariants import verify_plan_invariants
from src.dp_matching.engine.matching_algo import match_intents
from src.dp_reconciliation.application.service import CleanupResult, ReconciliationService
from src.dp_relay.application.schemas import (
    AttestationResponse,
    CleanupResponse,
    FillResponse,
    MatchAndSettleResponse,
    PlanResponse,
    SettlementReceiptResponse,
)
from src.dp_settlement.application.builder import SettlementBuilder
from src.dp_settlement.domain.models import SettlementReceipt

logger = logging.getLogger(__name__)

NO_OPEN_INTENTS_MESSAGE = "No open orders for this market"
NO_FILLS_MESSAGE = "No crossing intents; nothing settled"


def _plan_to_response(
    plan: ExecutionPlan, read: IntentReadResult, processed: int
) -> PlanResponse:
    attestation = None
    if plan.attestation is not None:
        attestation = AttestationResponse(
            signature=plan.attestation.signature,
            plan_digest=plan.attestation.plan_digest,
            computation_offset=plan.attestation.computation_offset,
        )
    return PlanResponse(
        market=plan.market,
        fills=[
            FillResponse(
                order=f.order,
                counterparty=f.counterparty,
                amount_in=f.amount_in,
                amount_out=f.amount_out,
            )
            for f in plan.fills
        ],
        created_at=plan.created_at,
        attestation=attestation,
        skipped_records=read.skip_count,
        total_intents=len(read.intents),
        processed_intents=processed,
        remaining_intents=len(read.intents) - processed,
    )


def _receipt_to_response(receipt: SettlementReceipt) -> SettlementReceiptResponse:
    return SettlementReceiptResponse(
        signature=receipt.signature,
        market=receipt.market,
        fills_settled=receipt.fills_settled,
        submitted_at=receipt.submitted_at,
    )


def _cleanup_to_response(result: CleanupResult) -> CleanupResponse:
    return CleanupResponse(closed=result.closed, failed=result.failed, skipped=result.skipped)


class MatchAndSettleService:
    def __init__(
        self,
        intent_store: IntentStoreProtocol,
        gateway: ComputationGatewayProtocol,
        settlement: SettlementBuilder,
        reconciliation: ReconciliationService,
        batch_max_per_side: int = 0,
    ) -> None:
        self._intent_store = intent_store
        self._gateway = gateway
        self._settlement = settlement
        self._reconciliation = reconciliation
        self._batch_max_per_side = batch_max_per_side
        self._market_locks: dict[str, asyncio.Lock] = {}
        self._lock_users: Counter[str] = Counter()

    async def match_and_settle(self, market: str) -> MatchAndSettleResponse:
        lock = self._market_locks.setdefault(market, asyncio.Lock())
        self._lock_users[market] += 1
        try:
            async with lock:
                return await self._run_round(market)
        finally:
            # Drop the lock once no round holds or awaits it.
            self._lock_users[market] -= 1
            if not self._lock_users[market]:
                del self._lock_users[market]
                del self._market_locks[market]

    async def _run_round(self, market: str) -> MatchAndSettleResponse:
        read = await self._intent_store.list_open_intents(market)
        if not read.intents:
            logger.info("Market %s: no open intents", market)
            return MatchAndSettleResponse(
                message=NO_OPEN_INTENTS_MESSAGE, skipped_records=read.skip_count
            )

        batch = select_batch(read.intents, self._batch_max_per_side)
        plan = match_intents(market, batch)
        violations = verify_plan_invariants(plan, batch)
        if violations:
            raise PlanInvariantError(violations)

        if plan.is_empty:
            logger.info("Market %s: %d intents, no crossing fills", market, len(batch))
            return MatchAndSettleResponse(
                plan=_plan_to_response(plan, read, len(batch)),
                cleanup=CleanupResponse(),
                message=NO_FILLS_MESSAGE,
                skipped_records=read.skip_count,
            )

        market_info = await self._intent_store.get_market(market)
        token = await self._gateway.verify(batch, plan)
        plan = plan.with_attestation(token)

        receipt = await self._settlement.settle(plan, market_info)
        cleanup = await self._reconciliation.cleanup(market_info, plan.fills)

        logger.info(
            "Market %s round done: fills=%d tx=%s closed=%d failed=%d",
            market, len(plan.fills), receipt.signature, cleanup.closed, cleanup.failed,
        )
        return MatchAndSettleResponse(
            settlement_receipt=_receipt_to_response(receipt),
            plan=_plan_to_response(plan, read, len(batch)),
            cleanup=_cleanup_to_response(cleanup),
            message=f"Settled {len(plan.fills)} fills",
            skipped_records=read.skip_count,
        )
