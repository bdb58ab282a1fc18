from unittest.mock import AsyncMock, MagicMock

from solders.pubkey import Pubkey

from src.dp_common.enums import IntentStatus, Side
from src.dp_matching.engine.matching_algo import match_intents
from src.dp_reconciliation.application.service import ReconciliationService, touched_addresses
from tests.helpers.ledger_fixtures import MARKET, PROGRAM_ID, address, make_intent, make_market


class FakeLedgerState:
    """Intent store + ledger double where closing an intent removes its account."""

    def __init__(self, intents) -> None:
        self.accounts = {i.address: i for i in intents}
        self.fail_for: set[str] = set()
        self.ledger = MagicMock()
        self.ledger.program_id = Pubkey.from_string(PROGRAM_ID)
        self.ledger.send_instructions = AsyncMock(side_effect=self._send)
        self.store = MagicMock()
        self.store.get_intent = AsyncMock(side_effect=self._get)

    async def _get(self, addr: str):
        return self.accounts.get(addr)

    async def _send(self, instructions) -> str:
        closed = str(instructions[0].accounts[0].pubkey)
        if closed in self.fail_for:
            raise RuntimeError("blockhash expired")
        del self.accounts[closed]
        return f"close-{closed[:6]}"


def _settled_round():
    buy = make_intent(1, Side.BUY, 100)
    sell_a = make_intent(2, Side.SELL, 60)
    sell_b = make_intent(3, Side.SELL, 80)
    plan = match_intents(MARKET, [buy, sell_a, sell_b])
    # ledger state after settle_batch applied the plan
    after = [
        make_intent(1, Side.BUY, 100, filled=100, status=IntentStatus.FILLED),
        make_intent(2, Side.SELL, 60, filled=60, status=IntentStatus.FILLED),
        make_intent(3, Side.SELL, 80, filled=40, status=IntentStatus.PARTIALLY_FILLED),
    ]
    return plan, after


class TestTouchedAddresses:
    def test_deduplicated_in_first_seen_order(self) -> None:
        plan, _ = _settled_round()
        assert touched_addresses(plan.fills) == [address(1), address(2), address(3)]


class TestCleanup:
    async def test_closes_only_fully_filled(self) -> None:
        plan, after = _settled_round()
        state = FakeLedgerState(after)
        result = await ReconciliationService(state.ledger, state.store).cleanup(
            make_market(), plan.fills
        )
        assert result.closed == 2
        assert result.failed == 0
        assert result.skipped == 1
        assert set(state.accounts) == {address(3)}

    async def test_second_run_is_a_no_op(self) -> None:
        plan, after = _settled_round()
        state = FakeLedgerState(after)
        service = ReconciliationService(state.ledger, state.store)
        await service.cleanup(make_market(), plan.fills)
        sends = state.ledger.send_instructions.await_count

        again = await service.cleanup(make_market(), plan.fills)
        assert again.closed == 0
        assert again.failed == 0
        assert state.ledger.send_instructions.await_count == sends

    async def test_cancelled_intent_skipped(self) -> None:
        plan, _ = _settled_round()
        state = FakeLedgerState([
            make_intent(1, Side.BUY, 100, filled=100, status=IntentStatus.CANCELLED),
        ])
        result = await ReconciliationService(state.ledger, state.store).cleanup(
            make_market(), plan.fills
        )
        assert (result.closed, result.failed) == (0, 0)
        state.ledger.send_instructions.assert_not_awaited()

    async def test_failure_is_counted_and_batch_continues(self) -> None:
        plan, after = _settled_round()
        state = FakeLedgerState(after)
        state.fail_for.add(address(1))
        result = await ReconciliationService(state.ledger, state.store).cleanup(
            make_market(), plan.fills
        )
        assert result.failed == 1
        assert result.closed == 1
        assert address(2) not in state.accounts

    async def test_reread_failure_is_counted(self) -> None:
        plan, after = _settled_round()
        state = FakeLedgerState(after)
        state.store.get_intent = AsyncMock(side_effect=ConnectionError("rpc down"))
        result = await ReconciliationService(state.ledger, state.store).cleanup(
            make_market(), plan.fills
        )
        assert result.failed == 3
        assert result.closed == 0
