from src.dp_common.enums import IntentStatus, Side
from src.dp_matching.domain.models import ExecutionPlan, Fill
from src.dp_matching.engine.batch import select_batch
from src.dp_matching.engine.invariants import verify_plan_invariants
from tests.helpers.ledger_fixtures import MARKET, OTHER_MARKET, make_intent


def _fill(buy, sell, amount_in: int, amount_out: int | None = None) -> Fill:
    return Fill(
        order=buy.address,
        counterparty=sell.address,
        amount_in=amount_in,
        amount_out=amount_in if amount_out is None else amount_out,
        order_owner=buy.owner,
        counterparty_owner=sell.owner,
    )


class TestVerifyPlanInvariants:
    def test_valid_plan_has_no_violations(self) -> None:
        buy, sell = make_intent(1, Side.BUY, 100), make_intent(2, Side.SELL, 100)
        plan = ExecutionPlan(market=MARKET, fills=[_fill(buy, sell, 100)])
        assert verify_plan_invariants(plan, [buy, sell]) == []

    def test_unknown_intent(self) -> None:
        buy, sell = make_intent(1, Side.BUY, 100), make_intent(2, Side.SELL, 100)
        plan = ExecutionPlan(market=MARKET, fills=[_fill(buy, sell, 10)])
        violations = verify_plan_invariants(plan, [buy])
        assert len(violations) == 1
        assert "INV-1" in violations[0]

    def test_foreign_market_intent(self) -> None:
        buy = make_intent(1, Side.BUY, 100)
        sell = make_intent(2, Side.SELL, 100, market=OTHER_MARKET)
        plan = ExecutionPlan(market=MARKET, fills=[_fill(buy, sell, 10)])
        assert any("INV-1" in v for v in verify_plan_invariants(plan, [buy, sell]))

    def test_asymmetric_fill(self) -> None:
        buy, sell = make_intent(1, Side.BUY, 100), make_intent(2, Side.SELL, 100)
        plan = ExecutionPlan(market=MARKET, fills=[_fill(buy, sell, 10, 9)])
        assert any("INV-2" in v for v in verify_plan_invariants(plan, [buy, sell]))

    def test_zero_fill(self) -> None:
        buy, sell = make_intent(1, Side.BUY, 100), make_intent(2, Side.SELL, 100)
        plan = ExecutionPlan(market=MARKET, fills=[_fill(buy, sell, 0)])
        assert any("INV-2" in v for v in verify_plan_invariants(plan, [buy, sell]))

    def test_overfill_across_fills(self) -> None:
        buy = make_intent(1, Side.BUY, 100, filled=50, status=IntentStatus.PARTIALLY_FILLED)
        sell_a, sell_b = make_intent(2, Side.SELL, 40), make_intent(3, Side.SELL, 40)
        plan = ExecutionPlan(market=MARKET, fills=[_fill(buy, sell_a, 30), _fill(buy, sell_b, 30)])
        violations = verify_plan_invariants(plan, [buy, sell_a, sell_b])
        assert any("INV-3" in v and buy.address in v for v in violations)

    def test_wrong_sides(self) -> None:
        sell, buy = make_intent(1, Side.SELL, 100), make_intent(2, Side.BUY, 100)
        plan = ExecutionPlan(market=MARKET, fills=[_fill(sell, buy, 10)])
        assert any("INV-4" in v for v in verify_plan_invariants(plan, [buy, sell]))


class TestSelectBatch:
    def test_zero_keeps_everything(self) -> None:
        intents = [make_intent(n, Side.BUY, 10) for n in range(1, 5)]
        assert select_batch(intents, 0) == intents

    def test_keeps_oldest_per_side(self) -> None:
        b_new = make_intent(1, Side.BUY, 10, created_at=30)
        b_old = make_intent(2, Side.BUY, 10, created_at=10)
        s_new = make_intent(3, Side.SELL, 10, created_at=40)
        s_old = make_intent(4, Side.SELL, 10, created_at=20)
        selected = select_batch([b_new, b_old, s_new, s_old], 1)
        assert selected == [b_old, s_old]

    def test_fewer_than_cap(self) -> None:
        buy = make_intent(1, Side.BUY, 10)
        assert select_batch([buy], 3) == [buy]
