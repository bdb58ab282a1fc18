"""Plan invariant verification before a plan leaves the process.

INV-1: every fill references intents of the plan's market
INV-2: fills are symmetric (amount_in == amount_out) and non-zero
INV-3: cumulative fill amount per intent never exceeds its remaining amount
INV-4: each fill pairs a BUY intent (order) with a SELL intent (counterparty)
"""

import logging
from collections import defaultdict
from collections.abc import Sequence

from src.dp_common.enums import Side
from src.dp_intent.domain.models import Intent
from src.dp_matching.domain.models import ExecutionPlan

logger = logging.getLogger(__name__)


def verify_plan_invariants(plan: ExecutionPlan, intents: Sequence[Intent]) -> list[str]:
    """Return list of violation strings; empty when the plan is safe to settle."""
    violations: list[str] = []
    by_address = {i.address: i for i in intents}
    consumed: dict[str, int] = defaultdict(int)

    for n, fill in enumerate(plan.fills):
        buy = by_address.get(fill.order)
        sell = by_address.get(fill.counterparty)
        if buy is None or sell is None:
            violations.append(f"INV-1 violated: fill {n} references unknown intent")
            continue
        if buy.market != plan.market or sell.market != plan.market:
            violations.append(f"INV-1 violated: fill {n} crosses into another market")
        if fill.amount_in != fill.amount_out or fill.amount_in <= 0:
            violations.append(
                f"INV-2 violated: fill {n} amount_in={fill.amount_in} "
                f"amount_out={fill.amount_out}"
            )
        if buy.side != Side.BUY or sell.side != Side.SELL:
            violations.append(f"INV-4 violated: fill {n} pairs {buy.side.value}/{sell.side.value}")
        consumed[buy.address] += fill.amount_in
        consumed[sell.address] += fill.amount_out

    for address, total in consumed.items():
        intent = by_address[address]
        if total > intent.remaining:
            violations.append(
                f"INV-3 violated: intent {address} filled {total} > remaining {intent.remaining}"
            )

    for msg in violations:
        logger.error(msg)
    if not violations:
        logger.debug("Plan invariants OK: market=%s, fills=%d", plan.market, len(plan.fills))
    return violations
