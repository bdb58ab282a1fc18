"""Greedy FIFO batch matcher for one market.

Pure function: same input order in, same fills out. BUY and SELL intents are
each walked oldest-first with one cursor per side; every step fills
``min(remaining_buy, remaining_sell)`` at a 1:1 rate unless that amount is
below the buyer's minimum output, in which case the buyer is deferred to a
later round. Single pass, not globally optimal.
"""
from collections.abc import Sequence

from src.dp_common.enums import Side
from src.dp_common.errors import CrossMarketError
from src.dp_intent.domain.models import Intent
from src.dp_matching.domain.models import ExecutionPlan, Fill


def match_intents(market: str, intents: Sequence[Intent]) -> ExecutionPlan:
    for intent in intents:
        if intent.market != market:
            raise CrossMarketError(expected=market, found=intent.market)

    open_intents = [i for i in intents if i.is_open]
    # sorted() is stable: equal timestamps keep input order
    buys = sorted((i for i in open_intents if i.side == Side.BUY), key=lambda i: i.created_at)
    sells = sorted((i for i in open_intents if i.side == Side.SELL), key=lambda i: i.created_at)

    remaining: dict[str, int] = {i.address: i.remaining for i in open_intents}
    fills: list[Fill] = []
    b = s = 0
    while b < len(buys) and s < len(sells):
        buy, sell = buys[b], sells[s]
        rem_buy, rem_sell = remaining[buy.address], remaining[sell.address]
        if rem_buy <= 0:
            b += 1
            continue
        if rem_sell <= 0:
            s += 1
            continue

        amount = min(rem_buy, rem_sell)
        if amount < buy.min_output:
            # Deferred, not rejected: this buyer waits for a deeper counterparty.
            b += 1
            continue

        fills.append(Fill(
            order=buy.address,
            counterparty=sell.address,
            amount_in=amount,
            amount_out=amount,
            order_owner=buy.owner,
            counterparty_owner=sell.owner,
        ))
        remaining[buy.address] = rem_buy - amount
        remaining[sell.address] = rem_sell - amount
        if remaining[buy.address] == 0:
            b += 1
        if remaining[sell.address] == 0:
            s += 1

    return ExecutionPlan(market=market, fills=fills)
