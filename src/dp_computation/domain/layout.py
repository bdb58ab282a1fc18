"""Field layout shared with the match_orders circuit.

Input: one record per intent, flattened in batch order:
    index, side, amount_in, filled_amount, min_amount_out, created_at, status
Side and status use the ledger's variant tags; created_at is carried as its
two's-complement u64.

Output: ``num_fills`` followed by one record per fill:
    order_index, counterparty_index, amount_in, amount_out
"""
import hashlib
import json
from collections.abc import Sequence

from src.dp_common.errors import AttestationMismatchError
from src.dp_computation.domain.models import IndexedFill
from src.dp_intent.domain.models import Intent
from src.dp_matching.domain.models import ExecutionPlan, Fill

INPUT_FIELDS_PER_RECORD = 7
OUTPUT_FIELDS_PER_FILL = 4

_U64 = 1 << 64


def serialize_intents(intents: Sequence[Intent]) -> list[int]:
    values: list[int] = []
    for index, intent in enumerate(intents):
        values.extend((
            index,
            intent.side.tag,
            intent.committed_amount,
            intent.filled_amount,
            intent.min_output,
            intent.created_at % _U64,
            intent.status.tag,
        ))
    return values


def deserialize_fills(values: Sequence[int]) -> list[IndexedFill]:
    if not values:
        raise AttestationMismatchError("empty computation output")
    count = values[0]
    body = values[1:]
    if len(body) < count * OUTPUT_FIELDS_PER_FILL:
        raise AttestationMismatchError(
            f"output declares {count} fills but carries {len(body)} fields"
        )
    return [
        IndexedFill(*body[n * OUTPUT_FIELDS_PER_FILL:(n + 1) * OUTPUT_FIELDS_PER_FILL])
        for n in range(count)
    ]


def resolve_fills(indexed: Sequence[IndexedFill], intents: Sequence[Intent]) -> list[Fill]:
    """Map batch indices back to intent addresses and owners."""
    fills: list[Fill] = []
    for f in indexed:
        if not (0 <= f.order_index < len(intents) and 0 <= f.counterparty_index < len(intents)):
            raise AttestationMismatchError(
                f"fill references index outside batch of {len(intents)}"
            )
        order, counterparty = intents[f.order_index], intents[f.counterparty_index]
        fills.append(Fill(
            order=order.address,
            counterparty=counterparty.address,
            amount_in=f.amount_in,
            amount_out=f.amount_out,
            order_owner=order.owner,
            counterparty_owner=counterparty.owner,
        ))
    return fills


def plan_digest(plan: ExecutionPlan) -> str:
    """SHA-256 over the market and ordered fills; timestamps are excluded."""
    canonical = {
        "market": plan.market,
        "fills": [
            [f.order, f.counterparty, f.amount_in, f.amount_out] for f in plan.fills
        ],
    }
    encoded = json.dumps(canonical, separators=(",", ":"), sort_keys=True).encode()
    return hashlib.sha256(encoded).hexdigest()
