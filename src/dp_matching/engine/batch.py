"""Round selection: how many open intents one settlement round carries.

A settle_batch transaction adds six accounts per fill, so a single round can
only carry a few pairs. Selection keeps the oldest intents of each side, the
same priority the matcher uses, and leaves the rest for the next round.
"""
from collections.abc import Sequence

from src.dp_common.enums import Side
from src.dp_intent.domain.models import Intent


def select_batch(intents: Sequence[Intent], max_per_side: int) -> list[Intent]:
    """Oldest ``max_per_side`` BUY and SELL intents; 0 keeps everything."""
    if max_per_side <= 0:
        return list(intents)
    selected: list[Intent] = []
    for side in (Side.BUY, Side.SELL):
        same_side = sorted((i for i in intents if i.side == side), key=lambda i: i.created_at)
        selected.extend(same_side[:max_per_side])
    return selected
