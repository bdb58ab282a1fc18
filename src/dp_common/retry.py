"""Bounded retry policy for calls that may legitimately return "not yet".

The MPC network publishes its public key some time after the cluster comes
up, so the first few reads can come back empty. ``poll_until`` keeps asking
at a fixed (or growing) interval and gives up with ``RetryExhaustedError``
once ``max_attempts`` is reached.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryExhaustedError(Exception):
    def __init__(self, attempts: int, last_error: BaseException | None = None) -> None:
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"gave up after {attempts} attempts")


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int
    delay_s: float
    backoff: float = 1.0  # 1.0 = fixed delay

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.delay_s < 0 or self.backoff < 1.0:
            raise ValueError("delay_s must be >= 0 and backoff >= 1.0")

    def delay_for(self, attempt: int) -> float:
        """Delay after the given 1-based attempt."""
        return self.delay_s * (self.backoff ** (attempt - 1))


async def poll_until(
    fetch: Callable[[], Awaitable[T | None]],
    policy: RetryPolicy,
    *,
    retry_on: tuple[type[BaseException], ...] = (),
    what: str = "resource",
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Call ``fetch`` until it returns a non-None value.

    Exceptions listed in ``retry_on`` count as a failed attempt; anything
    else propagates immediately.
    """
    last_error: BaseException | None = None
    for attempt in range(1, policy.max_attempts + 1):
        try:
            value = await fetch()
        except retry_on as e:
            last_error = e
            value = None
            logger.debug("%s fetch attempt %d failed: %s", what, attempt, e)
        if value is not None:
            if attempt > 1:
                logger.info("%s available after %d attempts", what, attempt)
            return value
        if attempt < policy.max_attempts:
            await sleep(policy.delay_for(attempt))
    logger.warning("%s still unavailable after %d attempts", what, policy.max_attempts)
    raise RetryExhaustedError(policy.max_attempts, last_error)
