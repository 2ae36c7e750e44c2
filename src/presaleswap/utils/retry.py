"""Repeat an attempt-once step until it produces a result.

The swap components only ever try once and return None when there is
nothing to report yet. Callers that want to wait choose the cadence here.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryExhaustedError(Exception):
    """Raised when a step produced no result within max_attempts."""

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(f"No result after {attempts} attempts")


async def with_interval(
    step: Callable[[], Awaitable[Optional[T]]],
    interval: float,
    max_attempts: Optional[int] = None,
) -> T:
    """Call `step` until it returns something other than None.

    Exceptions raised by `step` propagate on the attempt that raised them.

    Args:
        step: Coroutine factory performing a single attempt
        interval: Seconds to sleep between attempts
        max_attempts: Give up after this many attempts (None = never)

    Returns:
        The first non-None result
    """
    attempt = 0
    while True:
        attempt += 1
        result = await step()
        if result is not None:
            return result

        if max_attempts is not None and attempt >= max_attempts:
            raise RetryExhaustedError(attempt)

        logger.debug(f"Attempt {attempt} produced no result, retrying in {interval}s")
        await asyncio.sleep(interval)
