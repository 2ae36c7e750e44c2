"""In-process driver that takes a swap to a terminal status.

Hosts with their own scheduler call `perform_next_swap_action` directly;
this runner is for scripts and tests that just want to wait for the result.
"""

import inspect
import logging
from typing import Any, Callable, Optional

from presaleswap.swap.base import SwapProvider
from presaleswap.swap.models import Swap
from presaleswap.utils.retry import with_interval

logger = logging.getLogger(__name__)


class SwapRunner:
    """Polls a provider until the swap succeeds or fails."""

    def __init__(
        self,
        provider: SwapProvider,
        interval: float = 15.0,
        max_attempts_per_step: Optional[int] = None,
    ):
        self.provider = provider
        self.interval = interval
        self.max_attempts_per_step = max_attempts_per_step

    async def run(
        self,
        network: str,
        wallet_id: str,
        swap: Swap,
        on_update: Optional[Callable[[Swap], Any]] = None,
    ) -> Swap:
        """Drive `swap` to SUCCESS or FAILED, persisting through `on_update`."""
        while not swap.is_terminal:
            current = swap
            updates = await with_interval(
                lambda: self.provider.perform_next_swap_action(network, wallet_id, current),
                self.interval,
                self.max_attempts_per_step,
            )
            swap = swap.apply(updates)
            logger.info(f"Swap {swap.id} -> {swap.status.value}")

            if on_update is not None:
                result = on_update(swap)
                if inspect.isawaitable(result):
                    await result

        return swap
