"""Swap state machine.

Driven from outside: every call inspects the persisted status, performs at
most one chain action and returns the partial update to store (or None).

    WAITING_FOR_APPROVE_CONFIRMATIONS --poll--> APPROVE_CONFIRMED
    APPROVE_CONFIRMED --send swap (locked)--> WAITING_FOR_SWAP_CONFIRMATIONS
    WAITING_FOR_SWAP_CONFIRMATIONS --poll + receipt--> SUCCESS | FAILED

Errors other than "transaction not found" propagate and leave the swap in
its current state for the next attempt.
"""

import logging
from typing import Callable, Optional, Union

from presaleswap.chains import is_erc20
from presaleswap.swap.approval import ApprovalManager
from presaleswap.swap.confirmations import ConfirmationPoller
from presaleswap.swap.executor import SwapExecutor
from presaleswap.swap.models import Quote, Swap, SwapStatus
from presaleswap.utils.locks import asset_lock

logger = logging.getLogger(__name__)


class SwapStateMachine:
    """Moves a swap one step forward per invocation."""

    def __init__(
        self,
        approvals: ApprovalManager,
        executor: SwapExecutor,
        poller: ConfirmationPoller,
        lock: Callable = asset_lock,
        lock_timeout: Optional[float] = 30.0,
    ):
        self.approvals = approvals
        self.executor = executor
        self.poller = poller
        self.lock = lock
        self.lock_timeout = lock_timeout

    async def start(self, network: str, wallet_id: str, request: Union[Quote, Swap]) -> dict:
        """First leg of a new swap: approval for tokens, the swap itself otherwise."""
        async with self.lock(
            network, request.from_asset, timeout=self.lock_timeout, operation="new_swap"
        ):
            if is_erc20(request.from_asset):
                return await self.approvals.approve_tokens(network, wallet_id, request)
            return await self.executor.send_swap(network, wallet_id, request)

    async def _send_swap(self, network: str, wallet_id: str, swap: Swap) -> dict:
        if swap.swap_tx_hash:
            # Hash persisted but status update lost: do not broadcast a second deposit
            logger.warning(f"Swap {swap.id} already has swap tx {swap.swap_tx_hash}, not resending")
            return {"status": SwapStatus.WAITING_FOR_SWAP_CONFIRMATIONS}

        async with self.lock(
            network, swap.from_asset, timeout=self.lock_timeout, operation=f"send_swap:{swap.id}"
        ):
            return await self.executor.send_swap(network, wallet_id, swap)

    async def perform_next_swap_action(
        self, network: str, wallet_id: str, swap: Swap
    ) -> Optional[dict]:
        """Advance `swap` by one step."""
        status = swap.status
        logger.debug(f"Swap {swap.id}: next action for {status.value}")

        if status == SwapStatus.WAITING_FOR_APPROVE_CONFIRMATIONS:
            return await self.poller.wait_for_approve_confirmations(network, wallet_id, swap)

        if status == SwapStatus.APPROVE_CONFIRMED:
            return await self._send_swap(network, wallet_id, swap)

        if status == SwapStatus.WAITING_FOR_SWAP_CONFIRMATIONS:
            return await self.poller.wait_for_swap_confirmations(network, wallet_id, swap)

        return None
