"""Confirmation polling for the approval and swap transactions.

Every call is a single lookup. A transaction the node does not know yet, or
one without confirmations, yields None so the caller can try again later.
"""

import logging
import time
from typing import Optional

from presaleswap.chain.client import TransactionNotFoundError
from presaleswap.swap.base import BalanceRefresher, ClientFactory, refresh_balances
from presaleswap.swap.models import Swap, SwapStatus

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class ConfirmationPoller:
    """Reports when a swap leg's transaction has been mined."""

    def __init__(self, client_factory: ClientFactory, balance_refresher: BalanceRefresher):
        self.client_factory = client_factory
        self.balance_refresher = balance_refresher

    async def _confirmed(self, network: str, wallet_id: str, swap: Swap, tx_hash: str) -> bool:
        client = self.client_factory(network, wallet_id, swap.from_asset, swap.from_account_id)
        try:
            tx = await client.get_transaction_by_hash(tx_hash)
        except TransactionNotFoundError as e:
            logger.warning(f"Swap {swap.id}: {e}")
            return False

        return tx is not None and tx.confirmations > 0

    async def wait_for_approve_confirmations(
        self, network: str, wallet_id: str, swap: Swap
    ) -> Optional[dict]:
        if not await self._confirmed(network, wallet_id, swap, swap.approve_tx_hash):
            return None

        logger.info(f"Swap {swap.id}: approval {swap.approve_tx_hash} confirmed")
        return {"status": SwapStatus.APPROVE_CONFIRMED}

    async def wait_for_swap_confirmations(
        self, network: str, wallet_id: str, swap: Swap
    ) -> Optional[dict]:
        if not await self._confirmed(network, wallet_id, swap, swap.swap_tx_hash):
            return None

        # A mined contribute() can still revert, e.g. on slippage
        client = self.client_factory(network, wallet_id, swap.from_asset, swap.from_account_id)
        try:
            receipt = await client.get_transaction_receipt(swap.swap_tx_hash)
        except TransactionNotFoundError as e:
            logger.warning(f"Swap {swap.id}: receipt pending, {e}")
            return None
        status = SwapStatus.SUCCESS if int(receipt["status"]) == 1 else SwapStatus.FAILED

        refresh_balances(self.balance_refresher, network, wallet_id, [swap.from_asset])
        logger.info(f"Swap {swap.id}: {swap.swap_tx_hash} finished with {status.value}")

        return {
            "end_time": _now_ms(),
            "status": status,
        }
