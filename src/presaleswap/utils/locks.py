"""Concurrency control for transaction submission.

Provides a lock per (network, asset) so that two swaps resumed at the same
time on the same asset never race on transaction ordering or nonce.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

logger = logging.getLogger(__name__)

# Global lock registry: (network, asset) -> asyncio.Lock
_asset_locks: dict[tuple[str, str], asyncio.Lock] = {}
_registry_lock = asyncio.Lock()


class LockTimeoutError(Exception):
    """Raised when a lock cannot be acquired within the timeout period."""

    pass


async def get_asset_lock(network: str, asset: str) -> asyncio.Lock:
    """Get or create the submission lock for an asset on a network.

    Args:
        network: Network name (mainnet, testnet)
        asset: Asset code whose transactions are serialized

    Returns:
        asyncio.Lock for the pair
    """
    key = (network, asset.upper())
    async with _registry_lock:
        if key not in _asset_locks:
            _asset_locks[key] = asyncio.Lock()
        return _asset_locks[key]


async def _acquire(lock: asyncio.Lock, timeout: Optional[float]) -> None:
    if timeout is None:
        await lock.acquire()
    elif timeout <= 0:
        # Zero timeout: take the lock only if it is free right now
        if lock.locked():
            raise asyncio.TimeoutError()
        await lock.acquire()
    else:
        await asyncio.wait_for(lock.acquire(), timeout=timeout)


class AssetLock:
    """Context manager holding exclusive submission rights for an asset.

    Example:
        async with AssetLock("mainnet", "SOV", operation="send_swap"):
            tx = await client.send_transaction(tx_data)
    """

    def __init__(
        self,
        network: str,
        asset: str,
        timeout: Optional[float] = 30.0,
        operation: str = "submit",
    ):
        """Initialize the lock.

        Args:
            network: Network name
            asset: Asset code
            timeout: Maximum time to wait for lock (None = wait forever)
            operation: Description of the operation for logging
        """
        self.network = network
        self.asset = asset
        self.timeout = timeout
        self.operation = operation
        self._lock: Optional[asyncio.Lock] = None
        self._acquired = False

    async def __aenter__(self) -> "AssetLock":
        """Acquire the lock."""
        self._lock = await get_asset_lock(self.network, self.asset)

        try:
            await _acquire(self._lock, self.timeout)
        except asyncio.TimeoutError:
            logger.warning(
                f"Lock timeout for {self.asset}@{self.network} after {self.timeout}s: {self.operation}"
            )
            raise LockTimeoutError(
                f"Could not acquire lock for {self.asset}@{self.network} within {self.timeout}s"
            )

        self._acquired = True
        logger.debug(f"Lock acquired for {self.asset}@{self.network}: {self.operation}")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Release the lock."""
        if self._acquired and self._lock:
            self._lock.release()
            self._acquired = False
            logger.debug(f"Lock released for {self.asset}@{self.network}: {self.operation}")
        return False


@asynccontextmanager
async def asset_lock(
    network: str,
    asset: str,
    timeout: Optional[float] = 30.0,
    operation: str = "submit",
):
    """Functional context manager for asset submission locking.

    Example:
        async with asset_lock("mainnet", "SOV", operation="approve"):
            pass
    """
    async with AssetLock(network, asset, timeout=timeout, operation=operation):
        yield


def clear_asset_locks() -> None:
    """Clear all asset locks (useful for testing)."""
    _asset_locks.clear()
