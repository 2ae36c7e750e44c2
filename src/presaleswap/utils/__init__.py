"""Utility modules for presaleswap."""

from presaleswap.utils.locks import AssetLock, LockTimeoutError, asset_lock, get_asset_lock
from presaleswap.utils.retry import RetryExhaustedError, with_interval

__all__ = [
    "AssetLock",
    "LockTimeoutError",
    "asset_lock",
    "get_asset_lock",
    "RetryExhaustedError",
    "with_interval",
]
