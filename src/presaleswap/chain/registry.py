"""Per-chain RPC handle cache.

One web3 instance per EVM chain id, created on first use and shared by every
swap on that chain. Entries are never replaced or evicted: the RPC URL is read
once, so an endpoint change only takes effect after a process restart.
"""

import logging
import threading
from typing import Any, Callable, Optional

from web3 import AsyncHTTPProvider, AsyncWeb3

from presaleswap.chains import get_asset, get_chain_id

logger = logging.getLogger(__name__)


def create_web3(rpc_url: str) -> AsyncWeb3:
    """Create an async web3 instance for an RPC endpoint."""
    return AsyncWeb3(AsyncHTTPProvider(rpc_url))


class ChainClientRegistry:
    """Get-or-create cache of RPC handles keyed by chain id."""

    def __init__(self, rpc_url: str, factory: Optional[Callable[[str], Any]] = None):
        self.rpc_url = rpc_url
        self._factory = factory or create_web3
        self._clients: dict[int, Any] = {}
        self._lock = threading.Lock()

    def get(self, chain_id: int) -> Any:
        """Get the handle for a chain id, creating it if absent."""
        client = self._clients.get(chain_id)
        if client is not None:
            return client

        with self._lock:
            if chain_id not in self._clients:
                self._clients[chain_id] = self._factory(self.rpc_url)
                logger.debug(f"Created RPC client for chain {chain_id} ({self.rpc_url})")
            return self._clients[chain_id]

    def get_for_asset(self, network: str, asset: str) -> Any:
        """Get the handle for the chain an asset lives on."""
        return self.get(get_chain_id(get_asset(asset).chain, network))

    def __contains__(self, chain_id: int) -> bool:
        return chain_id in self._clients

    def __len__(self) -> int:
        return len(self._clients)
