"""Chain access: RPC handle cache, chain client and contract surfaces."""

from presaleswap.chain.client import ChainTransaction, TransactionNotFoundError, Web3ChainClient
from presaleswap.chain.registry import ChainClientRegistry

__all__ = [
    "ChainClientRegistry",
    "ChainTransaction",
    "TransactionNotFoundError",
    "Web3ChainClient",
]
