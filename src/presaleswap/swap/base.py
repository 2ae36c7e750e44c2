"""Swap provider interface and the host collaborators it depends on."""

import asyncio
import inspect
import logging
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Iterable, Optional, Protocol

from presaleswap.chain.client import ChainTransaction
from presaleswap.swap.models import Quote, Swap, TxType

logger = logging.getLogger(__name__)


class ChainClient(Protocol):
    """Wallet-bound client for one chain."""

    async def send_transaction(self, tx: dict) -> dict: ...

    async def get_transaction_by_hash(self, tx_hash: str) -> Optional[ChainTransaction]: ...

    async def get_transaction_receipt(self, tx_hash: str) -> Any: ...

    async def estimate_gas(self, tx: dict) -> int: ...


class ClientFactory(Protocol):
    """Returns the chain client for a wallet account and asset."""

    def __call__(
        self, network: str, wallet_id: str, asset: str, account_id: Optional[str]
    ) -> ChainClient: ...


class AccountResolver(Protocol):
    """Resolves wallet accounts to on-chain addresses."""

    async def get_unused_addresses(
        self, network: str, wallet_id: str, assets: list[str], account_id: Optional[str]
    ) -> list[str]: ...


class BalanceRefresher(Protocol):
    """Schedules a balance refresh. May be sync or return an awaitable."""

    def update_balances(self, network: str, wallet_id: str, assets: list[str]) -> Any: ...


# Keeps fire-and-forget refresh tasks alive until they finish
_background_tasks: set[asyncio.Task] = set()


def _log_refresh_failure(task: asyncio.Task) -> None:
    _background_tasks.discard(task)
    if not task.cancelled() and task.exception() is not None:
        logger.warning(f"Balance refresh failed: {task.exception()}")


def refresh_balances(
    refresher: BalanceRefresher, network: str, wallet_id: str, assets: Iterable[str]
) -> None:
    """Trigger a balance refresh without waiting for it."""
    try:
        result = refresher.update_balances(network, wallet_id, list(assets))
    except Exception as e:
        logger.warning(f"Balance refresh failed: {e}")
        return
    if inspect.isawaitable(result):
        task = asyncio.ensure_future(result)
        _background_tasks.add(task)
        task.add_done_callback(_log_refresh_failure)


class SwapProvider(ABC):
    """Abstract base class for swap providers."""

    @abstractmethod
    async def get_quote(
        self, network: str, from_asset: str, to_asset: str, amount: Decimal
    ) -> Optional[Quote]:
        """
        Price a conversion.

        Args:
            network: Network name
            from_asset: Source asset code
            to_asset: Destination asset code
            amount: Amount of from_asset in display units

        Returns:
            Quote if the provider makes an offer, None otherwise
        """
        pass

    @abstractmethod
    async def new_swap(self, network: str, wallet_id: str, quote: Quote) -> dict:
        """Start a swap from a quote and return the initial swap record."""
        pass

    @abstractmethod
    async def estimate_fees(
        self,
        network: str,
        wallet_id: str,
        asset: str,
        tx_type: TxType,
        quote: Quote,
        fee_prices: Iterable[Decimal],
    ) -> dict:
        """Fee in native display units for each candidate gas price."""
        pass

    @abstractmethod
    async def perform_next_swap_action(
        self, network: str, wallet_id: str, swap: Swap
    ) -> Optional[dict]:
        """Advance a swap by one step; None when there is nothing to record."""
        pass

    async def get_supported_pairs(self) -> list:
        """Pairs advertised for market listings. Quote-only providers list none."""
        return []
