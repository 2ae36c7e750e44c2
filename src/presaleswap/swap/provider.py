"""Presale swap provider: SOV -> ZERO through the presale controller on RSK."""

import logging
import uuid
from decimal import Decimal
from typing import Callable, Iterable, Optional

from presaleswap.chain.registry import ChainClientRegistry
from presaleswap.config import Settings
from presaleswap.swap.approval import ApprovalManager
from presaleswap.swap.base import AccountResolver, BalanceRefresher, ClientFactory, SwapProvider
from presaleswap.swap.confirmations import ConfirmationPoller
from presaleswap.swap.display import STATUS_DISPLAY, TIMELINE_DIAGRAM_STEPS, TOTAL_STEPS
from presaleswap.swap.executor import SwapExecutor
from presaleswap.swap.fees import FeeEstimator
from presaleswap.swap.models import Quote, Swap, TxType
from presaleswap.swap.quotes import QuoteEngine
from presaleswap.swap.state_machine import SwapStateMachine
from presaleswap.utils.locks import asset_lock

logger = logging.getLogger(__name__)


class PresaleSwapProvider(SwapProvider):
    """Wires the quote, fee, approval, swap and polling components together."""

    name = "presale"

    tx_types = {"SWAP": TxType.SWAP}
    from_tx_type = TxType.SWAP
    to_tx_type = None
    statuses = STATUS_DISPLAY
    timeline_diagram_steps = TIMELINE_DIAGRAM_STEPS
    total_steps = TOTAL_STEPS

    def __init__(
        self,
        settings: Settings,
        *,
        client_factory: ClientFactory,
        account_resolver: AccountResolver,
        balance_refresher: BalanceRefresher,
        registry: Optional[ChainClientRegistry] = None,
        lock: Callable = asset_lock,
    ):
        self.settings = settings
        self.registry = registry if registry is not None else ChainClientRegistry(settings.rpc_url)

        self.quotes = QuoteEngine(settings, self.registry)
        self.approvals = ApprovalManager(settings, self.registry, client_factory, account_resolver)
        self.executor = SwapExecutor(settings, client_factory)
        self.poller = ConfirmationPoller(client_factory, balance_refresher)
        self.fees = FeeEstimator(settings, client_factory, self.approvals)
        self.machine = SwapStateMachine(
            self.approvals,
            self.executor,
            self.poller,
            lock=lock,
            lock_timeout=settings.lock_timeout_seconds,
        )

    async def get_quote(
        self, network: str, from_asset: str, to_asset: str, amount: Decimal
    ) -> Optional[Quote]:
        return await self.quotes.get_quote(network, from_asset, to_asset, amount)

    async def new_swap(self, network: str, wallet_id: str, quote: Quote) -> dict:
        """Create the swap record and submit its first transaction."""
        updates = await self.machine.start(network, wallet_id, quote)
        record = {
            "id": str(uuid.uuid4()),
            "from_asset": quote.from_asset,
            "to_asset": quote.to_asset,
            "from_amount": quote.from_amount,
            "to_amount": quote.to_amount,
            "from_account_id": quote.from_account_id,
            "to_account_id": quote.to_account_id,
            "fee": quote.fee,
            "slippage": self.settings.slippage_bps,
            **updates,
        }
        logger.info(
            f"New swap {record['id']}: {quote.from_amount} {quote.from_asset} -> "
            f"{quote.to_asset}, status {record['status'].value}"
        )
        return record

    async def estimate_fees(
        self,
        network: str,
        wallet_id: str,
        asset: str,
        tx_type: TxType,
        quote: Quote,
        fee_prices: Iterable[Decimal],
    ) -> dict:
        return await self.fees.estimate_fees(network, wallet_id, asset, tx_type, quote, fee_prices)

    async def perform_next_swap_action(
        self, network: str, wallet_id: str, swap: Swap
    ) -> Optional[dict]:
        return await self.machine.perform_next_swap_action(network, wallet_id, swap)
