"""Network fee estimation for a presale swap."""

import logging
from decimal import Decimal, localcontext
from typing import Iterable

from web3 import Web3

from presaleswap.chains import DECIMAL_PRECISION, get_native_asset, unit_to_currency
from presaleswap.config import Settings
from presaleswap.swap.approval import ApprovalManager
from presaleswap.swap.base import ClientFactory
from presaleswap.swap.models import Quote, TxType

logger = logging.getLogger(__name__)


class InvalidTxTypeError(ValueError):
    """Raised when fees are requested for a transaction type the provider lacks."""

    pass


class FeeEstimator:
    """Prices the approval (if any) plus the swap across fee tiers."""

    def __init__(
        self,
        settings: Settings,
        client_factory: ClientFactory,
        approvals: ApprovalManager,
    ):
        self.settings = settings
        self.client_factory = client_factory
        self.approvals = approvals

    async def estimate_gas_limit(self, network: str, wallet_id: str, quote: Quote) -> int:
        """Gas units for the whole swap: approval estimate plus fixed swap budget."""
        gas_limit = 0

        if await self.approvals.requires_approval(network, wallet_id, quote):
            approval_tx = await self.approvals.build_approval_tx(network, wallet_id, quote)
            raw_approval_tx = {
                "from": approval_tx["from"],
                "to": approval_tx["to"],
                "data": approval_tx["data"],
                "value": hex(approval_tx["value"]),
            }
            client = self.client_factory(network, wallet_id, quote.from_asset, quote.from_account_id)
            gas_limit += int(await client.estimate_gas(raw_approval_tx))

        # Node gas estimates for contribute() are unreliable; use the fixed ceiling
        gas_limit += self.settings.swap_gas_limit
        return gas_limit

    async def estimate_fees(
        self,
        network: str,
        wallet_id: str,
        asset: str,
        tx_type: TxType,
        quote: Quote,
        fee_prices: Iterable[Decimal],
    ) -> dict:
        """Native-asset fee for each candidate gas price (in gwei)."""
        if tx_type != TxType.SWAP:
            raise InvalidTxTypeError(f"Invalid tx type {tx_type}")

        native = get_native_asset(asset)
        gas_limit = await self.estimate_gas_limit(network, wallet_id, quote)

        fees = {}
        with localcontext() as ctx:
            ctx.prec = DECIMAL_PRECISION
            for fee_price in fee_prices:
                gas_price = Decimal(Web3.to_wei(Decimal(str(fee_price)), "gwei"))
                fee = Decimal(gas_limit) * self.settings.fee_multiplier * gas_price
                fees[fee_price] = unit_to_currency(native, fee)

        logger.debug(f"Fees for {quote.from_asset} swap ({gas_limit} gas): {fees}")
        return fees
