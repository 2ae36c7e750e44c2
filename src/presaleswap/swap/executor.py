"""Deposit (contribute) transactions against the presale controller."""

import logging
from typing import Union

from presaleswap.chain.contracts import encode_contribute
from presaleswap.chains import is_erc20
from presaleswap.config import Settings
from presaleswap.swap.base import ClientFactory
from presaleswap.swap.models import Quote, Swap, SwapStatus

logger = logging.getLogger(__name__)


class SwapExecutor:
    """Builds and submits the swap leg."""

    def __init__(self, settings: Settings, client_factory: ClientFactory):
        self.settings = settings
        self.client_factory = client_factory

    def build_swap_tx(self, request: Union[Quote, Swap]) -> dict:
        """Transaction fields for contribute(from_amount).

        Tokens move through the allowance, so only a native source asset
        carries the amount as transaction value.
        """
        amount = int(request.from_amount)
        return {
            "from": request.from_account_id,  # gas estimation only
            "to": self.settings.controller_address,
            "value": 0 if is_erc20(request.from_asset) else amount,
            "data": encode_contribute(amount),
            "fee": request.fee,
        }

    async def send_swap(self, network: str, wallet_id: str, request: Union[Quote, Swap]) -> dict:
        tx_data = self.build_swap_tx(request)
        client = self.client_factory(network, wallet_id, request.from_asset, request.from_account_id)
        swap_tx = await client.send_transaction(tx_data)
        logger.info(f"Swap tx {swap_tx['hash']} for {request.from_amount} {request.from_asset}")

        return {
            "status": SwapStatus.WAITING_FOR_SWAP_CONFIRMATIONS,
            "swap_tx": swap_tx,
            "swap_tx_hash": swap_tx["hash"],
        }
