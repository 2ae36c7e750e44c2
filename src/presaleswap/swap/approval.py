"""Token allowance checks and approval transactions.

Each swap approves exactly its own input amount to the presale contract;
an existing allowance is only reused when it already covers that amount.
"""

import logging
from typing import Union

from presaleswap.chain.contracts import TokenContract, encode_approve
from presaleswap.chain.registry import ChainClientRegistry
from presaleswap.chains import get_asset, is_erc20
from presaleswap.config import Settings
from presaleswap.swap.base import AccountResolver, ClientFactory
from presaleswap.swap.models import Quote, Swap, SwapStatus

logger = logging.getLogger(__name__)

SwapRequest = Union[Quote, Swap]


class ApprovalManager:
    """Decides on and submits ERC20 approvals for the presale spender."""

    def __init__(
        self,
        settings: Settings,
        registry: ChainClientRegistry,
        client_factory: ClientFactory,
        account_resolver: AccountResolver,
    ):
        self.settings = settings
        self.registry = registry
        self.client_factory = client_factory
        self.account_resolver = account_resolver

    async def _owner_address(self, network: str, wallet_id: str, request: SwapRequest) -> str:
        addresses = await self.account_resolver.get_unused_addresses(
            network, wallet_id, [request.from_asset], request.from_account_id
        )
        if not addresses:
            raise LookupError(
                f"No address for {request.from_asset} in account {request.from_account_id}"
            )
        return addresses[0]

    async def requires_approval(self, network: str, wallet_id: str, request: SwapRequest) -> bool:
        """True when the current allowance does not cover the input amount."""
        if not is_erc20(request.from_asset):
            return False

        token_info = get_asset(request.from_asset)
        token = TokenContract(
            self.registry.get_for_asset(network, request.from_asset),
            token_info.contract_address,
        )
        owner = await self._owner_address(network, wallet_id, request)
        allowance = await token.allowance(owner, self.settings.presale_address)

        return allowance < int(request.from_amount)

    async def build_approval_tx(self, network: str, wallet_id: str, request: SwapRequest) -> dict:
        """Transaction fields approving the exact input amount."""
        token_info = get_asset(request.from_asset)
        owner = await self._owner_address(network, wallet_id, request)

        return {
            "from": owner,  # gas estimation only; the chain client signs
            "to": token_info.contract_address,
            "value": 0,
            "data": encode_approve(self.settings.presale_address, int(request.from_amount)),
            "fee": request.fee,
        }

    async def approve_tokens(self, network: str, wallet_id: str, request: SwapRequest) -> dict:
        """Submit an approval if needed and report the resulting status."""
        if not await self.requires_approval(network, wallet_id, request):
            logger.info(f"Allowance covers {request.from_amount} {request.from_asset}, skipping approval")
            return {"status": SwapStatus.APPROVE_CONFIRMED}

        tx_data = await self.build_approval_tx(network, wallet_id, request)
        client = self.client_factory(network, wallet_id, request.from_asset, request.from_account_id)
        approve_tx = await client.send_transaction(tx_data)
        logger.info(f"Approval tx {approve_tx['hash']} for {request.from_amount} {request.from_asset}")

        return {
            "status": SwapStatus.WAITING_FOR_APPROVE_CONFIRMATIONS,
            "approve_tx": approve_tx,
            "approve_tx_hash": approve_tx["hash"],
        }
