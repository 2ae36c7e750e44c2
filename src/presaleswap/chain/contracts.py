"""Contract surfaces used by the swap: ERC20 token, presale and controller.

Reads go through web3 contract objects; call data for the two mutating
calls is ABI-encoded locally so building a transaction needs no RPC.
"""

import logging

from eth_abi import encode
from eth_utils import function_signature_to_4byte_selector, to_checksum_address

logger = logging.getLogger(__name__)

ERC20_ABI = [
    {
        "inputs": [{"name": "owner", "type": "address"}, {"name": "spender", "type": "address"}],
        "name": "allowance",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"name": "spender", "type": "address"}, {"name": "amount", "type": "uint256"}],
        "name": "approve",
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]

PRESALE_ABI = [
    {
        "inputs": [],
        "name": "isClosed",
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "PPM",
        "outputs": [{"name": "", "type": "uint32"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "exchangeRate",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
]

APPROVE_SELECTOR = function_signature_to_4byte_selector("approve(address,uint256)")
CONTRIBUTE_SELECTOR = function_signature_to_4byte_selector("contribute(uint256)")


def encode_approve(spender: str, amount: int) -> str:
    """Encode approve(spender, amount) call data."""
    args = encode(["address", "uint256"], [to_checksum_address(spender), int(amount)])
    return "0x" + (APPROVE_SELECTOR + args).hex()


def encode_contribute(amount: int) -> str:
    """Encode the controller's payable contribute(amount) call data."""
    return "0x" + (CONTRIBUTE_SELECTOR + encode(["uint256"], [int(amount)])).hex()


class TokenContract:
    """Read access to an ERC20 token."""

    def __init__(self, web3, address: str):
        self.address = to_checksum_address(address)
        self._contract = web3.eth.contract(address=self.address, abi=ERC20_ABI)

    async def allowance(self, owner: str, spender: str) -> int:
        """Amount `spender` may move on behalf of `owner`."""
        value = await self._contract.functions.allowance(
            to_checksum_address(owner), to_checksum_address(spender)
        ).call()
        logger.debug(f"Allowance {self.address} {owner} -> {spender}: {value}")
        return int(value)


class PresaleContract:
    """Read access to the sale-status contract."""

    def __init__(self, web3, address: str):
        self.address = to_checksum_address(address)
        self._contract = web3.eth.contract(address=self.address, abi=PRESALE_ABI)

    async def is_closed(self) -> bool:
        return bool(await self._contract.functions.isClosed().call())

    async def ppm(self) -> int:
        return int(await self._contract.functions.PPM().call())

    async def exchange_rate(self) -> int:
        return int(await self._contract.functions.exchangeRate().call())
