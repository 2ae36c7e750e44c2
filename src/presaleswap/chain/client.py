"""Chain client used by the swap legs, and its web3 implementation.

A chain client is bound to one wallet account on one chain. The swap only
needs four calls from it: send, look up by hash, fetch receipt, estimate gas.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

from web3 import Web3
from web3.exceptions import TransactionNotFound

logger = logging.getLogger(__name__)


class TransactionNotFoundError(Exception):
    """Raised when a transaction hash is not (yet) known to the node."""

    def __init__(self, tx_hash: str):
        self.tx_hash = tx_hash
        super().__init__(f"Transaction not found: {tx_hash}")


@dataclass
class ChainTransaction:
    """A transaction as seen by the node."""

    hash: str
    confirmations: int
    block_number: Optional[int] = None


class Web3ChainClient:
    """Chain client backed by an AsyncWeb3 instance.

    With a local eth-account the client signs itself (nonce from the pending
    pool, gas estimated when absent); otherwise it relies on the node's
    eth_sendTransaction for the unlocked `address`.
    """

    def __init__(self, web3: Any, account: Any = None, address: Optional[str] = None):
        self.web3 = web3
        self.account = account
        if account is not None:
            self.address = account.address
        else:
            self.address = Web3.to_checksum_address(address) if address else None

    async def send_transaction(self, tx: dict) -> dict:
        """Submit a transaction and return its fields plus hash."""
        params = await self._prepare(tx)

        if self.account is not None:
            signed = self.account.sign_transaction(params)
            tx_hash = await self.web3.eth.send_raw_transaction(signed.raw_transaction)
        else:
            tx_hash = await self.web3.eth.send_transaction(params)

        tx_hash = Web3.to_hex(tx_hash)
        logger.info(f"Broadcast tx {tx_hash} to {params['to']}")
        return {**params, "hash": tx_hash}

    async def get_transaction_by_hash(self, tx_hash: str) -> ChainTransaction:
        """Look up a transaction and count its confirmations."""
        try:
            tx = await self.web3.eth.get_transaction(tx_hash)
        except TransactionNotFound:
            raise TransactionNotFoundError(tx_hash) from None

        block_number = tx.get("blockNumber")
        if block_number is None:
            return ChainTransaction(hash=tx_hash, confirmations=0)

        head = await self.web3.eth.block_number
        return ChainTransaction(
            hash=tx_hash,
            confirmations=max(head - block_number + 1, 0),
            block_number=block_number,
        )

    async def get_transaction_receipt(self, tx_hash: str) -> Any:
        """Fetch the receipt of a mined transaction."""
        try:
            return await self.web3.eth.get_transaction_receipt(tx_hash)
        except TransactionNotFound:
            raise TransactionNotFoundError(tx_hash) from None

    async def estimate_gas(self, tx: dict) -> int:
        """Estimate gas units for a transaction."""
        params = {"to": Web3.to_checksum_address(tx["to"]), "data": tx.get("data", "0x")}
        sender = tx.get("from")
        if sender and Web3.is_address(sender):
            params["from"] = Web3.to_checksum_address(sender)
        elif self.address:
            params["from"] = self.address
        value = tx.get("value", 0)
        params["value"] = int(value, 16) if isinstance(value, str) else int(value)
        return int(await self.web3.eth.estimate_gas(params))

    async def _prepare(self, tx: dict) -> dict:
        """Turn swap transaction fields into web3 parameters."""
        params = {
            "to": Web3.to_checksum_address(tx["to"]),
            "value": int(tx.get("value") or 0),
            "data": tx.get("data", "0x"),
        }

        # "from" on built transactions is informational; the client's own address signs
        if self.address:
            params["from"] = self.address

        fee = tx.get("fee")
        if fee is not None:
            params["gasPrice"] = Web3.to_wei(Decimal(str(fee)), "gwei")
        else:
            params["gasPrice"] = await self.web3.eth.gas_price

        params["gas"] = tx.get("gas") or await self.estimate_gas(params)

        if self.account is not None:
            params["nonce"] = await self.web3.eth.get_transaction_count(
                self.account.address, "pending"
            )
            params["chainId"] = await self.web3.eth.chain_id

        return params
