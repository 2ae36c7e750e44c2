"""Pytest configuration and fixtures."""

import os
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, Mock

import pytest

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["DEBUG"] = "false"

from presaleswap.chain.client import ChainTransaction, TransactionNotFoundError
from presaleswap.chain.registry import ChainClientRegistry
from presaleswap.chains import ASSETS
from presaleswap.config import Settings
from presaleswap.swap.models import Quote, Swap, SwapStatus
from presaleswap.swap.provider import PresaleSwapProvider
from presaleswap.utils.locks import clear_asset_locks

PRESALE = "0x1111111111111111111111111111111111111111"
CONTROLLER = "0x2222222222222222222222222222222222222222"
OWNER = "0x3333333333333333333333333333333333333333"
SOV_ADDRESS = ASSETS["SOV"].contract_address
RPC_URL = "http://localhost:4444"


class _Functions:
    """contract.functions stand-in: name(*args).call() returns a configured value."""

    def __init__(self, values: dict):
        self._values = values

    def __getattr__(self, name):
        if name not in self._values:
            raise AttributeError(name)
        value = self._values[name]

        def bind(*args):
            result = value(*args) if callable(value) else value
            return SimpleNamespace(call=AsyncMock(return_value=result))

        return bind


class FakeWeb3:
    """Just enough of AsyncWeb3 for contract reads."""

    def __init__(self):
        self.contracts: dict[str, dict] = {}
        self.eth = SimpleNamespace(contract=self._contract)

    def set_contract(self, address: str, **values) -> None:
        self.contracts.setdefault(address.lower(), {}).update(values)

    def _contract(self, address, abi):
        return SimpleNamespace(functions=_Functions(self.contracts.setdefault(address.lower(), {})))


class FakeChainClient:
    """In-memory chain client. Hashes are assigned sequentially: 0x..01, 0x..02."""

    def __init__(self):
        self.sent: list[dict] = []
        self.transactions: dict[str, ChainTransaction] = {}
        self.receipts: dict[str, dict] = {}
        self.estimated: list[dict] = []
        self.gas_estimate = 46_000

    @staticmethod
    def hash_for(index: int) -> str:
        return "0x" + f"{index:064x}"

    async def send_transaction(self, tx: dict) -> dict:
        self.sent.append(tx)
        return {**tx, "hash": self.hash_for(len(self.sent))}

    async def get_transaction_by_hash(self, tx_hash: str):
        if tx_hash not in self.transactions:
            raise TransactionNotFoundError(tx_hash)
        return self.transactions[tx_hash]

    async def get_transaction_receipt(self, tx_hash: str):
        return self.receipts[tx_hash]

    async def estimate_gas(self, tx: dict) -> int:
        self.estimated.append(tx)
        return self.gas_estimate

    def confirm(self, tx_hash: str, confirmations: int, status=None) -> None:
        self.transactions[tx_hash] = ChainTransaction(hash=tx_hash, confirmations=confirmations)
        if status is not None:
            self.receipts[tx_hash] = {"status": status}


class FakeAccountResolver:
    def __init__(self, addresses=None):
        self.addresses = addresses if addresses is not None else [OWNER]
        self.calls = []

    async def get_unused_addresses(self, network, wallet_id, assets, account_id):
        self.calls.append((network, wallet_id, assets, account_id))
        return self.addresses


@pytest.fixture(autouse=True)
def reset_locks():
    """Clear asset locks before each test."""
    clear_asset_locks()
    yield
    clear_asset_locks()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        rpc_url=RPC_URL,
        presale_address=PRESALE,
        controller_address=CONTROLLER,
        lock_timeout_seconds=5.0,
    )


@pytest.fixture
def fake_web3() -> FakeWeb3:
    web3 = FakeWeb3()
    web3.set_contract(PRESALE, isClosed=False, PPM=1_000_000, exchangeRate=500_000)
    web3.set_contract(SOV_ADDRESS, allowance=0)
    return web3


@pytest.fixture
def registry(fake_web3) -> ChainClientRegistry:
    return ChainClientRegistry(RPC_URL, factory=lambda url: fake_web3)


@pytest.fixture
def chain_client() -> FakeChainClient:
    return FakeChainClient()


@pytest.fixture
def client_factory(chain_client) -> MagicMock:
    return MagicMock(return_value=chain_client)


@pytest.fixture
def account_resolver() -> FakeAccountResolver:
    return FakeAccountResolver()


@pytest.fixture
def balance_refresher() -> Mock:
    return Mock()


@pytest.fixture
def provider(settings, registry, client_factory, account_resolver, balance_refresher):
    return PresaleSwapProvider(
        settings,
        client_factory=client_factory,
        account_resolver=account_resolver,
        balance_refresher=balance_refresher,
        registry=registry,
    )


@pytest.fixture
def sov_quote() -> Quote:
    """1000 base units of SOV at a 0.5 rate, attached to account acc-1."""
    return Quote(
        from_asset="SOV",
        to_asset="ZERO",
        from_amount="1000",
        to_amount="500",
        fee=Decimal("0.06"),
        from_account_id="acc-1",
        to_account_id="acc-1",
    )


def make_swap(status: SwapStatus, **overrides) -> Swap:
    values = dict(
        id="swap-1",
        status=status,
        from_asset="SOV",
        to_asset="ZERO",
        from_amount="1000",
        to_amount="500",
        from_account_id="acc-1",
        to_account_id="acc-1",
        fee=Decimal("0.06"),
        slippage=50,
    )
    values.update(overrides)
    return Swap(**values)
