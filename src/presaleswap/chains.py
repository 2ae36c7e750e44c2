"""Chain and asset registry for the presale swap.

Only RSK carries the supported pair (SOV -> ZERO). Ethereum is registered so
that cross-chain requests can be recognised and rejected.
"""

from dataclasses import dataclass, field
from decimal import Decimal, localcontext
from enum import Enum
from typing import Optional, Union

# Enough digits for any uint256 value
DECIMAL_PRECISION = 78


class AssetType(str, Enum):
    """How an asset moves on its chain."""

    NATIVE = "native"
    ERC20 = "erc20"


@dataclass(frozen=True)
class ChainInfo:
    """Configuration for a blockchain."""

    name: str
    native_asset: str
    networks: dict[str, int] = field(default_factory=dict)  # network -> EVM chain id


@dataclass(frozen=True)
class AssetInfo:
    """A transferable asset on a chain."""

    code: str
    name: str
    chain: str
    decimals: int
    type: AssetType
    contract_address: Optional[str] = None  # ERC20 only


class UnknownAssetError(KeyError):
    """Raised when an asset or chain is not registered."""

    pass


# ======================
# Chains
# ======================

CHAINS: dict[str, ChainInfo] = {
    "rsk": ChainInfo(
        name="RSK",
        native_asset="RBTC",
        networks={"mainnet": 30, "testnet": 31},
    ),
    "ethereum": ChainInfo(
        name="Ethereum",
        native_asset="ETH",
        networks={"mainnet": 1, "testnet": 11155111},
    ),
}


# ======================
# Assets
# ======================

ASSETS: dict[str, AssetInfo] = {
    "RBTC": AssetInfo(
        code="RBTC",
        name="Rootstock BTC",
        chain="rsk",
        decimals=18,
        type=AssetType.NATIVE,
    ),
    "SOV": AssetInfo(
        code="SOV",
        name="Sovryn",
        chain="rsk",
        decimals=18,
        type=AssetType.ERC20,
        contract_address="0xEFc78fc7d48b64958315949279Ba181c2114ABBd",
    ),
    "ZERO": AssetInfo(
        code="ZERO",
        name="Zero",
        chain="rsk",
        decimals=18,
        type=AssetType.ERC20,
        contract_address="0xdB107FA69E33f05180a4C2cE9c2E7CB481645C2d",
    ),
    "ETH": AssetInfo(
        code="ETH",
        name="Ether",
        chain="ethereum",
        decimals=18,
        type=AssetType.NATIVE,
    ),
}


# ======================
# Helper Functions
# ======================

def get_asset(code: str) -> AssetInfo:
    """Get asset info by code."""
    try:
        return ASSETS[code.upper()]
    except KeyError:
        raise UnknownAssetError(f"Unknown asset: {code}") from None


def get_chain(name: str) -> ChainInfo:
    """Get chain info by name."""
    try:
        return CHAINS[name]
    except KeyError:
        raise UnknownAssetError(f"Unknown chain: {name}") from None


def is_erc20(code: str) -> bool:
    """Check whether an asset is a token moved through allowances."""
    return get_asset(code).type == AssetType.ERC20


def get_native_asset(code: str) -> AssetInfo:
    """Get the native (gas) asset of the chain an asset lives on."""
    return get_asset(get_chain(get_asset(code).chain).native_asset)


def get_chain_id(chain: str, network: str) -> int:
    """Get the EVM chain id of a chain on a network."""
    networks = get_chain(chain).networks
    if network not in networks:
        raise UnknownAssetError(f"Unknown network {network} for chain {chain}")
    return networks[network]


def currency_to_unit(asset: AssetInfo, amount: Union[Decimal, int, str]) -> Decimal:
    """Convert a display amount into integral base units."""
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        return (Decimal(amount) * (Decimal(10) ** asset.decimals)).to_integral_value()


def unit_to_currency(asset: AssetInfo, amount: Union[Decimal, int, str]) -> Decimal:
    """Convert base units into a display amount."""
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        return Decimal(amount) / (Decimal(10) ** asset.decimals)


def format_decimal(value: Decimal) -> str:
    """Render a Decimal without exponent or trailing zeros."""
    if value == value.to_integral_value():
        return str(int(value))
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        return format(value.normalize(), "f")


def pretty_balance(units: Union[Decimal, int, str], code: str, places: int = 8) -> str:
    """Human readable balance for notifications."""
    amount = unit_to_currency(get_asset(code), units)
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        return format_decimal(amount.quantize(Decimal(1).scaleb(-places)))
