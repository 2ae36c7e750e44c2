"""Command line access to quotes, fee estimates and status metadata.

Usage:
    presaleswap quote SOV ZERO 100 [--network testnet]
    presaleswap fees 100 --address 0x... --fee-price 0.06 --fee-price 0.1
    presaleswap statuses
"""

import argparse
import asyncio
import json
import logging
import sys
from decimal import Decimal
from typing import Optional

from dotenv import load_dotenv

from presaleswap.chain.client import Web3ChainClient
from presaleswap.chain.registry import ChainClientRegistry
from presaleswap.config import Settings, get_settings
from presaleswap.swap.approval import ApprovalManager
from presaleswap.swap.display import STATUS_DISPLAY
from presaleswap.swap.fees import FeeEstimator
from presaleswap.swap.models import TxType
from presaleswap.swap.quotes import SUPPORTED_PAIR, QuoteEngine

logger = logging.getLogger(__name__)


class StaticAccountResolver:
    """Resolves every account to a single known address."""

    def __init__(self, address: str):
        self.address = address

    async def get_unused_addresses(self, network, wallet_id, assets, account_id) -> list[str]:
        return [self.address]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="presaleswap", description=__doc__.splitlines()[0])
    parser.add_argument("--network", default=None, help="mainnet or testnet (default from settings)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    quote = sub.add_parser("quote", help="Quote a conversion")
    quote.add_argument("from_asset")
    quote.add_argument("to_asset")
    quote.add_argument("amount", type=Decimal)

    fees = sub.add_parser("fees", help="Estimate network fees for a SOV deposit")
    fees.add_argument("amount", type=Decimal)
    fees.add_argument("--address", required=True, help="Address holding the SOV")
    fees.add_argument(
        "--fee-price", type=Decimal, action="append", required=True, help="Gas price in gwei"
    )

    sub.add_parser("statuses", help="Show the swap status table")
    return parser


async def run_quote(settings: Settings, network: str, args) -> int:
    engine = QuoteEngine(settings, ChainClientRegistry(settings.rpc_url))
    quote = await engine.get_quote(network, args.from_asset, args.to_asset, args.amount)
    if quote is None:
        print("no quote")
        return 1
    print(json.dumps(quote.to_dict(), indent=2))
    return 0


async def run_fees(settings: Settings, network: str, args) -> int:
    registry = ChainClientRegistry(settings.rpc_url)
    from_asset, to_asset = SUPPORTED_PAIR

    quote = await QuoteEngine(settings, registry).get_quote(network, from_asset, to_asset, args.amount)
    if quote is None:
        print("no quote")
        return 1
    quote = quote.for_accounts(args.address)

    def client_factory(network, wallet_id, asset, account_id):
        return Web3ChainClient(registry.get_for_asset(network, asset), address=args.address)

    approvals = ApprovalManager(
        settings, registry, client_factory, StaticAccountResolver(args.address)
    )
    estimator = FeeEstimator(settings, client_factory, approvals)
    fees = await estimator.estimate_fees(
        network, "cli", from_asset, TxType.SWAP, quote, args.fee_price
    )
    print(json.dumps({str(price): str(fee) for price, fee in fees.items()}, indent=2))
    return 0


def run_statuses() -> int:
    for status, display in STATUS_DISPLAY.items():
        print(f"{display.step}  {status.value:<36} {display.filter_status:<10} {display.label}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    settings = get_settings()

    logging.basicConfig(
        level=logging.DEBUG if (args.debug or settings.debug) else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    network = args.network or settings.network
    if args.command == "quote":
        return asyncio.run(run_quote(settings, network, args))
    if args.command == "fees":
        return asyncio.run(run_fees(settings, network, args))
    return run_statuses()


if __name__ == "__main__":
    sys.exit(main())
