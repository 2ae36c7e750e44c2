"""Quotes for the SOV -> ZERO presale deposit."""

import logging
from decimal import Decimal, localcontext
from typing import Optional, Union

from presaleswap.chain.contracts import PresaleContract
from presaleswap.chain.registry import ChainClientRegistry
from presaleswap.chains import (
    DECIMAL_PRECISION,
    UnknownAssetError,
    currency_to_unit,
    format_decimal,
    get_asset,
)
from presaleswap.config import Settings
from presaleswap.swap.models import Quote

logger = logging.getLogger(__name__)

SUPPORTED_CHAIN = "rsk"
SUPPORTED_PAIR = ("SOV", "ZERO")


def calculate_slippage(amount: Union[str, Decimal, int], bps: int = 50) -> str:
    """Amount after deducting a slippage tolerance, rounded to whole base units."""
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        factor = Decimal(1) - Decimal(bps) / Decimal(10_000)
        return format_decimal((Decimal(amount) * factor).to_integral_value())


class QuoteEngine:
    """Prices the supported pair from the presale contract's exchange rate."""

    def __init__(self, settings: Settings, registry: ChainClientRegistry):
        self.settings = settings
        self.registry = registry

    def _presale(self, network: str) -> PresaleContract:
        web3 = self.registry.get_for_asset(network, SUPPORTED_PAIR[1])
        return PresaleContract(web3, self.settings.presale_address)

    async def is_sale_closed(self, network: str) -> bool:
        return await self._presale(network).is_closed()

    async def get_deposit_rate(self, network: str) -> Decimal:
        """ZERO per SOV, as exchangeRate / PPM."""
        presale = self._presale(network)
        ppm = await presale.ppm()
        exchange_rate = await presale.exchange_rate()
        with localcontext() as ctx:
            ctx.prec = DECIMAL_PRECISION
            return Decimal(exchange_rate) / Decimal(ppm)

    async def get_quote(
        self,
        network: str,
        from_asset: str,
        to_asset: str,
        amount: Union[Decimal, int, float, str],
    ) -> Optional[Quote]:
        """Quote a conversion, or None when no offer can be made."""
        try:
            from_info = get_asset(from_asset)
            to_info = get_asset(to_asset)
        except UnknownAssetError:
            logger.debug(f"No quote for unknown pair {from_asset} -> {to_asset}")
            return None
        amount = Decimal(str(amount))

        if from_info.chain != SUPPORTED_CHAIN or to_info.chain != SUPPORTED_CHAIN or amount <= 0:
            return None

        if (from_info.code, to_info.code) != SUPPORTED_PAIR:
            return None

        if await self.is_sale_closed(network):
            logger.info(f"Presale closed on {network}, no quote for {from_info.code}")
            return None

        from_amount = currency_to_unit(from_info, amount)
        if from_amount <= 0:
            return None

        rate = await self.get_deposit_rate(network)
        with localcontext() as ctx:
            ctx.prec = DECIMAL_PRECISION
            to_amount = from_amount * rate

        quote = Quote(
            from_asset=from_info.code,
            to_asset=to_info.code,
            from_amount=format_decimal(from_amount),
            to_amount=format_decimal(to_amount),
        )
        logger.debug(
            f"Quote {quote.from_amount} {quote.from_asset} -> {quote.to_amount} {quote.to_asset} "
            f"(rate {rate})"
        )
        return quote
