"""Price resolution policy: Chainlink first, Uniswap V3 as the fallback.

The policy is an ordered list of strategies. Each strategy either returns a
PriceOut, returns None to mean "not applicable, try the next one", or raises
to abort the whole lookup. Earlier strategies are never retried.

Order:
    1. chainlink            direct base/quote feed
    2. chainlink (via USD)  quote ETH: base/USD divided by ETH/USD
    3. chainlink (via ETH)  quote USD: base/ETH multiplied by ETH/USD
    4. uniswap_v3 (fee N)   QuoterV2 quote for one whole base token
"""

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Context, Decimal, localcontext
from typing import Awaitable, Callable, Optional

from walletrpc.contracts.prices import PriceOut
from walletrpc.errors import ExternalReadFailure, PriceUnavailable, UnsupportedToken
from walletrpc.pricing.formatting import (
    decimal_scale,
    decimal_to_plain,
    format_with_decimals,
)
from walletrpc.pricing.oracle import fetch_chainlink_price
from walletrpc.pricing.registry import QuoteCurrency, TokenRecord, TokenRegistry
from walletrpc.pricing.uniswap import NO_PRICE_LIMIT, quote_exact_input_single

logger = logging.getLogger(__name__)

# Wide enough that the product of two uint256-sized readings is exact
EXACT_CONTEXT = Context(prec=160, rounding=ROUND_HALF_EVEN)
# Quotients rarely terminate; round to 28 significant digits, half-even
DIVISION_CONTEXT = Context(prec=28, rounding=ROUND_HALF_EVEN)

PIVOT_SYMBOL = "WETH"


@dataclass
class PriceQuery:
    """Inputs shared by every strategy for one lookup."""

    chain: object
    registry: TokenRegistry
    base: TokenRecord
    quote: QuoteCurrency
    quoter: str

    def result(self, price: Decimal, source: str) -> PriceOut:
        return PriceOut(
            base=self.base.symbol,
            quote=str(self.quote),
            price=decimal_to_plain(price),
            source=source,
            decimals=decimal_scale(price),
        )

    def eth_usd_feed(self) -> Optional[str]:
        pivot = self.registry.info_by_symbol(PIVOT_SYMBOL)
        if pivot is None:
            logger.debug(f"{PIVOT_SYMBOL} not in registry, skipping pivot")
            return None
        feed = pivot.feed_for(QuoteCurrency.USD)
        if feed is None:
            logger.debug(f"{PIVOT_SYMBOL} has no USD feed, skipping pivot")
        return feed


Strategy = Callable[[PriceQuery], Awaitable[Optional[PriceOut]]]


async def chainlink_direct(query: PriceQuery) -> Optional[PriceOut]:
    feed = query.base.feed_for(query.quote)
    if feed is None:
        return None
    price = await fetch_chainlink_price(query.chain, feed)
    return query.result(price, "chainlink")


async def chainlink_via_usd(query: PriceQuery) -> Optional[PriceOut]:
    if query.quote != QuoteCurrency.ETH:
        return None
    base_usd_feed = query.base.feed_for(QuoteCurrency.USD)
    if base_usd_feed is None:
        return None
    eth_usd_feed = query.eth_usd_feed()
    if eth_usd_feed is None:
        return None

    base_usd = await fetch_chainlink_price(query.chain, base_usd_feed)
    eth_usd = await fetch_chainlink_price(query.chain, eth_usd_feed)
    if eth_usd.is_zero():
        raise PriceUnavailable("received zero ETH/USD price from Chainlink")

    with localcontext(DIVISION_CONTEXT):
        price = base_usd / eth_usd
    return query.result(price, "chainlink (via USD)")


async def chainlink_via_eth(query: PriceQuery) -> Optional[PriceOut]:
    if query.quote != QuoteCurrency.USD:
        return None
    base_eth_feed = query.base.feed_for(QuoteCurrency.ETH)
    if base_eth_feed is None:
        return None
    eth_usd_feed = query.eth_usd_feed()
    if eth_usd_feed is None:
        return None

    base_eth = await fetch_chainlink_price(query.chain, base_eth_feed)
    eth_usd = await fetch_chainlink_price(query.chain, eth_usd_feed)

    with localcontext(EXACT_CONTEXT):
        price = base_eth * eth_usd
    return query.result(price, "chainlink (via ETH)")


async def uniswap_fallback(query: PriceQuery) -> Optional[PriceOut]:
    quote_token = query.registry.quote_token(query.quote)
    if quote_token is None:
        raise PriceUnavailable("missing quote token configuration")

    base = query.base
    try:
        result = await quote_exact_input_single(
            query.chain,
            query.quoter,
            token_in=base.address,
            token_out=quote_token.address,
            amount_in=10**base.decimals,
            fee=base.default_fee,
            sqrt_price_limit_x96=NO_PRICE_LIMIT,
        )
    except ExternalReadFailure as e:
        raise PriceUnavailable(f"uniswap quote failed: {e.message}") from e

    if result.amount_out == 0:
        raise PriceUnavailable("uniswap returned zero amount out")

    # Parse the formatted string so the price matches what a balance display shows
    formatted = format_with_decimals(result.amount_out, quote_token.decimals)
    price = Decimal(formatted)
    return query.result(price, f"uniswap_v3 (fee {base.default_fee})")


DEFAULT_STRATEGIES: tuple[Strategy, ...] = (
    chainlink_direct,
    chainlink_via_usd,
    chainlink_via_eth,
    uniswap_fallback,
)


async def resolve_token_price(
    chain,
    registry: TokenRegistry,
    base: str,
    quote: QuoteCurrency,
    quoter: str,
    strategies: tuple[Strategy, ...] = DEFAULT_STRATEGIES,
) -> PriceOut:
    """Resolve the price of `base` in `quote` using the first applicable strategy.

    Args:
        chain: Chain reader exposing `read_contract_view`
        registry: Registry snapshot taken for this request
        base: Base token address
        quote: Quote currency
        quoter: Uniswap V3 QuoterV2 address used by the DEX fallback

    Raises:
        UnsupportedToken: base is not in the registry
        PriceUnavailable: a source failed or every source was skipped
    """
    base_info = registry.info_by_address(base)
    if base_info is None:
        raise UnsupportedToken(f"unsupported token: {base}")

    query = PriceQuery(
        chain=chain,
        registry=registry,
        base=base_info,
        quote=quote,
        quoter=quoter,
    )

    for strategy in strategies:
        out = await strategy(query)
        if out is not None:
            logger.debug(f"{base_info.symbol}/{quote} resolved by {strategy.__name__}")
            return out
        logger.debug(f"{strategy.__name__} not applicable to {base_info.symbol}/{quote}")

    raise PriceUnavailable(
        f"no price source available for {base_info.symbol}/{quote}"
    )
