"""Native and ERC-20 balance resolution."""

import logging
from typing import Optional

from walletrpc.chain.erc20 import fetch_balance_of, fetch_metadata
from walletrpc.contracts.balances import BalanceOut
from walletrpc.pricing.formatting import format_with_decimals

logger = logging.getLogger(__name__)

NATIVE_DECIMALS = 18


async def resolve_balance(
    chain,
    holder: str,
    token: Optional[str] = None,
    native_symbol: str = "ETH",
) -> BalanceOut:
    """Resolve the native balance, or a token balance when `token` is given."""
    if token is None:
        return await resolve_native_balance(chain, holder, native_symbol)
    return await resolve_erc20_balance(chain, holder, token)


async def resolve_native_balance(chain, holder: str, native_symbol: str = "ETH") -> BalanceOut:
    raw = await chain.get_balance(holder)
    return BalanceOut(
        symbol=native_symbol,
        raw=str(raw),
        decimals=NATIVE_DECIMALS,
        formatted=format_with_decimals(raw, NATIVE_DECIMALS),
    )


async def resolve_erc20_balance(chain, holder: str, token: str) -> BalanceOut:
    metadata = await fetch_metadata(chain, token)
    raw = await fetch_balance_of(chain, token, holder)
    logger.debug(f"{metadata.symbol} balance of {holder}: {raw}")
    return BalanceOut(
        symbol=metadata.symbol,
        raw=str(raw),
        decimals=metadata.decimals,
        formatted=format_with_decimals(raw, metadata.decimals),
    )
