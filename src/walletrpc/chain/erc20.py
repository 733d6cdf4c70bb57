"""ERC-20 metadata and balance reads."""

import logging
from dataclasses import dataclass

from walletrpc.chain.abi import ERC20_BALANCE_OF, ERC20_DECIMALS, ERC20_SYMBOL
from walletrpc.errors import ExternalReadFailure

logger = logging.getLogger(__name__)

FALLBACK_SYMBOL = "ERC20"


@dataclass
class Erc20Metadata:
    symbol: str
    decimals: int


async def fetch_metadata(chain, token: str) -> Erc20Metadata:
    """Read decimals and symbol for a token contract.

    A failing `decimals()` call is fatal. A failing `symbol()` call falls
    back to "ERC20" since several older tokens return bytes32 or nothing.
    """
    try:
        (decimals,) = await chain.read_contract_view(token, ERC20_DECIMALS)
    except ExternalReadFailure as e:
        raise ExternalReadFailure(
            f"failed to fetch ERC-20 decimals for {token}: {e.message}"
        ) from e

    try:
        (symbol,) = await chain.read_contract_view(token, ERC20_SYMBOL)
    except ExternalReadFailure as e:
        logger.debug(f"symbol() failed for {token}, using {FALLBACK_SYMBOL}: {e.message}")
        symbol = FALLBACK_SYMBOL

    return Erc20Metadata(symbol=symbol, decimals=int(decimals))


async def fetch_balance_of(chain, token: str, owner: str) -> int:
    """Read `balanceOf(owner)` on a token contract."""
    try:
        (balance,) = await chain.read_contract_view(token, ERC20_BALANCE_OF, [owner])
    except ExternalReadFailure as e:
        raise ExternalReadFailure(
            f"failed to fetch token balance for {token}: {e.message}"
        ) from e
    return int(balance)
