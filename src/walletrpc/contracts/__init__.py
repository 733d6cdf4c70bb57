"""Request and response contracts for the RPC facade.

These Pydantic models define the three operations exposed to clients:
balance lookup, price lookup and swap simulation.
"""

from walletrpc.contracts.balances import BalanceOut, GetBalanceParams
from walletrpc.contracts.prices import GetTokenPriceParams, PriceOut
from walletrpc.contracts.swaps import SwapSimOut, SwapTokensParams

__all__ = [
    # Balance contracts
    "GetBalanceParams",
    "BalanceOut",
    # Price contracts
    "GetTokenPriceParams",
    "PriceOut",
    # Swap contracts
    "SwapTokensParams",
    "SwapSimOut",
]
