"""Uniswap V3 QuoterV2 reads and SwapRouter call data."""

import logging
from dataclasses import dataclass

from walletrpc.chain.abi import EXACT_INPUT_SINGLE, QUOTE_EXACT_INPUT_SINGLE

logger = logging.getLogger(__name__)

NO_PRICE_LIMIT = 0


@dataclass
class QuoterResult:
    """Outputs of QuoterV2.quoteExactInputSingle."""

    amount_out: int
    sqrt_price_x96_after: int
    initialized_ticks_crossed: int
    gas_estimate: int


async def quote_exact_input_single(
    chain,
    quoter: str,
    token_in: str,
    token_out: str,
    amount_in: int,
    fee: int,
    sqrt_price_limit_x96: int = NO_PRICE_LIMIT,
) -> QuoterResult:
    """Ask the quoter how much `token_out` an exact `amount_in` buys.

    Raises ExternalReadFailure when the quoter call reverts or the node fails.
    """
    params = (token_in, token_out, amount_in, fee, sqrt_price_limit_x96)
    logger.debug(
        f"quoteExactInputSingle {amount_in} {token_in} -> {token_out} (fee {fee})"
    )
    amount_out, price_after, ticks, gas = await chain.read_contract_view(
        quoter, QUOTE_EXACT_INPUT_SINGLE, [params]
    )
    return QuoterResult(
        amount_out=int(amount_out),
        sqrt_price_x96_after=int(price_after),
        initialized_ticks_crossed=int(ticks),
        gas_estimate=int(gas),
    )


def encode_exact_input_single(
    token_in: str,
    token_out: str,
    fee: int,
    recipient: str,
    deadline: int,
    amount_in: int,
    amount_out_minimum: int,
    sqrt_price_limit_x96: int = NO_PRICE_LIMIT,
) -> bytes:
    """Encode SwapRouter.exactInputSingle call data."""
    return EXACT_INPUT_SINGLE.encode(
        (
            token_in,
            token_out,
            fee,
            recipient,
            deadline,
            amount_in,
            amount_out_minimum,
            sqrt_price_limit_x96,
        )
    )
