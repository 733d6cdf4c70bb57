"""Uniswap V3 single-hop swap simulation.

Quotes an exact-input swap, applies the slippage tolerance, builds the
SwapRouter call data from the same parameters used for the quote, then runs
gas estimation and a read-only eth_call so any revert surfaces before the
caller signs anything. Nothing is broadcast.
"""

import logging
import time
from typing import Optional

from walletrpc.chain.erc20 import fetch_metadata
from walletrpc.contracts.swaps import SwapSimOut, SwapTokensParams
from walletrpc.errors import ExternalReadFailure, SwapUnavailable
from walletrpc.pricing.formatting import format_with_decimals, parse_amount
from walletrpc.pricing.registry import normalize_address
from walletrpc.pricing.uniswap import (
    NO_PRICE_LIMIT,
    encode_exact_input_single,
    quote_exact_input_single,
)

logger = logging.getLogger(__name__)

BPS_DENOMINATOR = 10_000
SWAP_DEADLINE_SECONDS = 900


def apply_slippage(amount: int, slippage_bps: int) -> int:
    """Minimum acceptable output: floor(amount * (10000 - bps) / 10000)."""
    if not 0 <= slippage_bps <= BPS_DENOMINATOR:
        raise SwapUnavailable("slippage cannot exceed 100% (10_000 bps)")
    return amount * (BPS_DENOMINATOR - slippage_bps) // BPS_DENOMINATOR


def validate_swap_params(params: SwapTokensParams) -> tuple[int, int]:
    """Check swap inputs before any chain read.

    Returns:
        (amount_in, sqrt_price_limit_x96)
    """
    if params.slippage_bps > BPS_DENOMINATOR:
        raise SwapUnavailable("slippage cannot exceed 100% (10_000 bps)")

    amount_in = parse_amount(params.amount_in_wei)
    if amount_in == 0:
        raise SwapUnavailable("amount_in_wei must be greater than zero")

    sqrt_price_limit = NO_PRICE_LIMIT
    if params.sqrt_price_limit is not None:
        sqrt_price_limit = parse_amount(params.sqrt_price_limit)

    return amount_in, sqrt_price_limit


async def simulate_swap(
    chain,
    signer_address: str,
    from_token: str,
    to_token: str,
    params: SwapTokensParams,
    quoter: str,
    router: str,
    deadline_seconds: int = SWAP_DEADLINE_SECONDS,
    now: Optional[int] = None,
) -> SwapSimOut:
    """Quote and simulate an exact-input single-pool swap.

    Args:
        chain: Chain reader (view calls, gas estimation, eth_call)
        signer_address: Sender of the simulated call, default recipient
        from_token: Checksummed input token address
        to_token: Checksummed output token address
        params: Swap parameters
        quoter: QuoterV2 address
        router: SwapRouter address
        deadline_seconds: Process-wide validity window
        now: Unix time override, used by tests

    Returns:
        SwapSimOut with amounts, gas estimate and call data
    """
    amount_in, sqrt_price_limit = validate_swap_params(params)

    to_meta = await fetch_metadata(chain, to_token)

    try:
        quote = await quote_exact_input_single(
            chain,
            quoter,
            token_in=from_token,
            token_out=to_token,
            amount_in=amount_in,
            fee=params.fee,
            sqrt_price_limit_x96=sqrt_price_limit,
        )
    except ExternalReadFailure as e:
        raise SwapUnavailable(f"uniswap quoter call failed: {e.message}") from e

    amount_out = quote.amount_out
    if amount_out == 0:
        raise SwapUnavailable("quote returned zero output amount")

    amount_out_min = apply_slippage(amount_out, params.slippage_bps)

    recipient = None
    if params.recipient:
        recipient = normalize_address(params.recipient)
        if recipient is None:
            logger.warning(f"Ignoring unparseable recipient {params.recipient!r}")
    recipient = recipient or signer_address

    deadline = (now if now is not None else int(time.time())) + deadline_seconds

    calldata = encode_exact_input_single(
        token_in=from_token,
        token_out=to_token,
        fee=params.fee,
        recipient=recipient,
        deadline=deadline,
        amount_in=amount_in,
        amount_out_minimum=amount_out_min,
        sqrt_price_limit_x96=sqrt_price_limit,
    )

    tx = {
        "from": signer_address,
        "to": router,
        "data": calldata,
        "value": 0,
    }

    try:
        gas_estimate = await chain.estimate_gas(tx)
    except ExternalReadFailure as e:
        raise SwapUnavailable(f"gas estimation failed: {e.message}") from e

    try:
        await chain.simulate_call(tx)
    except ExternalReadFailure as e:
        raise SwapUnavailable(f"eth_call simulation failed: {e.message}") from e

    logger.info(
        f"Simulated swap {amount_in} {from_token} -> {amount_out} {to_meta.symbol} "
        f"(min {amount_out_min}, gas {gas_estimate})"
    )

    return SwapSimOut(
        amount_in=str(amount_in),
        amount_out_raw=str(amount_out),
        amount_out_min_raw=str(amount_out_min),
        amount_out_estimate=format_with_decimals(amount_out, to_meta.decimals),
        amount_out_min=format_with_decimals(amount_out_min, to_meta.decimals),
        gas_estimate=str(gas_estimate),
        calldata_hex="0x" + calldata.hex(),
        router=router.lower(),
        deadline=deadline,
    )
