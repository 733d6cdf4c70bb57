"""Swap simulation request and response contracts."""

from typing import Optional

from pydantic import BaseModel, Field

DEFAULT_SLIPPAGE_BPS = 100  # 1%
DEFAULT_POOL_FEE = 3_000  # 0.3% pool


class SwapTokensParams(BaseModel):
    """Parameters of the `swap_tokens` operation.

    Slippage bounds are checked by the swap engine, not here, so that an
    out-of-range value is reported as a swap error.
    """

    from_token: str = Field(..., description="Input token address or symbol")
    to_token: str = Field(..., description="Output token address or symbol")
    amount_in_wei: str = Field(..., description="Exact input amount in smallest units")
    slippage_bps: int = Field(
        default=DEFAULT_SLIPPAGE_BPS, ge=0, description="Slippage tolerance in basis points"
    )
    fee: int = Field(
        default=DEFAULT_POOL_FEE, ge=0, lt=2**24, description="Uniswap V3 pool fee tier"
    )
    recipient: Optional[str] = Field(
        None, description="Recipient override (defaults to the signer address)"
    )
    sqrt_price_limit: Optional[str] = Field(
        None, description="sqrtPriceLimitX96 as a decimal string (None = no limit)"
    )


class SwapSimOut(BaseModel):
    """Result of a simulated exact-input swap."""

    amount_in: str = Field(..., description="Input amount in smallest units")
    amount_out_raw: str = Field(..., description="Quoted output in smallest units")
    amount_out_min_raw: str = Field(..., description="Minimum output after slippage")
    amount_out_estimate: str = Field(..., description="Quoted output, formatted")
    amount_out_min: str = Field(..., description="Minimum output after slippage, formatted")
    gas_estimate: str = Field(..., description="Estimated gas for the swap call")
    calldata_hex: str = Field(..., description="0x-prefixed router call data")
    router: str = Field(..., description="Router contract the call data targets")
    deadline: int = Field(..., description="Unix timestamp after which the swap reverts")
