"""Balance request and response contracts."""

from typing import Optional

from pydantic import BaseModel, Field


class GetBalanceParams(BaseModel):
    """Parameters of the `get_balance` operation."""

    address: str = Field(..., description="Holder address (or a known token symbol)")
    token: Optional[str] = Field(
        None, description="Token address or symbol (None = native asset)"
    )


class BalanceOut(BaseModel):
    """Balance of a single asset for one holder."""

    symbol: str = Field(..., description="Asset symbol (ETH, USDC, ...)")
    raw: str = Field(..., description="Raw balance in smallest units")
    decimals: int = Field(..., description="Decimal exponent used for formatting")
    formatted: str = Field(..., description="Exact human-readable balance")
