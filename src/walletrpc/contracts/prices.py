"""Price request and response contracts."""

from pydantic import BaseModel, Field, field_validator

from walletrpc.pricing.registry import QuoteCurrency


class GetTokenPriceParams(BaseModel):
    """Parameters of the `get_token_price` operation."""

    base: str = Field(..., description="Base token address or symbol")
    quote: QuoteCurrency = Field(
        default=QuoteCurrency.USD, description="Quote currency (USD or ETH)"
    )

    @field_validator("quote", mode="before")
    @classmethod
    def _upper_quote(cls, value):
        return value.upper() if isinstance(value, str) else value


class PriceOut(BaseModel):
    """A resolved reference price."""

    base: str = Field(..., description="Base token symbol")
    quote: str = Field(..., description="Quote currency label")
    price: str = Field(..., description="Exact decimal price")
    source: str = Field(..., description="Strategy that produced the price")
    decimals: int = Field(..., description="Fractional digits present in `price`")
