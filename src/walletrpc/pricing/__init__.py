"""Token registry, fixed-point formatting and price resolution."""

from walletrpc.pricing.formatting import format_with_decimals, parse_amount
from walletrpc.pricing.registry import (
    QuoteCurrency,
    SharedRegistry,
    TokenRecord,
    TokenRegistry,
)

__all__ = [
    "format_with_decimals",
    "parse_amount",
    "QuoteCurrency",
    "SharedRegistry",
    "TokenRecord",
    "TokenRegistry",
]
