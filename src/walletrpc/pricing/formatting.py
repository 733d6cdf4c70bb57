"""Exact fixed-point formatting of raw on-chain integer amounts."""

from decimal import Decimal

from walletrpc.errors import InvalidInput

UINT256_MAX = 2**256 - 1


def format_with_decimals(raw: int, decimals: int) -> str:
    """Format a raw integer amount as a minimal decimal string.

    No rounding is performed: the string always represents `raw / 10**decimals`
    exactly, with trailing fractional zeros removed.

    Args:
        raw: Amount in smallest units (wei, 1e-6 USDC, ...)
        decimals: Token decimal exponent

    Returns:
        Decimal string such as "123.456" or "1"
    """
    if raw < 0:
        raise InvalidInput(f"amount must be non-negative: {raw}")
    if decimals < 0:
        raise InvalidInput(f"decimals must be non-negative: {decimals}")

    if decimals == 0:
        return str(raw)

    power = 10**decimals
    if power > UINT256_MAX:
        # Scale not representable as a uint256; leave the raw value untouched
        return str(raw)

    integer, fraction = divmod(raw, power)
    if fraction == 0:
        return str(integer)

    fraction_str = str(fraction).zfill(decimals).rstrip("0")
    if not fraction_str:
        return str(integer)
    return f"{integer}.{fraction_str}"


def parse_amount(value: str) -> int:
    """Parse a non-negative base-10 integer string."""
    text = value.strip() if isinstance(value, str) else ""
    if not text or not text.isascii() or not text.isdigit():
        raise InvalidInput(f"invalid numeric value: {value}")
    return int(text)


def decimal_scale(value: Decimal) -> int:
    """Number of fractional digits carried by a Decimal."""
    exponent = value.as_tuple().exponent
    if not isinstance(exponent, int):
        raise InvalidInput(f"not a finite decimal: {value}")
    return max(0, -exponent)


def decimal_to_plain(value: Decimal) -> str:
    """Render a Decimal in positional notation, never scientific."""
    return format(value, "f")
