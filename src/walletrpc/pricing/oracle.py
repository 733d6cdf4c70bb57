"""Chainlink aggregator reads."""

import logging
from decimal import Decimal

from walletrpc.chain.abi import FEED_DECIMALS, FEED_LATEST_ROUND_DATA
from walletrpc.errors import ExternalReadFailure, PriceUnavailable

logger = logging.getLogger(__name__)


async def fetch_chainlink_price(chain, feed_address: str) -> Decimal:
    """Read a feed's latest answer as a Decimal scaled by the feed's decimals.

    The scale of the returned Decimal equals the feed's decimal count, so an
    answer of 100000000 from an 8-decimal feed is Decimal("1.00000000").
    """
    try:
        (decimals,) = await chain.read_contract_view(feed_address, FEED_DECIMALS)
    except ExternalReadFailure as e:
        raise PriceUnavailable(f"failed to read feed decimals: {e.message}") from e

    try:
        round_data = await chain.read_contract_view(feed_address, FEED_LATEST_ROUND_DATA)
    except ExternalReadFailure as e:
        raise PriceUnavailable(f"failed to read latest round: {e.message}") from e

    answer = int(round_data[1])
    if answer <= 0:
        logger.warning(f"Feed {feed_address} returned non-positive answer {answer}")
        raise PriceUnavailable("Chainlink returned non-positive price")

    # String construction is exact regardless of the active context precision
    return Decimal(f"{answer}E-{int(decimals)}")
