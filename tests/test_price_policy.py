"""Tests for the price resolution policy."""

from decimal import Decimal

import pytest

from tests.conftest import (
    DAI,
    DAI_USD_FEED,
    ETH_USD_FEED,
    QUOTER,
    USDC,
    USDC_USD_FEED,
    WETH,
    address_of,
)
from walletrpc.chain.abi import QUOTE_EXACT_INPUT_SINGLE
from walletrpc.errors import ExternalReadFailure, PriceUnavailable, UnsupportedToken
from walletrpc.pricing import policy
from walletrpc.pricing.policy import resolve_token_price
from walletrpc.pricing.registry import QuoteCurrency, TokenRecord, TokenRegistry

LINK = address_of(0x1111)
LINK_ETH_FEED = address_of(0x2222)
SHIB = address_of(0x3333)


def _quoter_returns(amount_out: int):
    def respond(args):
        return (amount_out, 2**96, 1, 90_000)

    return respond


class TestChainlinkDirect:
    """Tests for the direct feed strategy."""

    @pytest.mark.asyncio
    async def test_direct_usd_feed(self, chain, registry):
        chain.set_feed(USDC_USD_FEED, 99_990_000, decimals=8)

        out = await resolve_token_price(chain, registry, USDC, QuoteCurrency.USD, QUOTER)

        assert out.base == "USDC"
        assert out.quote == "USD"
        assert out.source == "chainlink"
        assert out.price == "0.99990000"
        assert out.decimals == 8

    @pytest.mark.asyncio
    async def test_direct_feed_preferred_over_dex(self, chain, registry):
        chain.set_feed(ETH_USD_FEED, 312_345_678_901, decimals=8)

        out = await resolve_token_price(chain, registry, WETH, QuoteCurrency.USD, QUOTER)

        assert out.source == "chainlink"
        assert out.price == "3123.45678901"
        assert chain.calls_to("view")[-1][2] == "latestRoundData"
        assert not any(c[2] == "quoteExactInputSingle" for c in chain.calls_to("view"))

    @pytest.mark.asyncio
    async def test_non_positive_answer_rejected(self, chain, registry):
        chain.set_feed(USDC_USD_FEED, -5, decimals=8)

        with pytest.raises(PriceUnavailable, match="non-positive"):
            await resolve_token_price(chain, registry, USDC, QuoteCurrency.USD, QUOTER)

    @pytest.mark.asyncio
    async def test_zero_answer_rejected(self, chain, registry):
        chain.set_feed(USDC_USD_FEED, 0, decimals=8)

        with pytest.raises(PriceUnavailable, match="non-positive"):
            await resolve_token_price(chain, registry, USDC, QuoteCurrency.USD, QUOTER)

    @pytest.mark.asyncio
    async def test_feed_failure_does_not_fall_through(self, chain, registry):
        """A failing feed aborts the lookup instead of trying the DEX."""
        with pytest.raises(PriceUnavailable, match="feed decimals"):
            await resolve_token_price(chain, registry, USDC, QuoteCurrency.USD, QUOTER)

        assert not any(c[2] == "quoteExactInputSingle" for c in chain.calls_to("view"))


class TestChainlinkPivots:
    """Tests for the USD and ETH pivot strategies."""

    @pytest.mark.asyncio
    async def test_via_usd_for_eth_quote(self, chain, registry):
        chain.set_feed(DAI_USD_FEED, 100_010_000, decimals=8)
        chain.set_feed(ETH_USD_FEED, 200_000_000_000, decimals=8)

        out = await resolve_token_price(chain, registry, DAI, QuoteCurrency.ETH, QUOTER)

        assert out.base == "DAI"
        assert out.quote == "ETH"
        assert out.source == "chainlink (via USD)"
        assert Decimal(out.price) == Decimal("0.00050005")
        assert out.decimals == len(out.price.split(".")[1])

    @pytest.mark.asyncio
    async def test_via_usd_non_terminating_division(self, chain, registry):
        chain.set_feed(DAI_USD_FEED, 100_000_000, decimals=8)
        chain.set_feed(ETH_USD_FEED, 300_000_000_000, decimals=8)

        out = await resolve_token_price(chain, registry, DAI, QuoteCurrency.ETH, QUOTER)

        assert out.price == "0.0003333333333333333333333333333"
        assert out.decimals == 31
        assert "E" not in out.price

    @pytest.mark.asyncio
    async def test_via_usd_zero_eth_price(self, chain, registry, monkeypatch):
        async def fake_price(chain_, feed):
            return Decimal("0") if feed == ETH_USD_FEED else Decimal("1.0")

        monkeypatch.setattr(policy, "fetch_chainlink_price", fake_price)

        with pytest.raises(PriceUnavailable, match="zero ETH/USD"):
            await resolve_token_price(chain, registry, DAI, QuoteCurrency.ETH, QUOTER)

    @pytest.mark.asyncio
    async def test_via_usd_requires_eth_usd_feed(self, chain):
        registry = TokenRegistry(
            [
                TokenRecord("WETH", WETH, 18),
                TokenRecord("DAI", DAI, 18).with_feed(QuoteCurrency.USD, DAI_USD_FEED),
            ]
        )
        chain.set_feed(DAI_USD_FEED, 100_000_000)

        with pytest.raises(PriceUnavailable):
            await resolve_token_price(chain, registry, DAI, QuoteCurrency.ETH, QUOTER)

        # Pivot skipped without reading the base feed; DEX fallback was attempted
        views = [c[2] for c in chain.calls_to("view")]
        assert "latestRoundData" not in views
        assert "quoteExactInputSingle" in views

    @pytest.mark.asyncio
    async def test_via_eth_for_usd_quote(self, chain, registry):
        registry.add_token(TokenRecord("LINK", LINK, 18).with_feed(QuoteCurrency.ETH, LINK_ETH_FEED))
        chain.set_feed(LINK_ETH_FEED, 5_000_000_000_000_000, decimals=18)
        chain.set_feed(ETH_USD_FEED, 200_000_000_000, decimals=8)

        out = await resolve_token_price(chain, registry, LINK, QuoteCurrency.USD, QUOTER)

        assert out.source == "chainlink (via ETH)"
        assert out.price == "10.00000000000000000000000000"
        assert out.decimals == 26

    @pytest.mark.asyncio
    async def test_pivot_skipped_without_weth(self, chain):
        registry = TokenRegistry(
            [
                TokenRecord("USDC", USDC, 6),
                TokenRecord("LINK", LINK, 18).with_feed(QuoteCurrency.ETH, LINK_ETH_FEED),
            ]
        )
        chain.set_view(QUOTER, QUOTE_EXACT_INPUT_SINGLE, _quoter_returns(7_250_000))

        out = await resolve_token_price(chain, registry, LINK, QuoteCurrency.USD, QUOTER)

        assert out.source == "uniswap_v3 (fee 3000)"
        assert out.price == "7.25"


class TestUniswapFallback:
    """Tests for the DEX fallback."""

    @pytest.mark.asyncio
    async def test_fallback_quotes_one_whole_token(self, chain, registry):
        registry.add_token(TokenRecord("SHIB", SHIB, 18).with_fee(3_000))
        chain.set_view(QUOTER, QUOTE_EXACT_INPUT_SINGLE, _quoter_returns(12_345))

        out = await resolve_token_price(chain, registry, SHIB, QuoteCurrency.USD, QUOTER)

        assert out.base == "SHIB"
        assert out.quote == "USD"
        assert out.source == "uniswap_v3 (fee 3000)"
        assert out.price == "0.012345"
        assert out.decimals == 6

        (call,) = [c for c in chain.calls_to("view") if c[2] == "quoteExactInputSingle"]
        token_in, token_out, amount_in, fee, limit = call[3][0]
        assert token_in == SHIB
        assert token_out == USDC
        assert amount_in == 10**18
        assert fee == 3_000
        assert limit == 0

    @pytest.mark.asyncio
    async def test_fallback_uses_token_fee_tier(self, chain, registry):
        registry.add_token(TokenRecord("SHIB", SHIB, 18).with_fee(10_000))
        chain.set_view(QUOTER, QUOTE_EXACT_INPUT_SINGLE, _quoter_returns(10**18))

        out = await resolve_token_price(chain, registry, SHIB, QuoteCurrency.ETH, QUOTER)

        assert out.source == "uniswap_v3 (fee 10000)"
        assert out.price == "1"
        assert out.decimals == 0

    @pytest.mark.asyncio
    async def test_fallback_price_matches_balance_formatting(self, chain, registry):
        """The DEX price string equals the formatter output for the same integer."""
        from walletrpc.pricing.formatting import format_with_decimals

        registry.add_token(TokenRecord("SHIB", SHIB, 18))
        raw = 1_234_500_000
        chain.set_view(QUOTER, QUOTE_EXACT_INPUT_SINGLE, _quoter_returns(raw))

        out = await resolve_token_price(chain, registry, SHIB, QuoteCurrency.USD, QUOTER)
        assert out.price == format_with_decimals(raw, 6) == "1234.5"

    @pytest.mark.asyncio
    async def test_zero_amount_out(self, chain, registry):
        registry.add_token(TokenRecord("SHIB", SHIB, 18))
        chain.set_view(QUOTER, QUOTE_EXACT_INPUT_SINGLE, _quoter_returns(0))

        with pytest.raises(PriceUnavailable, match="zero amount out"):
            await resolve_token_price(chain, registry, SHIB, QuoteCurrency.USD, QUOTER)

    @pytest.mark.asyncio
    async def test_quoter_revert(self, chain, registry):
        registry.add_token(TokenRecord("SHIB", SHIB, 18))
        chain.set_view(QUOTER, QUOTE_EXACT_INPUT_SINGLE, ExternalReadFailure("execution reverted"))

        with pytest.raises(PriceUnavailable, match="uniswap quote failed"):
            await resolve_token_price(chain, registry, SHIB, QuoteCurrency.USD, QUOTER)

    @pytest.mark.asyncio
    async def test_missing_quote_token_configuration(self, chain):
        base = address_of(2)
        registry = TokenRegistry([TokenRecord("FOO", base, 18)])

        with pytest.raises(PriceUnavailable, match="missing quote token configuration"):
            await resolve_token_price(chain, registry, base, QuoteCurrency.USD, QUOTER)
        assert chain.calls == []


class TestResolution:
    """Tests for the policy driver."""

    @pytest.mark.asyncio
    async def test_unknown_base_token(self, chain, registry):
        unknown = address_of(0xDE)

        with pytest.raises(UnsupportedToken) as exc_info:
            await resolve_token_price(chain, registry, unknown, QuoteCurrency.USD, QUOTER)

        assert unknown in exc_info.value.message
        assert "unsupported token" in str(exc_info.value)
        assert chain.calls == []

    @pytest.mark.asyncio
    async def test_all_strategies_skip(self, chain, registry):
        async def skip(query):
            return None

        with pytest.raises(PriceUnavailable, match="no price source"):
            await resolve_token_price(
                chain, registry, DAI, QuoteCurrency.USD, QUOTER, strategies=(skip, skip)
            )

    @pytest.mark.asyncio
    async def test_first_success_wins(self, chain, registry):
        seen = []

        async def first(query):
            seen.append("first")
            return None

        async def second(query):
            seen.append("second")
            return query.result(Decimal("1.5"), "second")

        async def third(query):
            seen.append("third")
            return query.result(Decimal("9"), "third")

        out = await resolve_token_price(
            chain, registry, DAI, QuoteCurrency.USD, QUOTER, strategies=(first, second, third)
        )

        assert out.source == "second"
        assert seen == ["first", "second"]
