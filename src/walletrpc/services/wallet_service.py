"""Business-level operations behind the RPC facade.

Each operation resolves user-supplied token references, enriches the shared
registry when an unknown address is referenced, takes a registry snapshot
and then hands off to the balance, price or swap engine. Chain reads never
happen while the registry lock is held.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from walletrpc.balances import resolve_balance
from walletrpc.chain.client import ChainClient
from walletrpc.config import Settings
from walletrpc.contracts.balances import BalanceOut, GetBalanceParams
from walletrpc.contracts.prices import GetTokenPriceParams, PriceOut
from walletrpc.contracts.swaps import SwapSimOut, SwapTokensParams
from walletrpc.errors import InvalidInput
from walletrpc.pricing.policy import resolve_token_price
from walletrpc.pricing.registry import SharedRegistry, TokenRegistry, normalize_address
from walletrpc.swap.engine import simulate_swap, validate_swap_params
from walletrpc.wallet import WalletManager

logger = logging.getLogger(__name__)


@dataclass
class ServiceContext:
    """Process-wide handles shared by all requests."""

    chain: object
    registry: SharedRegistry
    wallet: WalletManager
    settings: Settings

    @classmethod
    def from_settings(cls, settings: Settings) -> "ServiceContext":
        """Build the context at startup. Configuration errors propagate."""
        chain = ChainClient(settings.eth_rpc_url, timeout=settings.rpc_timeout_seconds)
        registry = SharedRegistry(TokenRegistry.with_defaults(settings.token_defaults_path))
        wallet = WalletManager.from_settings(settings)
        return cls(chain=chain, registry=registry, wallet=wallet, settings=settings)

    async def close(self) -> None:
        close = getattr(self.chain, "close", None)
        if close is not None:
            await close()


def resolve_input(value: str, registry: TokenRegistry) -> str:
    """Resolve a hex address or a registry symbol into a checksummed address."""
    address = normalize_address(value)
    if address is not None:
        return address

    address = registry.resolve_symbol(value.strip())
    if address is None:
        raise InvalidInput(f"unknown token symbol or address: {value}")
    return address


class WalletService:
    """Balance lookup, price lookup and swap simulation."""

    def __init__(self, ctx: ServiceContext):
        self.ctx = ctx

    async def get_balance(self, params: GetBalanceParams) -> BalanceOut:
        """Native balance, or an ERC-20 balance when `token` is given."""
        snapshot = await self.ctx.registry.snapshot()
        holder = resolve_input(params.address, snapshot)
        token: Optional[str] = None
        if params.token is not None:
            token = resolve_input(params.token, snapshot)

        result = await resolve_balance(
            self.ctx.chain,
            holder,
            token,
            native_symbol=self.ctx.settings.native_symbol,
        )
        logger.info(f"balance lookup succeeded ({result.symbol})")
        return result

    async def get_token_price(self, params: GetTokenPriceParams) -> PriceOut:
        """Price lookup with Chainlink-first policy and Uniswap fallback."""
        base = await self._resolve(params.base)

        await self.ctx.registry.ensure_token(self.ctx.chain, base)
        snapshot = await self.ctx.registry.snapshot()

        price = await resolve_token_price(
            self.ctx.chain,
            snapshot,
            base,
            params.quote,
            quoter=self.ctx.settings.uniswap_quoter_v2,
        )
        logger.info(f"price lookup succeeded via {price.source}")
        return price

    async def swap_tokens(self, params: SwapTokensParams) -> SwapSimOut:
        """Build and simulate Uniswap V3 call data without broadcasting."""
        # Bad amounts and slippage are rejected before any chain read
        validate_swap_params(params)
        signer = self.ctx.wallet.require_address()

        from_token = await self._resolve(params.from_token)
        to_token = await self._resolve(params.to_token)

        # Swap simulations require decimals, so both tokens must be registered
        await self.ctx.registry.ensure_token(self.ctx.chain, from_token)
        await self.ctx.registry.ensure_token(self.ctx.chain, to_token)

        result = await simulate_swap(
            self.ctx.chain,
            signer,
            from_token,
            to_token,
            params,
            quoter=self.ctx.settings.uniswap_quoter_v2,
            router=self.ctx.settings.uniswap_swap_router,
            deadline_seconds=self.ctx.settings.swap_deadline_seconds,
        )
        logger.info("swap simulation succeeded")
        return result

    async def _resolve(self, value: str) -> str:
        address = normalize_address(value)
        if address is not None:
            return address
        return resolve_input(value, await self.ctx.registry.snapshot())
