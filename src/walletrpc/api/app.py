"""FastAPI application factory."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from walletrpc import __version__
from walletrpc.config import get_settings
from walletrpc.rpc.server import JsonRpcDispatcher
from walletrpc.services.wallet_service import ServiceContext, WalletService


def create_app(context: Optional[ServiceContext] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        context: Pre-built service context (tests); built from settings otherwise
    """
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        ctx = context or ServiceContext.from_settings(settings)
        app.state.context = ctx
        app.state.dispatcher = JsonRpcDispatcher(WalletService(ctx))
        yield
        if context is None:
            await ctx.close()

    app = FastAPI(
        title="walletrpc",
        description="Token balances, reference prices and swap simulation over JSON-RPC",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )

    if context is not None:
        # Available without a lifespan run (ASGITransport does not send one)
        app.state.context = context
        app.state.dispatcher = JsonRpcDispatcher(WalletService(context))

    # Register routes
    from walletrpc.api.routes import health, rpc

    app.include_router(health.router, tags=["Health"])
    app.include_router(rpc.router, tags=["JSON-RPC"])

    return app
