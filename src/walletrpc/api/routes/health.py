"""Health check endpoints."""

from fastapi import APIRouter, Request

from walletrpc import __version__
from walletrpc.config import get_settings

router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "walletrpc"}


@router.get("/health/detailed")
async def detailed_health(request: Request):
    """Detailed health check with configuration info."""
    settings = get_settings()
    ctx = getattr(request.app.state, "context", None)
    return {
        "status": "healthy",
        "service": "walletrpc",
        "version": __version__,
        "config": settings.get_safe_dict(),
        "registry_tokens": len((await ctx.registry.snapshot()).records) if ctx else 0,
        "signer": ctx.wallet.address if ctx else None,
    }
