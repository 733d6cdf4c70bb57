"""Main entry point - serves JSON-RPC over stdio or HTTP."""

import argparse
import asyncio
import logging
import sys

import uvicorn

from walletrpc.config import get_settings
from walletrpc.errors import WalletRpcError
from walletrpc.rpc.server import JsonRpcDispatcher, run_stdio
from walletrpc.services.wallet_service import ServiceContext, WalletService

logger = logging.getLogger(__name__)


def configure_logging(level: str, debug: bool = False) -> None:
    """Send logs to stderr so stdout stays reserved for JSON-RPC responses."""
    log_level = logging.DEBUG if debug else getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


async def serve_stdio() -> None:
    settings = get_settings()
    ctx = ServiceContext.from_settings(settings)
    dispatcher = JsonRpcDispatcher(WalletService(ctx))
    logger.info("starting JSON-RPC stdio server")
    try:
        await run_stdio(dispatcher)
    finally:
        await ctx.close()


def serve_http() -> None:
    from walletrpc.api.app import create_app

    settings = get_settings()
    logger.info(f"starting JSON-RPC HTTP server on {settings.api_host}:{settings.api_port}")
    uvicorn.run(
        create_app(),
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="walletrpc JSON-RPC server")
    parser.add_argument(
        "--transport",
        choices=["stdio", "http"],
        default="stdio",
        help="Serve over stdin/stdout (default) or HTTP",
    )
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings.log_level, settings.debug)
    logger.info(f"Environment: {settings.environment}")

    try:
        if args.transport == "http":
            serve_http()
        else:
            asyncio.run(serve_stdio())
    except WalletRpcError as e:
        logger.error(f"fatal error: {e}")
        print(f"error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted")
    return 0


if __name__ == "__main__":
    sys.exit(main())
