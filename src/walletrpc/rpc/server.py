"""JSON-RPC 2.0 dispatcher and stdio transport.

The dispatcher is transport-agnostic: it turns one decoded request object
into one response object. `run_stdio` feeds it newline-delimited requests
from stdin; the HTTP facade in `walletrpc.api` feeds it request bodies.
"""

import asyncio
import json
import logging
import sys
from typing import Any, Awaitable, Callable, Optional, TextIO

from pydantic import BaseModel, ValidationError

from walletrpc.contracts.balances import GetBalanceParams
from walletrpc.contracts.prices import GetTokenPriceParams
from walletrpc.contracts.swaps import SwapTokensParams
from walletrpc.errors import WalletRpcError
from walletrpc.services.wallet_service import WalletService

logger = logging.getLogger(__name__)

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


def success_response(id_: Any, result: Any) -> dict:
    return {"jsonrpc": "2.0", "result": result, "id": id_}


def error_response(id_: Any, code: int, message: str, data: Optional[dict] = None) -> dict:
    return {
        "jsonrpc": "2.0",
        "error": {"code": code, "message": message, "data": data or {}},
        "id": id_,
    }


class JsonRpcDispatcher:
    """Routes JSON-RPC methods to WalletService operations."""

    def __init__(self, service: WalletService):
        self.service = service
        self._methods: dict[str, tuple[type[BaseModel], Callable[[Any], Awaitable[BaseModel]]]] = {
            "get_balance": (GetBalanceParams, service.get_balance),
            "get_token_price": (GetTokenPriceParams, service.get_token_price),
            "swap_tokens": (SwapTokensParams, service.swap_tokens),
        }

    @property
    def methods(self) -> list[str]:
        return sorted(self._methods)

    async def handle(self, request: Any) -> dict:
        """Handle one decoded JSON-RPC request object."""
        if not isinstance(request, dict) or not isinstance(request.get("method"), str):
            return error_response(
                request.get("id") if isinstance(request, dict) else None,
                INVALID_REQUEST,
                "invalid request",
            )

        method = request["method"]
        id_ = request.get("id")
        params = request.get("params")

        entry = self._methods.get(method)
        if entry is None:
            logger.warning(f"received unknown method {method}")
            return error_response(id_, METHOD_NOT_FOUND, f"method not found: {method}")

        params_model, handler = entry
        try:
            parsed = params_model.model_validate(params if params is not None else {})
        except ValidationError as e:
            logger.warning(f"invalid params for {method}: {e.error_count()} error(s)")
            return error_response(id_, INVALID_PARAMS, f"invalid params: {e}")

        try:
            result = await handler(parsed)
        except WalletRpcError as e:
            logger.error(f"{method} failed: {e}")
            return error_response(id_, e.code, e.message, e.data)
        except Exception as e:
            logger.exception(f"{method} raised unexpected {type(e).__name__}")
            return error_response(id_, INTERNAL_ERROR, f"internal error: {e}")

        return success_response(id_, result.model_dump(mode="json"))

    async def handle_line(self, line: str) -> Optional[dict]:
        """Handle one raw request line; blank lines produce no response."""
        if not line.strip():
            return None
        try:
            request = json.loads(line)
        except json.JSONDecodeError as e:
            logger.warning(f"failed to parse JSON-RPC request: {e}")
            return error_response(None, PARSE_ERROR, f"parse error: {e}")
        return await self.handle(request)


async def run_stdio(
    dispatcher: JsonRpcDispatcher,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
) -> None:
    """Serve newline-delimited JSON-RPC over stdin/stdout until EOF."""
    reader = stdin or sys.stdin
    writer = stdout or sys.stdout
    loop = asyncio.get_running_loop()

    while True:
        line = await loop.run_in_executor(None, reader.readline)
        if not line:
            break

        response = await dispatcher.handle_line(line)
        if response is None:
            continue

        writer.write(json.dumps(response) + "\n")
        writer.flush()

    logger.info("stdin closed, stopping JSON-RPC server")
