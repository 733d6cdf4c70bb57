"""JSON-RPC over HTTP.

A single POST endpoint accepting one request object or a batch. Errors are
reported in the JSON-RPC envelope, so the HTTP status is always 200.
"""

import json
import logging

from fastapi import APIRouter, Request

from walletrpc.rpc.server import INVALID_REQUEST, PARSE_ERROR, error_response

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/rpc")
async def json_rpc(request: Request):
    """Dispatch a JSON-RPC 2.0 request (or batch) to the wallet service."""
    dispatcher = request.app.state.dispatcher
    body = await request.body()

    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning(f"failed to parse JSON-RPC body: {e}")
        return error_response(None, PARSE_ERROR, f"parse error: {e}")

    if isinstance(payload, list):
        if not payload:
            return error_response(None, INVALID_REQUEST, "empty batch")
        return [await dispatcher.handle(item) for item in payload]

    return await dispatcher.handle(payload)


@router.get("/rpc/methods")
async def list_methods(request: Request) -> dict:
    """List the JSON-RPC methods this server exposes."""
    return {"methods": request.app.state.dispatcher.methods}
