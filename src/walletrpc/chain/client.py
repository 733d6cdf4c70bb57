"""Ethereum JSON-RPC client over httpx.

Exposes the four read primitives the pricing and swap code needs:
native balance, contract view call, gas estimation and read-only call
simulation. Each is a single attempt; failures surface as
ExternalReadFailure and retry policy is left to the caller.
"""

import itertools
import logging
from typing import Any, Optional, Sequence

import httpx

from walletrpc.chain.abi import ContractFunction
from walletrpc.errors import ExternalReadFailure

logger = logging.getLogger(__name__)


def _to_hex(data: bytes) -> str:
    return "0x" + data.hex()


def _from_hex(value: str) -> bytes:
    if not isinstance(value, str) or not value.startswith("0x"):
        raise ExternalReadFailure(f"unexpected hex payload: {value!r}")
    try:
        return bytes.fromhex(value[2:])
    except ValueError as e:
        raise ExternalReadFailure(f"malformed hex payload: {value!r}") from e


def _quantity(value: str) -> int:
    if not isinstance(value, str) or not value.startswith("0x"):
        raise ExternalReadFailure(f"unexpected quantity: {value!r}")
    try:
        return int(value, 16)
    except ValueError as e:
        raise ExternalReadFailure(f"malformed quantity: {value!r}") from e


class ChainClient:
    """Async JSON-RPC client for a single EVM endpoint."""

    def __init__(
        self,
        rpc_url: str,
        timeout: float = 15.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.rpc_url = rpc_url
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None
        self._ids = itertools.count(1)

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazily create the underlying HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def request(self, method: str, params: Sequence[Any]) -> Any:
        """Send one JSON-RPC request and return its `result` field."""
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": list(params),
            "id": next(self._ids),
        }

        try:
            response = await self.client.post(self.rpc_url, json=payload)
        except httpx.HTTPError as e:
            logger.warning(f"{method} transport failure: {type(e).__name__}: {e}")
            raise ExternalReadFailure(f"{method} request failed: {e}") from e

        if response.status_code != 200:
            raise ExternalReadFailure(
                f"{method} returned HTTP {response.status_code}"
            )

        try:
            body = response.json()
        except ValueError as e:
            raise ExternalReadFailure(f"{method} returned invalid JSON") from e

        if not isinstance(body, dict):
            raise ExternalReadFailure(f"{method} returned a non-object response")

        if body.get("error"):
            error = body["error"]
            message = error.get("message", "unknown error") if isinstance(error, dict) else str(error)
            code = error.get("code") if isinstance(error, dict) else None
            raise ExternalReadFailure(
                f"{method} failed: {message}",
                data={"rpc_code": code, "rpc_data": error.get("data") if isinstance(error, dict) else None},
            )

        if "result" not in body:
            raise ExternalReadFailure(f"{method} response missing result")

        return body["result"]

    async def get_balance(self, address: str) -> int:
        """Native asset balance in wei at the latest block."""
        result = await self.request("eth_getBalance", [address, "latest"])
        return _quantity(result)

    async def call(self, to: str, data: bytes, from_: Optional[str] = None) -> bytes:
        """Execute a read-only eth_call and return the raw return data."""
        tx: dict[str, Any] = {"to": to, "data": _to_hex(data)}
        if from_:
            tx["from"] = from_
        result = await self.request("eth_call", [tx, "latest"])
        return _from_hex(result)

    async def simulate_call(self, tx: dict[str, Any]) -> bytes:
        """Run a full call descriptor through eth_call without changing state."""
        result = await self.request("eth_call", [self._encode_tx(tx), "latest"])
        return _from_hex(result)

    async def estimate_gas(self, tx: dict[str, Any]) -> int:
        """Estimate gas for a call descriptor."""
        result = await self.request("eth_estimateGas", [self._encode_tx(tx)])
        return _quantity(result)

    async def read_contract_view(
        self,
        address: str,
        function: ContractFunction,
        args: Sequence[Any] = (),
    ) -> tuple:
        """Call a view function and decode its outputs."""
        raw = await self.call(address, function.encode(*args))
        if not raw and function.outputs:
            raise ExternalReadFailure(
                f"{function.name} on {address} returned no data"
            )
        return function.decode(raw)

    @staticmethod
    def _encode_tx(tx: dict[str, Any]) -> dict[str, Any]:
        encoded: dict[str, Any] = {}
        for key, value in tx.items():
            if value is None:
                continue
            if isinstance(value, bytes):
                encoded[key] = _to_hex(value)
            elif isinstance(value, int):
                encoded[key] = hex(value)
            else:
                encoded[key] = value
        return encoded
