"""Error kinds surfaced by balance, price and swap operations.

Every error carries a JSON-RPC error code so the RPC facade can convert it
into an error payload without knowing which component raised it.
"""

from typing import Any, Optional


class WalletRpcError(Exception):
    """Base class for all per-request failures."""

    code: int = -32603
    label: str = "internal error"

    def __init__(self, message: str, data: Optional[dict[str, Any]] = None):
        self.message = message
        self.data = data or {}
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.label}: {self.message}"

    def to_json_rpc(self) -> dict[str, Any]:
        """Build the JSON-RPC error object for this failure."""
        return {"code": self.code, "message": self.message, "data": self.data}


class ConfigError(WalletRpcError):
    """Raised when configuration or the token defaults table is malformed."""

    code = -32001
    label = "configuration error"


class InvalidInput(WalletRpcError):
    """Raised for malformed addresses, amounts or parameters."""

    code = -32602
    label = "invalid input"


class ExternalReadFailure(WalletRpcError):
    """Raised when the chain node itself could not serve a read."""

    code = -32002
    label = "rpc error"


class UnsupportedToken(WalletRpcError):
    """Raised when a base token is not present in the registry."""

    code = -32011
    label = "unsupported token"


class PriceUnavailable(WalletRpcError):
    """Raised when no price source produced a valid reading."""

    code = -32010
    label = "price error"


class SwapUnavailable(WalletRpcError):
    """Raised when a swap cannot be quoted or simulated."""

    code = -32020
    label = "swap error"


class WalletError(WalletRpcError):
    """Raised when the signer is missing or cannot be loaded."""

    code = -32030
    label = "wallet error"


class InternalError(WalletRpcError):
    """Raised for failures that indicate a bug rather than bad input."""

    code = -32603
    label = "internal error"
