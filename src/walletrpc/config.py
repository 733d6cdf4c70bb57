"""Application configuration using pydantic-settings.

Values come from environment variables or a local `.env` file. Contract
addresses live here rather than in module globals so a deployment on another
chain only needs different settings.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CHAIN_ID = 1


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Chain access
    # ======================
    eth_rpc_url: str = Field(
        default="https://eth.llamarpc.com", description="Ethereum JSON-RPC URL"
    )
    rpc_timeout_seconds: float = Field(
        default=15.0, description="Timeout for a single JSON-RPC request"
    )
    default_chain_id: int = Field(default=DEFAULT_CHAIN_ID, description="EVM chain ID")
    native_symbol: str = Field(default="ETH", description="Native asset symbol")

    # ======================
    # Signer
    # ======================
    private_key: Optional[str] = Field(
        default=None, description="Hex private key used as swap simulation sender"
    )

    # ======================
    # DEX / oracle contracts
    # ======================
    uniswap_quoter_v2: str = Field(
        default="0x61fFE014bA17989E743c5F6cB21bF9697530B21e",
        description="Uniswap V3 QuoterV2 address",
    )
    uniswap_swap_router: str = Field(
        default="0xE592427A0AEce92De3Edee1F18E0157C05861564",
        description="Uniswap V3 SwapRouter address",
    )
    token_defaults_path: Optional[str] = Field(
        default=None, description="Override for the bundled token defaults table"
    )
    swap_deadline_seconds: int = Field(
        default=900, description="Validity window applied to every simulated swap"
    )

    # ======================
    # API
    # ======================
    api_host: str = Field(default="127.0.0.1", description="HTTP facade host")
    api_port: int = Field(default=8000, description="HTTP facade port")

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Root log level")

    @field_validator("default_chain_id")
    @classmethod
    def _non_zero_chain_id(cls, value: int) -> int:
        return value or DEFAULT_CHAIN_ID

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def has_signer(self) -> bool:
        """Check if a private key is configured."""
        return bool(self.private_key and self.private_key.strip())

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "chain_id": self.default_chain_id,
            "native_symbol": self.native_symbol,
            "eth_rpc_url": self._redact_url(self.eth_rpc_url),
            "signer_configured": self.has_signer,
            "contracts": {
                "uniswap_quoter_v2": self.uniswap_quoter_v2,
                "uniswap_swap_router": self.uniswap_swap_router,
            },
            "token_defaults_path": self.token_defaults_path or "(bundled)",
            "swap_deadline_seconds": self.swap_deadline_seconds,
        }

    @staticmethod
    def _redact_url(url: str) -> str:
        """Redact credentials and API keys embedded in an RPC URL."""
        if "://" not in url:
            return url
        proto, rest = url.split("://", 1)
        if "@" in rest:
            _, rest = rest.rsplit("@", 1)
            return f"{proto}://***@{rest}"
        host, sep, path = rest.partition("/")
        # Providers such as Infura and Alchemy put the key in the last path segment
        if sep and len(path.rsplit("/", 1)[-1]) >= 20:
            prefix = path.rsplit("/", 1)[0] + "/" if "/" in path else ""
            return f"{proto}://{host}/{prefix}***"
        return url


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
