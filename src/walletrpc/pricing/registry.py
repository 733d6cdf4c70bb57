"""Token registry used for symbol lookup and pricing hooks.

The registry owns one set of TokenRecord objects and keeps two lookup
indexes over it (by symbol, by address). Both indexes are updated together
in `add_token`, so a record is always reachable both ways.
"""

import copy
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from eth_utils import is_hex_address, to_checksum_address

from walletrpc.chain.erc20 import fetch_metadata
from walletrpc.errors import ConfigError
from walletrpc.utils.locks import AsyncRWLock

logger = logging.getLogger(__name__)

DEFAULT_FEE = 3_000
DEFAULTS_PATH = Path(__file__).with_name("token_defaults.json")


class QuoteCurrency(str, Enum):
    """Currencies a price can be quoted in."""

    USD = "USD"
    ETH = "ETH"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            upper = value.upper()
            for member in cls:
                if member.value == upper:
                    return member
        return None

    def __str__(self) -> str:
        return self.value


def normalize_address(value: str) -> Optional[str]:
    """Return the checksummed form of a hex address, or None if not one."""
    if not isinstance(value, str) or not is_hex_address(value.strip()):
        return None
    return to_checksum_address(value.strip())


@dataclass
class TokenRecord:
    """Metadata describing a supported token."""

    symbol: str
    address: str
    decimals: int
    feeds: dict[QuoteCurrency, str] = field(default_factory=dict)
    default_fee: int = DEFAULT_FEE

    def __post_init__(self):
        self.symbol = self.symbol.upper()
        address = normalize_address(self.address)
        if address is None:
            raise ValueError(f"invalid token address for {self.symbol}: {self.address}")
        self.address = address
        if not 0 <= self.decimals <= 255:
            raise ValueError(f"decimals out of range for {self.symbol}: {self.decimals}")

    def with_feed(self, quote: Union[QuoteCurrency, str], feed_address: str) -> "TokenRecord":
        address = normalize_address(feed_address)
        if address is None:
            raise ValueError(f"invalid feed address for {quote}: {feed_address}")
        self.feeds[QuoteCurrency(quote)] = address
        return self

    def with_fee(self, fee: int) -> "TokenRecord":
        self.default_fee = fee
        return self

    def feed_for(self, quote: QuoteCurrency) -> Optional[str]:
        return self.feeds.get(quote)


class TokenRegistry:
    """Catalog of known tokens keyed by symbol and by address."""

    def __init__(self, records: Optional[list[TokenRecord]] = None):
        self._records: list[TokenRecord] = []
        self._by_symbol: dict[str, TokenRecord] = {}
        self._by_address: dict[str, TokenRecord] = {}
        for record in records or []:
            self.add_token(record)

    @classmethod
    def with_defaults(cls, path: Optional[Union[str, Path]] = None) -> "TokenRegistry":
        """Build a registry from the token defaults table."""
        registry = cls()
        for record in load_defaults(path):
            registry.add_token(record)
        logger.info(f"Token registry loaded with {len(registry)} default tokens")
        return registry

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, address: str) -> bool:
        return self.info_by_address(address) is not None

    @property
    def records(self) -> list[TokenRecord]:
        return list(self._records)

    def add_token(self, record: TokenRecord) -> None:
        """Insert a record into both indexes, replacing any record it collides with."""
        stale = [
            existing
            for existing in (
                self._by_symbol.get(record.symbol),
                self._by_address.get(record.address),
            )
            if existing is not None
        ]
        for existing in stale:
            self._by_symbol.pop(existing.symbol, None)
            self._by_address.pop(existing.address, None)
            self._records = [r for r in self._records if r is not existing]

        self._records.append(record)
        self._by_symbol[record.symbol] = record
        self._by_address[record.address] = record

    def add_discovered(self, record: TokenRecord) -> TokenRecord:
        """Insert a token found on chain without evicting any existing record.

        A symbol already taken by another address is suffixed with the new
        address, e.g. "WETH_0X...".
        """
        existing = self._by_address.get(record.address)
        if existing is not None:
            return existing
        if record.symbol in self._by_symbol:
            renamed = f"{record.symbol}_{record.address}".upper()
            logger.warning(
                f"Symbol {record.symbol} already registered, keeping {record.address} as {renamed}"
            )
            record.symbol = renamed
        self.add_token(record)
        return record

    def resolve_symbol(self, symbol: str) -> Optional[str]:
        record = self.info_by_symbol(symbol)
        return record.address if record else None

    def info_by_symbol(self, symbol: str) -> Optional[TokenRecord]:
        return self._by_symbol.get(symbol.upper())

    def info_by_address(self, address: str) -> Optional[TokenRecord]:
        normalized = normalize_address(address)
        if normalized is None:
            return None
        return self._by_address.get(normalized)

    def quote_token(self, quote: QuoteCurrency) -> Optional[TokenRecord]:
        """Token used as the DEX counter-asset for a quote currency."""
        if quote == QuoteCurrency.USD:
            return self.info_by_symbol("USDC")
        return self.info_by_symbol("WETH")

    async def ensure_token(self, chain, address: str) -> None:
        """Add a token discovered from chain metadata if it is unknown."""
        if address in self:
            return
        self.add_discovered(await fetch_token_record(chain, address))

    def snapshot(self) -> "TokenRegistry":
        """Deep copy, unaffected by later inserts into this registry."""
        return copy.deepcopy(self)


async def fetch_token_record(chain, address: str) -> TokenRecord:
    """Build a record for an unknown token from its on-chain metadata."""
    checksum = normalize_address(address)
    if checksum is None:
        raise ValueError(f"invalid token address: {address}")

    metadata = await fetch_metadata(chain, checksum)
    symbol = metadata.symbol or f"TOKEN_{checksum}"
    logger.info(f"Discovered token {symbol} at {checksum} ({metadata.decimals} decimals)")
    return TokenRecord(symbol=symbol, address=checksum, decimals=metadata.decimals)


def load_defaults(path: Optional[Union[str, Path]] = None) -> list[TokenRecord]:
    """Parse the defaults table. Any malformed entry aborts with ConfigError."""
    source = Path(path) if path else DEFAULTS_PATH
    try:
        entries = json.loads(source.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ConfigError(f"failed to load token defaults from {source}: {e}") from e

    if not isinstance(entries, list):
        raise ConfigError(f"token defaults in {source} must be a list")

    records = []
    for index, entry in enumerate(entries):
        try:
            record = TokenRecord(
                symbol=entry["symbol"],
                address=entry["address"],
                decimals=int(entry["decimals"]),
                default_fee=int(entry.get("default_fee", DEFAULT_FEE)),
            )
            for quote, feed in entry.get("chainlink_feeds", {}).items():
                record.with_feed(quote, feed)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ConfigError(f"invalid token defaults entry #{index}: {e}") from e
        records.append(record)
    return records


class SharedRegistry:
    """Process-wide registry guarded by a reader/writer lock.

    External metadata reads never run while the lock is held; only the
    final insert takes the write lock.
    """

    def __init__(self, registry: TokenRegistry):
        self._registry = registry
        self._lock = AsyncRWLock(name="token_registry")

    @property
    def lock(self) -> AsyncRWLock:
        return self._lock

    async def snapshot(self) -> TokenRegistry:
        async with self._lock.read():
            return self._registry.snapshot()

    async def ensure_token(self, chain, address: str) -> None:
        async with self._lock.read():
            if address in self._registry:
                return

        record = await fetch_token_record(chain, address)

        async with self._lock.write():
            # No-op if another request enriched the same address meanwhile
            self._registry.add_discovered(record)
