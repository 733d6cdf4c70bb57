"""Pytest configuration and fixtures."""

import os
from typing import Any, Callable, Optional, Union

import pytest
from eth_abi import encode

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["ETH_RPC_URL"] = "http://localhost:8545"
os.environ.pop("PRIVATE_KEY", None)

from walletrpc.chain.abi import ContractFunction
from walletrpc.config import Settings
from walletrpc.errors import ExternalReadFailure
from walletrpc.pricing.registry import QuoteCurrency, TokenRecord, TokenRegistry

# Well-known anvil/hardhat test key, never funded on mainnet
TEST_PRIVATE_KEY = "0x59c6995e998f97a5a0044966f0945382d0b7adf99019cba46777e1fbbf3a1b02"

WETH = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"
USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
DAI = "0x6B175474E89094C44Da98b954EedeAC495271d0F"
ETH_USD_FEED = "0x5f4eC3Df9cbd43714FE2740f5E3616155c5b8419"
USDC_USD_FEED = "0x8fFfFfd4AfB6115b954Bd326cbe7B4BA576818f6"
DAI_USD_FEED = "0xAed0c38402a5d19df6E4c03F4E2DceD6e29c1ee9"
QUOTER = "0x61fFE014bA17989E743c5F6cB21bF9697530B21e"
ROUTER = "0xE592427A0AEce92De3Edee1F18E0157C05861564"

ViewResponse = Union[tuple, Exception, Callable[[tuple], Any]]


def address_of(n: int) -> str:
    """Deterministic checksummed test address."""
    from eth_utils import to_checksum_address

    return to_checksum_address("0x" + hex(n)[2:].zfill(40))


class FakeChain:
    """In-memory chain reader serving canned contract responses.

    Responses are ABI-encoded with the function's output types and decoded
    back through the real ContractFunction, so the ABI layer is exercised.
    """

    def __init__(self):
        self.views: dict[tuple[str, str], ViewResponse] = {}
        self.native_balances: dict[str, int] = {}
        self.gas: Union[int, Exception] = 21_000
        self.simulation: Union[bytes, Exception] = b""
        self.calls: list[tuple] = []

    def set_view(self, address: str, function: ContractFunction, response: ViewResponse) -> None:
        self.views[(address.lower(), function.signature)] = response

    def set_feed(self, address: str, answer: int, decimals: int = 8) -> None:
        from walletrpc.chain.abi import FEED_DECIMALS, FEED_LATEST_ROUND_DATA

        self.set_view(address, FEED_DECIMALS, (decimals,))
        self.set_view(address, FEED_LATEST_ROUND_DATA, (1, answer, 1_700_000_000, 1_700_000_000, 1))

    def set_token(self, address: str, symbol: Optional[str], decimals: int) -> None:
        from walletrpc.chain.abi import ERC20_DECIMALS, ERC20_SYMBOL

        self.set_view(address, ERC20_DECIMALS, (decimals,))
        if symbol is None:
            self.set_view(address, ERC20_SYMBOL, ExternalReadFailure("execution reverted"))
        else:
            self.set_view(address, ERC20_SYMBOL, (symbol,))

    def calls_to(self, name: str) -> list[tuple]:
        return [c for c in self.calls if c[0] == name]

    async def get_balance(self, address: str) -> int:
        self.calls.append(("get_balance", address))
        if address not in self.native_balances:
            raise ExternalReadFailure(f"eth_getBalance failed for {address}")
        return self.native_balances[address]

    async def read_contract_view(self, address: str, function: ContractFunction, args=()) -> tuple:
        # Encoding validates argument types exactly as a real call would
        function.encode(*args)
        self.calls.append(("view", address, function.name, tuple(args)))

        response = self.views.get((address.lower(), function.signature))
        if response is None:
            raise ExternalReadFailure(f"execution reverted: {function.name} on {address}")
        if isinstance(response, Exception):
            raise response
        if callable(response):
            response = response(tuple(args))
        return function.decode(encode(list(function.outputs), list(response)))

    async def estimate_gas(self, tx: dict) -> int:
        self.calls.append(("estimate_gas", tx))
        if isinstance(self.gas, Exception):
            raise self.gas
        return self.gas

    async def simulate_call(self, tx: dict) -> bytes:
        self.calls.append(("simulate_call", tx))
        if isinstance(self.simulation, Exception):
            raise self.simulation
        return self.simulation


@pytest.fixture
def chain() -> FakeChain:
    return FakeChain()


@pytest.fixture
def registry() -> TokenRegistry:
    """Small registry with WETH, USDC and DAI and their USD feeds."""
    return TokenRegistry(
        [
            TokenRecord("WETH", WETH, 18).with_feed(QuoteCurrency.USD, ETH_USD_FEED),
            TokenRecord("USDC", USDC, 6).with_feed(QuoteCurrency.USD, USDC_USD_FEED),
            TokenRecord("DAI", DAI, 18).with_feed(QuoteCurrency.USD, DAI_USD_FEED),
        ]
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        eth_rpc_url="http://localhost:8545",
        private_key=TEST_PRIVATE_KEY,
        uniswap_quoter_v2=QUOTER,
        uniswap_swap_router=ROUTER,
    )
