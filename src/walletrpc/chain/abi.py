"""Minimal contract function descriptors backed by eth-abi.

A function is declared by its canonical signature, e.g.
``ContractFunction("balanceOf(address)", ("uint256",))``. Tuple parameters
use the canonical tuple form ``"f((address,uint24))"`` and are passed as
Python tuples.
"""

from dataclasses import dataclass, field
from typing import Any

from eth_abi import decode, encode
from eth_utils import function_signature_to_4byte_selector

from walletrpc.errors import ExternalReadFailure


def split_types(type_list: str) -> list[str]:
    """Split a comma separated ABI type list, respecting tuple parentheses."""
    types: list[str] = []
    depth = 0
    current = ""
    for char in type_list:
        if char == "," and depth == 0:
            types.append(current)
            current = ""
            continue
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        current += char
    if current:
        types.append(current)
    return types


@dataclass(frozen=True)
class ContractFunction:
    """A contract function signature plus its output types."""

    signature: str
    outputs: tuple[str, ...] = ()
    inputs: tuple[str, ...] = field(init=False)
    selector: bytes = field(init=False)

    def __post_init__(self):
        name_end = self.signature.index("(")
        arg_list = self.signature[name_end + 1 : -1]
        object.__setattr__(self, "inputs", tuple(split_types(arg_list)))
        object.__setattr__(
            self, "selector", function_signature_to_4byte_selector(self.signature)
        )

    @property
    def name(self) -> str:
        return self.signature.split("(", 1)[0]

    def encode(self, *args: Any) -> bytes:
        """Encode call data: selector followed by ABI-encoded arguments."""
        if len(args) != len(self.inputs):
            raise ValueError(
                f"{self.name} expects {len(self.inputs)} argument(s), got {len(args)}"
            )
        return self.selector + encode(list(self.inputs), list(args))

    def decode(self, data: bytes) -> tuple:
        """Decode returned data into a tuple of output values."""
        if not self.outputs:
            return ()
        try:
            return tuple(decode(list(self.outputs), data))
        except Exception as e:
            raise ExternalReadFailure(
                f"failed to decode {self.name} result: {type(e).__name__}: {e}"
            ) from e


# ERC-20
ERC20_DECIMALS = ContractFunction("decimals()", ("uint8",))
ERC20_SYMBOL = ContractFunction("symbol()", ("string",))
ERC20_BALANCE_OF = ContractFunction("balanceOf(address)", ("uint256",))

# Chainlink aggregator
FEED_DECIMALS = ContractFunction("decimals()", ("uint8",))
FEED_LATEST_ROUND_DATA = ContractFunction(
    "latestRoundData()", ("uint80", "int256", "uint256", "uint256", "uint80")
)

# Uniswap V3 QuoterV2 / SwapRouter
QUOTE_EXACT_INPUT_SINGLE = ContractFunction(
    "quoteExactInputSingle((address,address,uint256,uint24,uint160))",
    ("uint256", "uint160", "uint32", "uint256"),
)
EXACT_INPUT_SINGLE = ContractFunction(
    "exactInputSingle((address,address,uint24,address,uint256,uint256,uint256,uint160))",
    ("uint256",),
)
