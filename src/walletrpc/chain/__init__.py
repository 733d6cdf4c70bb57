"""Chain access: JSON-RPC client, ABI descriptors and ERC-20 reads."""

from walletrpc.chain.abi import ContractFunction
from walletrpc.chain.client import ChainClient
from walletrpc.chain.erc20 import Erc20Metadata, fetch_balance_of, fetch_metadata

__all__ = [
    "ChainClient",
    "ContractFunction",
    "Erc20Metadata",
    "fetch_balance_of",
    "fetch_metadata",
]
