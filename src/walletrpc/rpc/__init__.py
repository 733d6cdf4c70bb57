"""JSON-RPC facade over the wallet service."""

from walletrpc.rpc.server import JsonRpcDispatcher, run_stdio

__all__ = ["JsonRpcDispatcher", "run_stdio"]
