"""Swap quote and simulation engine."""

from walletrpc.swap.engine import apply_slippage, simulate_swap

__all__ = ["apply_slippage", "simulate_swap"]
