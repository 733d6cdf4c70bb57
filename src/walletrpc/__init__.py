"""walletrpc - token balances, reference prices and swap simulation for EVM chains."""

__version__ = "0.1.0"
