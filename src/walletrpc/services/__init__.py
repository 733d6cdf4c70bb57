"""Services for read-only balance, price and swap-simulation operations.

These services query chain state and prepare unsigned call data only.
They never sign or broadcast transactions.
"""

from walletrpc.services.wallet_service import ServiceContext, WalletService, resolve_input

__all__ = [
    "ServiceContext",
    "WalletService",
    "resolve_input",
]
