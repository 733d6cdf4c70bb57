"""Optional local signer loaded from configuration.

The signer is only used as the sender (and default recipient) of simulated
swap calls. Nothing in this package signs or broadcasts transactions.
"""

import logging
from typing import Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount

from walletrpc.config import Settings
from walletrpc.errors import WalletError

logger = logging.getLogger(__name__)


class WalletManager:
    """Holds the configured account, if any."""

    def __init__(self, account: Optional[LocalAccount] = None, chain_id: int = 1):
        self._account = account
        self.chain_id = chain_id

    @classmethod
    def from_settings(cls, settings: Settings) -> "WalletManager":
        if not settings.has_signer:
            logger.info("No PRIVATE_KEY configured - swap simulation disabled")
            return cls(None, settings.default_chain_id)

        key = settings.private_key.strip()
        if not key.startswith("0x"):
            key = "0x" + key
        try:
            account = Account.from_key(key)
        except Exception as e:
            # eth-keys raises its own ValidationError for bad key bytes
            raise WalletError(f"failed to parse private key: {type(e).__name__}") from e

        logger.info(f"Loaded signer {account.address} for chain {settings.default_chain_id}")
        return cls(account, settings.default_chain_id)

    @property
    def has_signer(self) -> bool:
        return self._account is not None

    @property
    def address(self) -> Optional[str]:
        return self._account.address if self._account else None

    def require_address(self) -> str:
        """Signer address, or WalletError when no key is configured."""
        if self._account is None:
            raise WalletError("swap simulation requires PRIVATE_KEY/signing config")
        return self._account.address
