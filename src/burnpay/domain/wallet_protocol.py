"""Protocol interface for the wallet collaborator.

The core only reads the local party's address from the wallet; signing and
settlement broadcasting stay on the wallet's side.
"""

from __future__ import annotations

from typing import Protocol


class WalletProtocol(Protocol):
    """Anything that can tell the ledger who the local payer is."""

    @property
    def address(self) -> str:
        """The local party's address, used as ``payer_address`` on open."""
        ...
