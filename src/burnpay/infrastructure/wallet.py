"""Wallet stand-in that exposes a configured address."""

from __future__ import annotations


class StaticWallet:
    """Wallet whose identity is fixed at construction.

    Satisfies ``WalletProtocol``. A real wallet connection (and its signing)
    replaces this without touching the ledger.
    """

    def __init__(self, address: str) -> None:
        if not address:
            raise ValueError("Wallet address cannot be empty")
        self._address = address

    @property
    def address(self) -> str:
        return self._address

    def __repr__(self) -> str:
        return f"StaticWallet(address={self._address!r})"
