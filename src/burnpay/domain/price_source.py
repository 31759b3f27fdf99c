"""Price source domain interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal


class PriceSource(ABC):
    """One upstream provider of the channel-currency price.

    Implementations raise ``SourceUnavailableError`` when the provider cannot
    produce a usable price.
    """

    name: str

    @abstractmethod
    async def fetch_price(self) -> Decimal:
        """Return the provider's last traded price."""
        pass

    async def aclose(self) -> None:
        """Release any transport held by the source."""
        return None
