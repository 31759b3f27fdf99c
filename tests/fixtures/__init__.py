"""Test fixtures for in-memory implementations."""

from .clock import MutableClock
from .parties import BURN_ADDRESS, PAYEE, PAYER
from .price_sources import ScriptedPriceSource, failing_source

__all__ = [
    "BURN_ADDRESS",
    "PAYEE",
    "PAYER",
    "MutableClock",
    "ScriptedPriceSource",
    "failing_source",
]
