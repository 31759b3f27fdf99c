"""Domain-specific exceptions."""

from __future__ import annotations


class BurnPayError(Exception):
    """Base class for every error raised by the channel and pricing core."""


class InvalidAmountError(BurnPayError, ValueError):
    """Raised when an amount is not a positive finite number."""


class InvalidRateError(BurnPayError, ValueError):
    """Raised when an exchange rate is not strictly positive."""


class InvalidBurnPercentageError(BurnPayError, ValueError):
    """Raised when a burn percentage falls outside [0, 1)."""


class InvalidAddressError(BurnPayError, ValueError):
    """Raised when a channel party address is empty."""


class InsufficientBalanceError(BurnPayError, ValueError):
    """Raised when a payment exceeds the payer's channel balance."""


class BelowMinimumBalanceError(BurnPayError, ValueError):
    """Raised when a channel is opened below the configured minimum."""


class ChannelNotFoundError(BurnPayError, LookupError):
    """Raised when no open channel matches the requested id."""


class NoRateAvailableError(BurnPayError):
    """Raised when every price source failed and nothing is cached."""


class SourceUnavailableError(BurnPayError):
    """Raised by a price source that timed out or answered unusably.

    Absorbed by the oracle, which moves on to the next source.
    """
