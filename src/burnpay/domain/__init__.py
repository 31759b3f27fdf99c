"""Domain layer: entities, errors and collaborator interfaces.

This package should not depend on application or infrastructure code.
"""

from .entities import (
    Channel,
    ChannelStatus,
    CheckoutResult,
    PaymentResult,
    PaymentSplit,
    PriceQuote,
    SettlementResult,
)
from .errors import (
    BelowMinimumBalanceError,
    BurnPayError,
    ChannelNotFoundError,
    InsufficientBalanceError,
    InvalidAddressError,
    InvalidAmountError,
    InvalidBurnPercentageError,
    InvalidRateError,
    NoRateAvailableError,
    SourceUnavailableError,
)
from .price_source import PriceSource
from .wallet_protocol import WalletProtocol

__all__ = [
    "BelowMinimumBalanceError",
    "BurnPayError",
    "Channel",
    "ChannelNotFoundError",
    "ChannelStatus",
    "CheckoutResult",
    "InsufficientBalanceError",
    "InvalidAddressError",
    "InvalidAmountError",
    "InvalidBurnPercentageError",
    "InvalidRateError",
    "NoRateAvailableError",
    "PaymentResult",
    "PaymentSplit",
    "PriceQuote",
    "PriceSource",
    "SettlementResult",
    "SourceUnavailableError",
    "WalletProtocol",
]
