"""FastAPI dependencies.

Components are created once per application in the lifespan and live on
``app.state``; these accessors hand them to the routes.
"""

from __future__ import annotations

from fastapi import Request

from ..application.channel_ledger import ChannelLedger
from ..application.checkout import CheckoutService
from ..application.price_oracle import PriceOracle
from ..domain.wallet_protocol import WalletProtocol
from ..env import Settings


def get_settings_from_app(request: Request) -> Settings:
    """Get the settings the application was built with."""
    return request.app.state.settings


def get_price_oracle(request: Request) -> PriceOracle:
    """Get the shared price oracle."""
    return request.app.state.oracle


def get_channel_ledger(request: Request) -> ChannelLedger:
    """Get the channel ledger."""
    return request.app.state.ledger


def get_checkout_service(request: Request) -> CheckoutService:
    """Get the checkout service."""
    return request.app.state.checkout


def get_wallet(request: Request) -> WalletProtocol | None:
    """Get the local wallet, if one is configured."""
    return request.app.state.wallet
