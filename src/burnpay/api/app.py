"""FastAPI application configuration."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, Sequence

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import Gauge

from ..application.channel_ledger import ChannelLedger
from ..application.checkout import CheckoutService
from ..application.price_oracle import PriceOracle
from ..domain.entities import PriceQuote
from ..domain.price_source import PriceSource
from ..env import Settings, get_settings
from ..infrastructure.price_sources import build_price_sources
from ..infrastructure.wallet import StaticWallet
from .routers import channels, prices

logger = logging.getLogger(__name__)

latest_price = Gauge(
    "latest_price",
    "Most recent polled price in stable units per channel unit",
)


def _on_price_update(quote: PriceQuote) -> None:
    latest_price.set(float(quote.value))
    logger.info("Price update: %s from %s", quote.value, quote.source)


def create_app(
    settings: Optional[Settings] = None,
    *,
    price_sources: Optional[Sequence[PriceSource]] = None,
    start_polling: bool = True,
) -> FastAPI:
    """Create and configure FastAPI application.

    ``price_sources`` replaces the configured HTTP sources, mainly for tests.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        sources = (
            list(price_sources)
            if price_sources is not None
            else build_price_sources(
                settings.price_sources,
                url_overrides=settings.price_source_urls,
                timeout=settings.source_timeout,
            )
        )
        oracle = PriceOracle(
            sources,
            cache_ttl=settings.cache_ttl,
            poll_interval=settings.poll_interval,
            source_timeout=settings.source_timeout,
        )
        ledger = ChannelLedger(
            settings.burn_percentage,
            settings.minimum_channel_balance,
            burn_address=settings.burn_address,
            settlement_fee=settings.settlement_fee,
        )
        app.state.settings = settings
        app.state.oracle = oracle
        app.state.ledger = ledger
        app.state.checkout = CheckoutService(oracle, ledger)
        app.state.wallet = (
            StaticWallet(settings.wallet_address) if settings.wallet_address else None
        )

        if start_polling:
            oracle.start_polling(_on_price_update)
        try:
            yield
        finally:
            await oracle.aclose()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="BurnPay payment channel API",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api_cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    # Include routers
    app.include_router(channels.router, prefix="/api/v1")
    app.include_router(prices.router, prefix="/api/v1")

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {
            "message": f"Welcome to {settings.app_name} API",
            "version": settings.app_version,
            "docs": "/docs",
        }

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {
            "status": "healthy",
            "service": settings.app_name,
            "version": settings.app_version,
        }

    return app
