from __future__ import annotations

import os
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .infrastructure.price_sources import KNOWN_SOURCES

DEFAULT_BURN_ADDRESS = "1BurnHacashSupplyXXXXXXXXXXXXXXYv5wsH"


class Settings(BaseModel):
    """Typed application settings built from environment variables."""

    # Fee and channel settings
    burn_percentage: Decimal = Decimal("0.02")
    minimum_channel_balance: Decimal = Field(default=Decimal("1"), ge=0)
    burn_address: str = DEFAULT_BURN_ADDRESS
    settlement_fee: Decimal = Field(default=Decimal("0.0001"), ge=0)

    # Price oracle settings
    cache_ttl: float = Field(default=15.0, gt=0)
    poll_interval: float = Field(default=15.0, gt=0)
    source_timeout: float = Field(default=3.0, gt=0)
    price_sources: list[str] = ["coinex", "nonkyc", "coingecko"]
    price_source_urls: dict[str, str] = {}

    # Wallet
    wallet_address: Optional[str] = None

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_debug: bool = False
    api_cors_origins: list[str] = ["*"]
    log_level: str = "INFO"

    # Application settings
    app_name: str = "BurnPay"
    app_version: str = "1.0.0"

    @field_validator("burn_percentage")
    @classmethod
    def validate_burn_percentage(cls, v: Decimal) -> Decimal:
        if v < 0 or v >= 1:
            raise ValueError("Burn percentage must be in [0, 1)")
        return v

    @field_validator("price_sources")
    @classmethod
    def validate_price_sources(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("At least one price source must be configured")
        unknown = [key for key in v if key not in KNOWN_SOURCES]
        if unknown:
            raise ValueError(f"Unknown price sources: {', '.join(unknown)}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return level


def _source_url_overrides() -> dict[str, str]:
    overrides: dict[str, str] = {}
    for key in KNOWN_SOURCES:
        url = os.environ.get(f"BURNPAY_{key.upper()}_URL")
        if url:
            overrides[key] = url
    return overrides


def get_settings() -> Settings:
    """Return typed settings instance sourced from env vars."""
    return Settings(
        burn_percentage=os.environ.get("BURNPAY_BURN_PERCENTAGE", "0.02"),
        minimum_channel_balance=os.environ.get("BURNPAY_MIN_CHANNEL_BALANCE", "1"),
        burn_address=os.environ.get("BURNPAY_BURN_ADDRESS", DEFAULT_BURN_ADDRESS),
        settlement_fee=os.environ.get("BURNPAY_SETTLEMENT_FEE", "0.0001"),
        cache_ttl=float(os.environ.get("BURNPAY_CACHE_TTL", "15")),
        poll_interval=float(os.environ.get("BURNPAY_POLL_INTERVAL", "15")),
        source_timeout=float(os.environ.get("BURNPAY_SOURCE_TIMEOUT", "3")),
        price_sources=[
            key.strip().lower()
            for key in os.environ.get(
                "BURNPAY_PRICE_SOURCES", "coinex,nonkyc,coingecko"
            ).split(",")
            if key.strip()
        ],
        price_source_urls=_source_url_overrides(),
        wallet_address=os.environ.get("BURNPAY_WALLET_ADDRESS") or None,
        api_host=os.environ.get("BURNPAY_API_HOST", "0.0.0.0"),
        api_port=int(os.environ.get("BURNPAY_API_PORT", "8000")),
        api_debug=os.environ.get("BURNPAY_API_DEBUG", "false").lower() == "true",
        api_cors_origins=os.environ.get("BURNPAY_API_CORS_ORIGINS", "*").split(","),
        log_level=os.environ.get("BURNPAY_LOG_LEVEL", "INFO"),
        app_name=os.environ.get("BURNPAY_APP_NAME", "BurnPay"),
        app_version=os.environ.get("BURNPAY_APP_VERSION", "1.0.0"),
    )
