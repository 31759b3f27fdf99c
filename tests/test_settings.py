from decimal import Decimal

import pytest
from pydantic import ValidationError

from burnpay.env import DEFAULT_BURN_ADDRESS, Settings, get_settings


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in [
        "BURNPAY_BURN_PERCENTAGE",
        "BURNPAY_PRICE_SOURCES",
        "BURNPAY_WALLET_ADDRESS",
        "BURNPAY_COINEX_URL",
    ]:
        monkeypatch.delenv(key, raising=False)

    settings = get_settings()

    assert settings.burn_percentage == Decimal("0.02")
    assert settings.burn_address == DEFAULT_BURN_ADDRESS
    assert settings.price_sources == ["coinex", "nonkyc", "coingecko"]
    assert settings.cache_ttl == 15.0
    assert settings.wallet_address is None


def test_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BURNPAY_BURN_PERCENTAGE", "0.05")
    monkeypatch.setenv("BURNPAY_PRICE_SOURCES", " CoinGecko , nonkyc ")
    monkeypatch.setenv("BURNPAY_COINGECKO_URL", "http://localhost:8080/price")
    monkeypatch.setenv("BURNPAY_WALLET_ADDRESS", "1LocalWallet")
    monkeypatch.setenv("BURNPAY_LOG_LEVEL", "debug")

    settings = get_settings()

    assert settings.burn_percentage == Decimal("0.05")
    assert settings.price_sources == ["coingecko", "nonkyc"]
    assert settings.price_source_urls["coingecko"] == "http://localhost:8080/price"
    assert settings.wallet_address == "1LocalWallet"
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize("burn", ["1", "-0.01", "2"])
def test_rejects_burn_percentage_out_of_range(burn: str) -> None:
    with pytest.raises(ValidationError):
        Settings(burn_percentage=burn)


def test_rejects_unknown_price_source() -> None:
    with pytest.raises(ValidationError, match="binance"):
        Settings(price_sources=["coinex", "binance"])


def test_rejects_empty_price_sources() -> None:
    with pytest.raises(ValidationError):
        Settings(price_sources=[])


def test_rejects_unknown_log_level() -> None:
    with pytest.raises(ValidationError):
        Settings(log_level="LOUD")
