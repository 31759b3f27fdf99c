"""HTTP-backed price sources for the supported exchanges and aggregators."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union

import httpx

from ...domain.amounts import to_decimal
from ...domain.errors import SourceUnavailableError
from ...domain.price_source import PriceSource
from ..http.http_client import AsyncHttpClient

FieldPath = Tuple[Union[str, int], ...]


@dataclass(frozen=True)
class SourceSpec:
    """Where a provider publishes its last price and how to dig it out."""

    key: str
    name: str
    url: str
    field_path: FieldPath


KNOWN_SOURCES: Dict[str, SourceSpec] = {
    "coinex": SourceSpec(
        key="coinex",
        name="CoinEx",
        url="https://api.coinex.com/v2/spot/ticker?market=HACUSDT",
        field_path=("data", 0, "last"),
    ),
    "nonkyc": SourceSpec(
        key="nonkyc",
        name="Nonkyc.io",
        url="https://api.nonkyc.io/api/v2/peatio/public/markets/hacusdt/tickers",
        field_path=("ticker", "last"),
    ),
    "coingecko": SourceSpec(
        key="coingecko",
        name="CoinGecko",
        url="https://api.coingecko.com/api/v3/simple/price?ids=hacash&vs_currencies=usdt",
        field_path=("hacash", "usdt"),
    ),
}


def extract_field(body: Any, path: FieldPath) -> Any:
    """Follow ``path`` through nested JSON, raising SourceUnavailableError on a miss."""
    node = body
    for step in path:
        try:
            node = node[step]
        except (KeyError, IndexError, TypeError):
            raise SourceUnavailableError(f"Response has no field at {path!r}")
    if node is None:
        raise SourceUnavailableError(f"Response field {path!r} is null")
    return node


class HttpPriceSource(PriceSource):
    """Price source that GETs a JSON document and reads one field from it."""

    def __init__(
        self,
        name: str,
        url: str,
        field_path: FieldPath,
        *,
        timeout: float = 3.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.name = name
        self.url = url
        self.field_path = field_path
        self._http = AsyncHttpClient(timeout=timeout, transport=transport)

    async def fetch_price(self) -> Decimal:
        try:
            body = await self._http.get_json(self.url)
        except httpx.HTTPStatusError as e:
            raise SourceUnavailableError(
                f"{self.name} answered HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise SourceUnavailableError(f"Could not reach {self.name}: {e}") from e
        except ValueError as e:
            raise SourceUnavailableError(f"{self.name} sent invalid JSON: {e}") from e

        raw = extract_field(body, self.field_path)
        try:
            return to_decimal(raw)
        except ValueError as e:
            raise SourceUnavailableError(
                f"{self.name} sent a non-numeric price: {raw!r}"
            ) from e

    async def aclose(self) -> None:
        await self._http.aclose()

    def __repr__(self) -> str:
        return f"HttpPriceSource(name={self.name!r}, url={self.url!r})"


def build_price_sources(
    keys: Sequence[str],
    *,
    url_overrides: Optional[Mapping[str, str]] = None,
    timeout: float = 3.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> list[PriceSource]:
    """Instantiate the configured sources, keeping their priority order."""
    overrides = url_overrides or {}
    sources: list[PriceSource] = []
    for key in keys:
        spec = KNOWN_SOURCES.get(key)
        if spec is None:
            raise ValueError(f"Unknown price source: {key}")
        sources.append(
            HttpPriceSource(
                spec.name,
                overrides.get(key, spec.url),
                spec.field_path,
                timeout=timeout,
                transport=transport,
            )
        )
    return sources
