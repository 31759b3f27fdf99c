from .http_price_source import (
    KNOWN_SOURCES,
    HttpPriceSource,
    SourceSpec,
    build_price_sources,
    extract_field,
)

__all__ = [
    "KNOWN_SOURCES",
    "HttpPriceSource",
    "SourceSpec",
    "build_price_sources",
    "extract_field",
]
