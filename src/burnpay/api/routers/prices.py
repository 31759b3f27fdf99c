"""Price API routes."""

from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from prometheus_client import Counter

from ...application.channel_ledger import ChannelLedger
from ...application.fee_split import compute_split
from ...application.price_oracle import PriceOracle
from ...domain.entities import PaymentSplit, PriceQuote
from ...domain.errors import NoRateAvailableError
from ..dependencies import get_channel_ledger, get_price_oracle

router = APIRouter(prefix="/prices", tags=["prices"])

price_requests_total = Counter(
    "price_requests_total",
    "Total price requests served",
    ["endpoint", "status"],
)


@router.get("/current", response_model=PriceQuote)
async def get_current_price(
    oracle: PriceOracle = Depends(get_price_oracle),
) -> PriceQuote:
    """Return the current channel-currency price in stable units."""
    try:
        quote = await oracle.get_rate()
    except NoRateAvailableError as e:
        price_requests_total.labels(endpoint="current", status="unavailable").inc()
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    price_requests_total.labels(endpoint="current", status="success").inc()
    return quote


@router.get("/split", response_model=PaymentSplit)
async def get_payment_split(
    amount: Decimal = Query(..., description="Stable amount the merchant should receive"),
    oracle: PriceOracle = Depends(get_price_oracle),
    ledger: ChannelLedger = Depends(get_channel_ledger),
) -> PaymentSplit:
    """Quote the gross channel amount, burn and merchant share for ``amount``."""
    try:
        quote = await oracle.get_rate()
        split = compute_split(amount, quote.value, ledger.burn_percentage)
    except NoRateAvailableError as e:
        price_requests_total.labels(endpoint="split", status="unavailable").inc()
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    except ValueError as e:
        price_requests_total.labels(endpoint="split", status="client_error").inc()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    price_requests_total.labels(endpoint="split", status="success").inc()
    return split
