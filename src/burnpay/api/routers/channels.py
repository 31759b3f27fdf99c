"""Channel API routes."""

from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Depends, HTTPException, Path, status
from prometheus_client import Counter, Histogram

from ...application.channel_ledger import ChannelLedger
from ...application.checkout import CheckoutService
from ...application.dtos import (
    ChannelListDTO,
    ChannelResponseDTO,
    CheckoutDTO,
    OpenChannelDTO,
    PaymentDTO,
)
from ...domain.entities import CheckoutResult, PaymentResult, SettlementResult
from ...domain.errors import ChannelNotFoundError, NoRateAvailableError
from ...domain.wallet_protocol import WalletProtocol
from ..dependencies import get_channel_ledger, get_checkout_service, get_wallet

router = APIRouter(prefix="/channels", tags=["channels"])

logger = logging.getLogger(__name__)


payment_requests_total = Counter(
    "payment_requests_total",
    "Total payment requests processed",
    ["kind", "status"],
)

payment_request_duration_seconds = Histogram(
    "payment_request_duration_seconds",
    "Wall time to process a payment request",
    ["kind", "status"],
)

channel_lifecycle_total = Counter(
    "channel_lifecycle_total",
    "Channel open and close requests",
    ["operation", "status"],
)


def _record_payment(kind: str, outcome: str, start_time: float) -> None:
    payment_requests_total.labels(kind=kind, status=outcome).inc()
    elapsed = time.perf_counter() - start_time
    payment_request_duration_seconds.labels(kind=kind, status=outcome).observe(elapsed)


@router.post(
    "",
    response_model=ChannelResponseDTO,
    status_code=status.HTTP_201_CREATED,
)
async def open_channel(
    payload: OpenChannelDTO,
    ledger: ChannelLedger = Depends(get_channel_ledger),
    wallet: WalletProtocol | None = Depends(get_wallet),
) -> ChannelResponseDTO:
    """Open a channel from the payer (default: the local wallet) to a payee."""
    payer_address = payload.payer_address or (wallet.address if wallet else None)
    if not payer_address:
        channel_lifecycle_total.labels(operation="open", status="client_error").inc()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="payer_address is required when no wallet is configured",
        )
    try:
        channel = await ledger.open(
            payer_address, payload.payee_address, payload.initial_payer_balance
        )
    except ValueError as e:
        channel_lifecycle_total.labels(operation="open", status="client_error").inc()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    channel_lifecycle_total.labels(operation="open", status="success").inc()
    return ChannelResponseDTO(**channel.model_dump())


@router.get("", response_model=ChannelListDTO)
async def list_channels(
    ledger: ChannelLedger = Depends(get_channel_ledger),
) -> ChannelListDTO:
    """List open channels, oldest first."""
    channels = await ledger.list_channels()
    items = [ChannelResponseDTO(**channel.model_dump()) for channel in channels]
    return ChannelListDTO(items=items, total=len(items))


@router.get("/{channel_id}", response_model=ChannelResponseDTO)
async def get_channel(
    channel_id: str = Path(..., description="Channel identifier"),
    ledger: ChannelLedger = Depends(get_channel_ledger),
) -> ChannelResponseDTO:
    try:
        channel = await ledger.get(channel_id)
    except ChannelNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return ChannelResponseDTO(**channel.model_dump())


@router.post(
    "/{channel_id}/payments",
    response_model=PaymentResult,
    status_code=status.HTTP_201_CREATED,
)
async def make_payment(
    payload: PaymentDTO,
    channel_id: str = Path(..., description="Channel identifier"),
    ledger: ChannelLedger = Depends(get_channel_ledger),
) -> PaymentResult:
    """Apply an instant off-chain payment in channel currency."""
    start_time = time.perf_counter()
    try:
        result = await ledger.pay(channel_id, payload.amount)
    except ChannelNotFoundError as e:
        _record_payment("channel", "not_found", start_time)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        _record_payment("channel", "client_error", start_time)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        _record_payment("channel", "server_error", start_time)
        logger.exception("Failed to process payment on channel %s", channel_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to process payment: {str(e)}",
        )
    _record_payment("channel", "success", start_time)
    return result


@router.post(
    "/{channel_id}/checkouts",
    response_model=CheckoutResult,
    status_code=status.HTTP_201_CREATED,
)
async def checkout(
    payload: CheckoutDTO,
    channel_id: str = Path(..., description="Channel identifier"),
    checkout_service: CheckoutService = Depends(get_checkout_service),
) -> CheckoutResult:
    """Pay a stable-currency amount at the current rate, grossed up for the burn."""
    start_time = time.perf_counter()
    try:
        result = await checkout_service.pay_stable_amount(
            channel_id, payload.stable_amount
        )
    except ChannelNotFoundError as e:
        _record_payment("stable", "not_found", start_time)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except NoRateAvailableError as e:
        _record_payment("stable", "unavailable", start_time)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)
        )
    except ValueError as e:
        _record_payment("stable", "client_error", start_time)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        _record_payment("stable", "server_error", start_time)
        logger.exception("Failed to process checkout on channel %s", channel_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to process payment: {str(e)}",
        )
    _record_payment("stable", "success", start_time)
    return result


@router.get("/{channel_id}/settlement-preview", response_model=SettlementResult)
async def preview_settlement(
    channel_id: str = Path(..., description="Channel identifier"),
    ledger: ChannelLedger = Depends(get_channel_ledger),
) -> SettlementResult:
    """Show the burn and settled amounts a close would produce now."""
    try:
        return await ledger.preview_settlement(channel_id)
    except ChannelNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post("/{channel_id}/closure", response_model=SettlementResult)
async def close_channel(
    channel_id: str = Path(..., description="Channel identifier"),
    ledger: ChannelLedger = Depends(get_channel_ledger),
) -> SettlementResult:
    """Close the channel and return the numbers for the settlement broadcast."""
    try:
        result = await ledger.close(channel_id)
    except ChannelNotFoundError as e:
        channel_lifecycle_total.labels(operation="close", status="not_found").inc()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    channel_lifecycle_total.labels(operation="close", status="success").inc()
    return result
