"""Data Transfer Objects for the HTTP layer."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from ..domain.entities import ChannelStatus


class OpenChannelDTO(BaseModel):
    """DTO for opening a channel."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "payee_address": "1MerchantAddrXXXXXXXXXXXXXXXXXXXXX",
                "initial_payer_balance": "10",
            }
        }
    )

    payer_address: Optional[str] = Field(
        None, description="Defaults to the local wallet's address"
    )
    payee_address: str = Field(..., min_length=1)
    initial_payer_balance: Decimal


class PaymentDTO(BaseModel):
    """DTO for a payment expressed in channel currency."""

    amount: Decimal


class CheckoutDTO(BaseModel):
    """DTO for a payment expressed in stable currency."""

    stable_amount: Decimal


class ChannelResponseDTO(BaseModel):
    """DTO for returning channel state."""

    id: str
    payer_address: str
    payee_address: str
    payer_balance: Decimal
    payee_balance: Decimal
    capacity: Decimal
    nonce: int
    status: ChannelStatus
    opened_at: datetime
    last_updated_at: datetime

    @field_serializer("opened_at", "last_updated_at")
    def serialize_timestamps(self, value: datetime) -> str:
        return value.isoformat()


class ChannelListDTO(BaseModel):
    items: list[ChannelResponseDTO]
    total: int
