"""Domain entities: Channel, PriceQuote and the computed payment records."""

from __future__ import annotations

import secrets
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, computed_field, field_serializer

from .amounts import amount_context
from .errors import InsufficientBalanceError


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_channel_id() -> str:
    """Return a fresh 128-bit random channel id, hex-encoded."""
    return secrets.token_hex(16)


class ChannelStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class Channel(BaseModel):
    """Bilateral payer -> payee channel held by the ledger."""

    id: str = Field(default_factory=new_channel_id)
    payer_address: str = Field(..., min_length=1, frozen=True)
    payee_address: str = Field(..., min_length=1, frozen=True)
    payer_balance: Decimal = Field(..., ge=0)
    payee_balance: Decimal = Field(default=Decimal(0), ge=0)
    nonce: int = Field(default=0, ge=0)
    status: ChannelStatus = ChannelStatus.OPEN
    opened_at: datetime = Field(default_factory=utcnow)
    last_updated_at: datetime = Field(default_factory=utcnow)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def capacity(self) -> Decimal:
        """Total value locked in the channel; constant across payments."""
        with amount_context():
            return self.payer_balance + self.payee_balance

    @property
    def is_open(self) -> bool:
        return self.status is ChannelStatus.OPEN

    @field_serializer("opened_at", "last_updated_at")
    def serialize_timestamps(self, value: datetime) -> str:
        return value.isoformat()

    def apply_payment(self, amount: Decimal, now: Optional[datetime] = None) -> None:
        """Move ``amount`` from the payer side to the payee side."""
        if amount > self.payer_balance:
            raise InsufficientBalanceError(
                f"Insufficient channel balance: {amount} requested, "
                f"{self.payer_balance} available"
            )
        with amount_context():
            self.payer_balance = self.payer_balance - amount
            self.payee_balance = self.payee_balance + amount
        self.nonce += 1
        self.last_updated_at = now or utcnow()

    def mark_closed(self, now: Optional[datetime] = None) -> None:
        self.status = ChannelStatus.CLOSED
        self.last_updated_at = now or utcnow()


class PriceQuote(BaseModel):
    """Exchange rate in stable units per one channel unit."""

    value: Decimal = Field(..., gt=0)
    source: str
    observed_at: datetime = Field(default_factory=utcnow)

    @field_serializer("observed_at")
    def serialize_observed_at(self, value: datetime) -> str:
        return value.isoformat()

    def age_seconds(self, now: datetime) -> float:
        return (now - self.observed_at).total_seconds()


class PaymentSplit(BaseModel):
    """Gross-up of a stable-currency target into channel-currency amounts."""

    target_stable_amount: Decimal
    base_channel_amount: Decimal
    total_channel_amount: Decimal
    burn_amount: Decimal
    merchant_channel_amount: Decimal
    merchant_stable_amount: Decimal
    rate_used: Decimal
    burn_percentage: Decimal


class PaymentResult(BaseModel):
    channel_id: str
    amount: Decimal
    nonce: int
    new_balance: Decimal
    payee_balance: Decimal
    instant: bool = True


class SettlementResult(BaseModel):
    """Numbers a wallet needs to broadcast the settlement of a channel."""

    channel_id: str
    burn_amount: Decimal
    settled_amount: Decimal
    payer_refund: Decimal
    burn_address: Optional[str] = None
    settlement_fee: Decimal = Decimal(0)
    nonce: int
    closed_at: Optional[datetime] = None

    @field_serializer("closed_at")
    def serialize_closed_at(self, value: Optional[datetime]) -> Optional[str]:
        return value.isoformat() if value else None


class CheckoutResult(BaseModel):
    """A stable-currency payment applied to a channel at a quoted rate."""

    quote: PriceQuote
    split: PaymentSplit
    payment: PaymentResult
