"""In-memory ledger of open payment channels.

The ledger is the only component that mutates a ``Channel``. Callers always
receive copies. Membership of the live set is guarded by a short-lived
registry lock; payments and closes are serialized per channel by a lock
owned by that channel, so unrelated channels never wait on each other.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional

from ..domain.amounts import Numeric, quantize, to_decimal
from ..domain.entities import (
    Channel,
    PaymentResult,
    SettlementResult,
    new_channel_id,
    utcnow,
)
from ..domain.errors import (
    BelowMinimumBalanceError,
    ChannelNotFoundError,
    InvalidAddressError,
    InvalidAmountError,
)
from .fee_split import compute_settlement, validate_burn_percentage

logger = logging.getLogger(__name__)


class ChannelLedger:
    """Owns the live set of channels and their open -> pay* -> close lifecycle."""

    def __init__(
        self,
        burn_percentage: Numeric,
        minimum_channel_balance: Numeric,
        *,
        burn_address: Optional[str] = None,
        settlement_fee: Numeric = 0,
        clock: Callable[[], datetime] = utcnow,
        id_factory: Callable[[], str] = new_channel_id,
    ):
        self.burn_percentage = validate_burn_percentage(burn_percentage)
        self.minimum_channel_balance = to_decimal(minimum_channel_balance)
        self.burn_address = burn_address
        self.settlement_fee = to_decimal(settlement_fee)
        self._clock = clock
        self._id_factory = id_factory
        self._channels: Dict[str, Channel] = {}
        self._channel_locks: Dict[str, asyncio.Lock] = {}
        self._registry_lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._channels)

    async def open(
        self,
        payer_address: str,
        payee_address: str,
        initial_payer_balance: Numeric,
    ) -> Channel:
        """Open a channel funded entirely by the payer."""
        if not payer_address:
            raise InvalidAddressError("Payer address is required")
        if not payee_address:
            raise InvalidAddressError("Payee address is required")
        balance = to_decimal(initial_payer_balance, InvalidAmountError)
        if balance < 0:
            raise InvalidAmountError(f"Initial balance must not be negative: {balance}")
        if balance < self.minimum_channel_balance:
            raise BelowMinimumBalanceError(
                f"Initial balance {balance} is below the minimum channel "
                f"balance of {self.minimum_channel_balance}"
            )
        balance = quantize(balance, InvalidAmountError)

        now = self._clock()
        async with self._registry_lock:
            channel_id = self._id_factory()
            while channel_id in self._channels:
                channel_id = self._id_factory()
            channel = Channel(
                id=channel_id,
                payer_address=payer_address,
                payee_address=payee_address,
                payer_balance=balance,
                opened_at=now,
                last_updated_at=now,
            )
            self._channels[channel_id] = channel
            self._channel_locks[channel_id] = asyncio.Lock()

        logger.info(
            "Opened channel %s: %s -> %s with %s",
            channel_id,
            payer_address,
            payee_address,
            channel.payer_balance,
        )
        return channel.model_copy(deep=True)

    async def pay(self, channel_id: str, amount: Numeric) -> PaymentResult:
        """Apply an off-chain payment of ``amount`` from payer to payee.

        The channel is looked up before the amount is validated, so an
        unknown channel is reported whatever the amount.

        Raises:
            ChannelNotFoundError: If no open channel has this id.
            InvalidAmountError: If ``amount`` is not positive or is too large.
            InsufficientBalanceError: If ``amount`` exceeds the payer balance.
        """
        lock = await self._lock_for(channel_id)
        value = to_decimal(amount, InvalidAmountError)
        if value <= 0:
            raise InvalidAmountError(f"Payment amount must be positive, got {value}")
        value = quantize(value, InvalidAmountError)
        if value == 0:
            raise InvalidAmountError(
                f"Payment amount {amount} rounds to zero at ledger precision"
            )

        async with lock:
            channel = self._live_channel(channel_id)
            channel.apply_payment(value, self._clock())
            result = PaymentResult(
                channel_id=channel.id,
                amount=value,
                nonce=channel.nonce,
                new_balance=channel.payer_balance,
                payee_balance=channel.payee_balance,
            )

        logger.debug(
            "Channel %s nonce %d: paid %s, payer balance %s",
            channel_id,
            result.nonce,
            value,
            result.new_balance,
        )
        return result

    async def close(self, channel_id: str) -> SettlementResult:
        """Settle a channel, burning a share of the payee side, and drop it."""
        lock = await self._lock_for(channel_id)
        async with lock:
            channel = self._live_channel(channel_id)
            now = self._clock()
            settlement = self._settle(channel, closed_at=now)
            channel.mark_closed(now)
            async with self._registry_lock:
                self._channels.pop(channel_id, None)
                self._channel_locks.pop(channel_id, None)

        logger.info(
            "Closed channel %s: settled %s, burned %s, refunded %s",
            channel_id,
            settlement.settled_amount,
            settlement.burn_amount,
            settlement.payer_refund,
        )
        return settlement

    async def preview_settlement(self, channel_id: str) -> SettlementResult:
        """Return what ``close`` would produce right now, without closing."""
        lock = await self._lock_for(channel_id)
        async with lock:
            channel = self._live_channel(channel_id)
            return self._settle(channel, closed_at=None)

    async def get(self, channel_id: str) -> Channel:
        async with self._registry_lock:
            channel = self._channels.get(channel_id)
            if channel is None:
                raise ChannelNotFoundError(f"Channel {channel_id} not found")
            return channel.model_copy(deep=True)

    async def list_channels(self) -> List[Channel]:
        async with self._registry_lock:
            channels = [c.model_copy(deep=True) for c in self._channels.values()]
        return sorted(channels, key=lambda c: c.opened_at)

    async def _lock_for(self, channel_id: str) -> asyncio.Lock:
        async with self._registry_lock:
            lock = self._channel_locks.get(channel_id)
        if lock is None:
            raise ChannelNotFoundError(f"Channel {channel_id} not found")
        return lock

    def _live_channel(self, channel_id: str) -> Channel:
        # Must be called with the channel lock held; a concurrent close may
        # have removed the channel while we were waiting for it.
        channel = self._channels.get(channel_id)
        if channel is None or not channel.is_open:
            raise ChannelNotFoundError(f"Channel {channel_id} not found")
        return channel

    def _settle(
        self, channel: Channel, closed_at: Optional[datetime]
    ) -> SettlementResult:
        burn_amount, settled_amount = compute_settlement(
            channel.payee_balance, self.burn_percentage
        )
        return SettlementResult(
            channel_id=channel.id,
            burn_amount=burn_amount,
            settled_amount=settled_amount,
            payer_refund=channel.payer_balance,
            burn_address=self.burn_address,
            settlement_fee=self.settlement_fee,
            nonce=channel.nonce,
            closed_at=closed_at,
        )
