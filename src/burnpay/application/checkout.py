"""Use case: charge a stable-currency amount through a channel."""

from __future__ import annotations

import logging

from ..domain.amounts import Numeric
from ..domain.entities import CheckoutResult, PaymentSplit, PriceQuote
from .channel_ledger import ChannelLedger
from .fee_split import compute_split
from .price_oracle import PriceOracle

logger = logging.getLogger(__name__)


class CheckoutService:
    """Quote with the oracle, gross up with the fee split, pay on the ledger."""

    def __init__(self, oracle: PriceOracle, ledger: ChannelLedger):
        self.oracle = oracle
        self.ledger = ledger

    async def quote(
        self, target_stable_amount: Numeric
    ) -> tuple[PriceQuote, PaymentSplit]:
        """Price ``target_stable_amount`` at the current rate."""
        quote = await self.oracle.get_rate()
        split = compute_split(
            target_stable_amount, quote.value, self.ledger.burn_percentage
        )
        return quote, split

    async def pay_stable_amount(
        self, channel_id: str, target_stable_amount: Numeric
    ) -> CheckoutResult:
        """Pay the gross channel amount that nets the merchant the target.

        The payee is credited the full ``total_channel_amount``; the burn
        shown in the split is taken when the channel is closed.
        """
        quote, split = await self.quote(target_stable_amount)
        payment = await self.ledger.pay(channel_id, split.total_channel_amount)
        logger.info(
            "Checkout on channel %s: %s stable at %s (%s) -> %s channel units",
            channel_id,
            split.target_stable_amount,
            quote.value,
            quote.source,
            split.total_channel_amount,
        )
        return CheckoutResult(quote=quote, split=split, payment=payment)
