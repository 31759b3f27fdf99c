"""Use case tests for CheckoutService with an in-memory ledger and scripted oracle."""

from __future__ import annotations

from decimal import Decimal

import pytest

from burnpay.application.channel_ledger import ChannelLedger
from burnpay.application.checkout import CheckoutService
from burnpay.application.price_oracle import PriceOracle
from burnpay.domain.errors import (
    ChannelNotFoundError,
    InsufficientBalanceError,
    InvalidAmountError,
    NoRateAvailableError,
)
from tests.fixtures import PAYEE, PAYER, MutableClock, failing_source


@pytest.fixture
def checkout(oracle: PriceOracle, ledger: ChannelLedger) -> CheckoutService:
    return CheckoutService(oracle, ledger)


@pytest.mark.asyncio
async def test_quote_uses_oracle_rate_and_ledger_burn(
    checkout: CheckoutService,
) -> None:
    quote, split = await checkout.quote(Decimal("100"))

    assert quote.value == Decimal("2")
    assert split.rate_used == quote.value
    assert split.burn_percentage == Decimal("0.02")
    assert split.merchant_channel_amount == Decimal("50")


@pytest.mark.asyncio
async def test_pays_gross_amount_on_channel(
    checkout: CheckoutService, ledger: ChannelLedger
) -> None:
    channel = await ledger.open(PAYER, PAYEE, Decimal("100"))

    result = await checkout.pay_stable_amount(channel.id, Decimal("100"))

    assert result.payment.amount == result.split.total_channel_amount
    assert result.payment.nonce == 1
    assert result.quote.source == "primary"
    stored = await ledger.get(channel.id)
    assert stored.payee_balance == result.split.total_channel_amount
    assert stored.capacity == Decimal("100")


@pytest.mark.asyncio
async def test_close_after_checkout_nets_merchant_share(
    checkout: CheckoutService, ledger: ChannelLedger
) -> None:
    channel = await ledger.open(PAYER, PAYEE, Decimal("100"))
    result = await checkout.pay_stable_amount(channel.id, Decimal("100"))

    settlement = await ledger.close(channel.id)

    assert settlement.burn_amount == result.split.burn_amount
    assert settlement.settled_amount == result.split.merchant_channel_amount
    assert settlement.settled_amount * result.quote.value == Decimal("100")
    assert (
        settlement.burn_amount + settlement.settled_amount + settlement.payer_refund
        == Decimal("100")
    )


@pytest.mark.asyncio
async def test_no_rate_leaves_channel_untouched(
    ledger: ChannelLedger, clock: MutableClock
) -> None:
    oracle = PriceOracle([failing_source("down")], clock=clock)
    checkout = CheckoutService(oracle, ledger)
    channel = await ledger.open(PAYER, PAYEE, Decimal("10"))

    with pytest.raises(NoRateAvailableError):
        await checkout.pay_stable_amount(channel.id, Decimal("5"))

    stored = await ledger.get(channel.id)
    assert stored.nonce == 0
    assert stored.payer_balance == Decimal("10")
    await oracle.aclose()


@pytest.mark.asyncio
async def test_insufficient_balance_rejects_checkout(
    checkout: CheckoutService, ledger: ChannelLedger
) -> None:
    channel = await ledger.open(PAYER, PAYEE, Decimal("10"))

    # 100 stable at rate 2 needs ~51 channel units.
    with pytest.raises(InsufficientBalanceError):
        await checkout.pay_stable_amount(channel.id, Decimal("100"))

    stored = await ledger.get(channel.id)
    assert stored.nonce == 0
    assert stored.payee_balance == 0


@pytest.mark.asyncio
async def test_unknown_channel(checkout: CheckoutService) -> None:
    with pytest.raises(ChannelNotFoundError):
        await checkout.pay_stable_amount("missing", Decimal("1"))


@pytest.mark.asyncio
async def test_invalid_stable_amount(
    checkout: CheckoutService, ledger: ChannelLedger
) -> None:
    channel = await ledger.open(PAYER, PAYEE, Decimal("10"))

    with pytest.raises(InvalidAmountError):
        await checkout.pay_stable_amount(channel.id, Decimal("-1"))
