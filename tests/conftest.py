"""Shared pytest fixtures for ledger, oracle and API tests."""

from __future__ import annotations

from decimal import Decimal
from typing import AsyncGenerator

import pytest
import pytest_asyncio

from burnpay.application.channel_ledger import ChannelLedger
from burnpay.application.price_oracle import PriceOracle
from tests.fixtures import BURN_ADDRESS, MutableClock, ScriptedPriceSource


@pytest.fixture
def clock() -> MutableClock:
    """A clock that only moves when a test advances it."""
    return MutableClock()


@pytest.fixture
def ledger(clock: MutableClock) -> ChannelLedger:
    """Ledger with a 2% burn and a minimum channel balance of 1."""
    return ChannelLedger(
        Decimal("0.02"),
        Decimal("1"),
        burn_address=BURN_ADDRESS,
        settlement_fee=Decimal("0.0001"),
        clock=clock,
    )


@pytest.fixture
def primary_source() -> ScriptedPriceSource:
    return ScriptedPriceSource("primary", Decimal("2"))


@pytest_asyncio.fixture
async def oracle(
    primary_source: ScriptedPriceSource, clock: MutableClock
) -> AsyncGenerator[PriceOracle, None]:
    """Oracle backed by a single healthy source quoting 2 stable per unit."""
    oracle = PriceOracle([primary_source], cache_ttl=15, clock=clock)
    yield oracle
    await oracle.aclose()
