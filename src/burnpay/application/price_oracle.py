"""Cached, multi-source exchange rate provider."""

from __future__ import annotations

import asyncio
import inspect
import logging
from datetime import datetime, timedelta
from types import TracebackType
from typing import Any, Awaitable, Callable, Optional, Sequence, Type, Union

from ..domain.entities import PriceQuote, utcnow
from ..domain.errors import NoRateAvailableError, SourceUnavailableError
from ..domain.price_source import PriceSource

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL = 15.0
DEFAULT_POLL_INTERVAL = 15.0
DEFAULT_SOURCE_TIMEOUT = 3.0

QuoteCallback = Callable[[PriceQuote], Union[None, Awaitable[Any]]]


class PriceOracle:
    """Serve the current rate from cache or from the first healthy source.

    Sources are tried in the order given; latency plays no part in the
    choice. A refresh that is already running is shared by every caller
    that arrives while it is in flight.
    """

    def __init__(
        self,
        sources: Sequence[PriceSource],
        *,
        cache_ttl: float = DEFAULT_CACHE_TTL,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        source_timeout: float = DEFAULT_SOURCE_TIMEOUT,
        clock: Callable[[], datetime] = utcnow,
    ):
        if not sources:
            raise ValueError("At least one price source is required")
        self.sources = list(sources)
        self.cache_ttl = timedelta(seconds=cache_ttl)
        self.poll_interval = poll_interval
        self.source_timeout = source_timeout
        self._clock = clock
        self._cache: Optional[PriceQuote] = None
        self._refresh_task: Optional[asyncio.Task[PriceQuote]] = None
        self._poll_task: Optional[asyncio.Task[None]] = None

    def peek(self) -> Optional[PriceQuote]:
        """Return the cached quote, fresh or not, without any upstream call."""
        return self._cache

    def is_fresh(self, quote: PriceQuote) -> bool:
        return self._clock() - quote.observed_at < self.cache_ttl

    async def get_rate(self) -> PriceQuote:
        """Return a fresh quote, refreshing from upstream when needed.

        Raises:
            NoRateAvailableError: If every source failed and nothing was ever cached.
        """
        cached = self._cache
        if cached is not None and self.is_fresh(cached):
            return cached

        task = self._refresh_task
        if task is None:
            task = asyncio.ensure_future(self._refresh())
            task.add_done_callback(self._refresh_done)
            self._refresh_task = task
        return await asyncio.shield(task)

    def _refresh_done(self, task: asyncio.Task[PriceQuote]) -> None:
        if self._refresh_task is task:
            self._refresh_task = None
        # Mark the outcome as retrieved even if every waiter was cancelled.
        if not task.cancelled():
            task.exception()

    async def _refresh(self) -> PriceQuote:
        for source in self.sources:
            try:
                value = await asyncio.wait_for(
                    source.fetch_price(), timeout=self.source_timeout
                )
            except asyncio.TimeoutError:
                logger.warning(
                    "Price source %s timed out after %.1fs",
                    source.name,
                    self.source_timeout,
                )
                continue
            except SourceUnavailableError as e:
                logger.warning("Price source %s unavailable: %s", source.name, e)
                continue

            if value <= 0:
                logger.warning(
                    "Price source %s returned non-positive price %s",
                    source.name,
                    value,
                )
                continue

            quote = PriceQuote(value=value, source=source.name, observed_at=self._clock())
            self._cache = quote
            logger.debug("Fetched price %s from %s", quote.value, quote.source)
            return quote

        if self._cache is not None:
            logger.warning(
                "All price sources failed; serving cached price %s from %s",
                self._cache.value,
                self._cache.source,
            )
            return self._cache
        raise NoRateAvailableError("All price sources failed and no price is cached")

    @property
    def is_polling(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    def start_polling(
        self, on_update: QuoteCallback, interval: Optional[float] = None
    ) -> None:
        """Refresh the rate now and then every ``interval`` seconds.

        Any loop started earlier is cancelled first. Must be called from a
        running event loop.
        """
        self.stop_polling()
        period = self.poll_interval if interval is None else interval
        if period <= 0:
            raise ValueError(f"Polling interval must be positive, got {period}")
        self._poll_task = asyncio.get_running_loop().create_task(
            self._poll(on_update, period)
        )

    def stop_polling(self) -> None:
        """Cancel the polling loop. Safe to call when not polling."""
        task = self._poll_task
        self._poll_task = None
        if task is not None and not task.done():
            task.cancel()

    async def _poll(self, on_update: QuoteCallback, interval: float) -> None:
        while True:
            try:
                quote = await self.get_rate()
                result = on_update(quote)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Price polling failed")
            await asyncio.sleep(interval)

    async def aclose(self) -> None:
        """Stop polling and release the sources' transports."""
        task = self._poll_task
        self.stop_polling()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass
        for source in self.sources:
            await source.aclose()

    async def __aenter__(self) -> "PriceOracle":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        await self.aclose()
