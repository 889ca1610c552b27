"""OracleFeed: Polling lifecycle and push notifications for one oracle account.

This module handles, for a single bound account:
- Confirming the account exists before polling starts
- Reading and decoding the account on a fixed interval
- Fanning each fresh quote out to registered subscribers
- Aggregating externally supplied price updates on demand
- Serving historical quote series

Lifecycle::

    UNINITIALIZED --initialize()--> POLLING --destroy()--> DESTROYED

A failed tick (missing account, bad data, reader error) is logged and
reported through TickResult, failed_ticks and the on_tick_failed hook. It
never stops polling; the next attempt is the next scheduled tick.

.. code-block:: python

    feed = OracleFeed(RpcAccountReader(rpc_url), address, update_interval_ms=10_000)
    await feed.initialize()
    feed.subscribe("ui", lambda quote: print(quote.price))
    ...
    await feed.close()
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Iterable, Iterator

from .errors import OracleAccountNotFound
from .PriceAggregator import PriceAggregator
from .PriceSourceReader import PriceSourceReader
from .Quote import PriceUpdate, Quote, QuoteStatus

if TYPE_CHECKING:
    from .readers import AccountReader

logger = logging.getLogger(__name__)

DEFAULT_UPDATE_INTERVAL_MS = 30_000
DEFAULT_HISTORY_STEP_SECONDS = 3600

QuoteCallback = Callable[[Quote], None]
HistorySource = Callable[[int], Quote]


class FeedState(str, Enum):
    """Lifecycle state of an OracleFeed."""

    UNINITIALIZED = "uninitialized"
    POLLING = "polling"
    DESTROYED = "destroyed"


@dataclass(frozen=True)
class TickResult:
    """Outcome of one polling tick.

    :ivar quote: Quote read during the tick, if the read succeeded.
    :ivar error: Exception that failed the tick, if any.
    :ivar notified: Number of callbacks invoked.
    :ivar callback_errors: Number of callbacks that raised.
    :ivar skipped: True if the feed was cancelled and nothing was dispatched.
    """

    quote: Quote | None = None
    error: Exception | None = None
    notified: int = 0
    callback_errors: int = 0
    skipped: bool = False

    @property
    def success(self) -> bool:
        """Check if the tick read a quote and dispatched it."""
        return self.quote is not None and self.error is None and not self.skipped


def synthetic_history_source(timestamp: int) -> Quote:
    """Synthesize a quote for a timestamp.

    The price is drawn from [50, 150) with a generator seeded by the
    timestamp, so the same timestamp always yields the same quote.
    """
    rng = random.Random(timestamp)
    return Quote(
        price=rng.random() * 100 + 50,
        timestamp=timestamp,
        confidence=0.95,
        status=QuoteStatus.ACTIVE,
    )


class HistoricalPriceSeries:
    """Lazy, finite and restartable sequence of historical quotes.

    Quotes are produced at start, start + step, ... up to and including end.
    Each iteration starts over and queries the backing source again.

    :ivar start: First timestamp in ms.
    :ivar end: Last allowed timestamp in ms (inclusive).
    :ivar step_ms: Spacing between quotes in ms.
    """

    def __init__(
        self,
        start: int,
        end: int,
        step_seconds: float,
        source: HistorySource = synthetic_history_source,
    ) -> None:
        step_ms = int(step_seconds * 1000)
        if step_ms <= 0:
            raise ValueError("step_seconds must be positive")
        self.start = int(start)
        self.end = int(end)
        self.step_ms = step_ms
        self.source = source

    def timestamps(self) -> range:
        """Timestamps covered by the series (empty if end < start)."""
        return range(self.start, self.end + 1, self.step_ms)

    def __iter__(self) -> Iterator[Quote]:
        for timestamp in self.timestamps():
            yield self.source(timestamp)

    def __len__(self) -> int:
        return len(self.timestamps())

    def __repr__(self) -> str:
        return (
            f"HistoricalPriceSeries(start={self.start}, end={self.end}, "
            f"step_ms={self.step_ms})"
        )


class OracleFeed:
    """Price feed bound to one oracle account.

    Owns its subscriber registry and its polling task; both are released
    together by destroy(). Everything runs on the event loop thread, so the
    registry needs no lock.

    :ivar address: Bound oracle account address.
    :ivar update_interval_ms: Polling interval in ms.
    :ivar source_reader: Reader/decoder for the bound account.
    :ivar aggregator: Aggregator used by publish_updates().
    :ivar history_source: Backing source for get_historical_prices().
    :ivar on_tick_failed: Optional hook invoked with the error of a failed tick.
    :ivar failed_ticks: Number of ticks that failed so far.
    :ivar last_error: Error of the most recent failed tick.
    :ivar last_quote: Most recently dispatched quote.
    """

    def __init__(
        self,
        account_reader: AccountReader,
        address: str,
        update_interval_ms: int = DEFAULT_UPDATE_INTERVAL_MS,
        *,
        aggregator: PriceAggregator | None = None,
        history_source: HistorySource | None = None,
        on_tick_failed: Callable[[Exception], None] | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> None:
        """Initialize the feed.

        :param account_reader: Ledger collaborator used for account reads.
        :param address: Oracle account address to bind to.
        :param update_interval_ms: Polling interval in ms (default: 30000).
        :param aggregator: Aggregator for external updates (default: 5 min window).
        :param history_source: Callable mapping a timestamp to a Quote
            (default: synthetic_history_source).
        :param on_tick_failed: Called with the exception of each failed tick.
        :param cancel_event: Cancellation token. Setting it stops polling and
            makes later ticks no-ops; destroy() sets it too. A fresh event is
            created when omitted.
        :raises ValueError: If update_interval_ms is not positive.
        """
        if update_interval_ms <= 0:
            raise ValueError("update_interval_ms must be positive")

        self.address = address
        self.update_interval_ms = update_interval_ms
        self.source_reader = PriceSourceReader(account_reader)
        self.aggregator = aggregator or PriceAggregator()
        self.history_source = history_source or synthetic_history_source
        self.on_tick_failed = on_tick_failed

        self.failed_ticks = 0
        self.last_error: Exception | None = None
        self.last_quote: Quote | None = None

        self._subscribers: dict[str, QuoteCallback] = {}
        self._cancelled = cancel_event if cancel_event is not None else asyncio.Event()
        self._task: asyncio.Task | None = None
        self._state = FeedState.UNINITIALIZED

    @property
    def state(self) -> FeedState:
        """Current lifecycle state."""
        return self._state

    @property
    def subscriber_count(self) -> int:
        """Number of registered subscribers."""
        return len(self._subscribers)

    async def initialize(self, *, immediate: bool = False) -> None:
        """Confirm the bound account exists and start polling.

        :param immediate: Run the first tick right away instead of one
            interval after start. Subscribers registered before the caller
            next yields to the event loop receive it.
        :raises OracleAccountNotFound: If the account is absent; the feed
            stays UNINITIALIZED.
        :raises RuntimeError: If the feed is not UNINITIALIZED.
        """
        if self._state is not FeedState.UNINITIALIZED:
            raise RuntimeError(f"Cannot initialize feed in state {self._state.value}")

        if not await self.source_reader.account_exists(self.address):
            raise OracleAccountNotFound(self.address)

        self._state = FeedState.POLLING
        self._task = asyncio.create_task(
            self._poll_loop(immediate), name=f"oracle-feed:{self.address}"
        )
        logger.info(
            f"OracleFeed initialized for {self.address} "
            f"(interval={self.update_interval_ms}ms)"
        )

    async def get_current_price(self) -> Quote:
        """Read the bound account now, bypassing the timer.

        :returns: Decoded quote.
        :raises AccountNotFound: If the account is absent.
        :raises DecodeError: If the account data is malformed.
        :raises ReaderError: If the ledger read fails.
        """
        return await self.source_reader.read_quote(self.address)

    def subscribe(self, subscriber_id: str, callback: QuoteCallback) -> None:
        """Register (or replace) the callback stored under subscriber_id.

        A replaced callback keeps its original notification position.
        No-op once the feed is destroyed.
        """
        if self._state is FeedState.DESTROYED:
            logger.debug(f"[{self.address}] Ignoring subscribe({subscriber_id!r}) on destroyed feed")
            return
        self._subscribers[subscriber_id] = callback

    def unsubscribe(self, subscriber_id: str) -> None:
        """Remove the callback stored under subscriber_id, if any."""
        self._subscribers.pop(subscriber_id, None)

    async def tick(self) -> TickResult:
        """Run one polling step: read, decode and notify.

        Read and decode failures are logged and reported in the result;
        they are never raised.

        :returns: Outcome of the tick.
        """
        if self._state is FeedState.DESTROYED or self._cancelled.is_set():
            return TickResult(skipped=True)

        try:
            quote = await self.get_current_price()
        except Exception as e:
            self._record_failure(e)
            return TickResult(error=e)

        # destroy() may have run while the read was suspended
        if self._cancelled.is_set():
            logger.debug(f"[{self.address}] Feed cancelled during read, dropping quote")
            return TickResult(quote=quote, skipped=True)

        self.last_quote = quote
        notified, errors = self._notify(quote)
        logger.debug(
            f"[{self.address}] Tick price={quote.price} "
            f"confidence={quote.confidence:.4f} notified={notified}"
        )
        return TickResult(quote=quote, notified=notified, callback_errors=errors)

    def publish_updates(
        self, updates: Iterable[PriceUpdate], now: int | None = None
    ) -> Quote:
        """Aggregate external price updates and push the result to subscribers.

        :param updates: Raw price contributions.
        :param now: Aggregation time in ms (defaults to the wall clock).
        :returns: Aggregated quote.
        :raises NoValidSources: If no update passes the validity check.
        """
        quote = self.aggregator.aggregate(updates, now=now)
        if self._state is not FeedState.DESTROYED:
            self.last_quote = quote
            self._notify(quote)
        return quote

    def get_historical_prices(
        self,
        start: int,
        end: int,
        step_seconds: float = DEFAULT_HISTORY_STEP_SECONDS,
    ) -> HistoricalPriceSeries:
        """Get quotes between start and end (inclusive, ms) at step_seconds resolution.

        :param start: First timestamp in ms.
        :param end: Last timestamp in ms.
        :param step_seconds: Spacing in seconds (default: 3600).
        :returns: Lazy, restartable series backed by history_source.
        :raises ValueError: If step_seconds is not positive.
        """
        return HistoricalPriceSeries(start, end, step_seconds, self.history_source)

    def destroy(self) -> None:
        """Stop polling and drop all subscribers.

        Safe to call from inside a subscriber callback: the current
        notification pass finishes, no later tick dispatches anything.
        """
        if self._state is FeedState.DESTROYED:
            return

        self._cancelled.set()
        task = self._task
        if task is not None and not task.done():
            try:
                current = asyncio.current_task()
            except RuntimeError:
                current = None
            if task is not current:
                task.cancel()

        self._subscribers.clear()
        self._state = FeedState.DESTROYED
        logger.info(f"OracleFeed for {self.address} destroyed")

    async def close(self) -> None:
        """Destroy the feed and wait for the polling task to finish."""
        task = self._task
        self.destroy()
        if task is None or task is asyncio.current_task():
            return
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _poll_loop(self, immediate: bool = False) -> None:
        """Fire tick() every update_interval_ms until cancelled.

        The schedule is fixed-rate; a tick that overruns its slot does not
        queue catch-up ticks. With immediate, the first tick fires at once.
        """
        loop = asyncio.get_running_loop()
        interval = self.update_interval_ms / 1000
        next_tick = loop.time() + (0.0 if immediate else interval)

        while not self._cancelled.is_set():
            delay = max(0.0, next_tick - loop.time())
            try:
                await asyncio.wait_for(self._cancelled.wait(), timeout=delay)
                break
            except asyncio.TimeoutError:
                pass

            await self.tick()

            next_tick += interval
            now = loop.time()
            if next_tick < now:
                next_tick = now

        logger.debug(f"[{self.address}] Polling stopped")

    def _notify(self, quote: Quote) -> tuple[int, int]:
        """Invoke every callback with quote, in registration order.

        Each callback is guarded separately so one failure cannot stop the
        rest of the pass.

        :returns: Tuple of (callbacks invoked, callbacks that raised).
        """
        notified = 0
        errors = 0
        for subscriber_id, callback in list(self._subscribers.items()):
            notified += 1
            try:
                callback(quote)
            except Exception:
                errors += 1
                logger.exception(
                    f"[{self.address}] Subscriber {subscriber_id!r} raised during notification"
                )
        return notified, errors

    def _record_failure(self, error: Exception) -> None:
        """Log a failed tick and report it to on_tick_failed."""
        self.failed_ticks += 1
        self.last_error = error
        logger.warning(f"[{self.address}] Price update failed: {error}")

        if self.on_tick_failed is None:
            return
        try:
            self.on_tick_failed(error)
        except Exception:
            logger.exception(f"[{self.address}] on_tick_failed hook raised")
