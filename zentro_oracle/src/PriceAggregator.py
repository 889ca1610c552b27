"""PriceAggregator: Equal-weight mean aggregation with a dispersion-based confidence.

Algorithm:
    1. Filter updates through the validity checker (positive price, not stale),
       keeping input order
    2. Fail with NoValidSources if nothing survives
    3. Average the surviving prices, every update weighted once
    4. Compute the population standard deviation around that average
    5. confidence = max(0, 1 - stddev / average)
    6. Return an active Quote stamped with the aggregation time

Updates are not de-duplicated by source: a source that submits twice counts
twice.

.. code-block:: python

    >>> aggregator = PriceAggregator()
    >>> updates = [
    ...     PriceUpdate("SOL", 100.0, 1_000, "pyth"),
    ...     PriceUpdate("SOL", 102.0, 1_000, "switchboard"),
    ... ]
    >>> quote = aggregator.aggregate(updates, now=2_000)
    >>> quote.price
    101.0
    >>> round(quote.confidence, 4)
    0.9901
"""

from __future__ import annotations

import logging
from statistics import fmean, pstdev
from typing import Iterable

from .errors import NoValidSources
from .Quote import PriceUpdate, Quote, QuoteStatus
from .staleness import DEFAULT_MAX_AGE_MS, is_valid_update, now_ms

logger = logging.getLogger(__name__)


class PriceAggregator:
    """Aggregates raw price updates into a single Quote.

    :ivar max_age_ms: Maximum update age accepted by the validity filter.
    """

    def __init__(self, max_age_ms: int = DEFAULT_MAX_AGE_MS) -> None:
        """Initialize the aggregator.

        :param max_age_ms: Updates older than this (in ms) are dropped.
        :raises ValueError: If max_age_ms is negative.
        """
        if max_age_ms < 0:
            raise ValueError("max_age_ms must not be negative")
        self.max_age_ms = max_age_ms

    def filter_valid(
        self, updates: Iterable[PriceUpdate], now: int
    ) -> list[PriceUpdate]:
        """Return the updates that pass the validity check, in input order."""
        return [u for u in updates if is_valid_update(u, now=now, max_age=self.max_age_ms)]

    def aggregate(
        self, updates: Iterable[PriceUpdate], now: int | None = None
    ) -> Quote:
        """Aggregate price updates into one Quote.

        :param updates: Raw price contributions.
        :param now: Aggregation time in ms (defaults to the wall clock).
        :returns: Active quote with the mean price and derived confidence.
        :raises NoValidSources: If no update passes the validity check.
        """
        if now is None:
            now = now_ms()

        updates = list(updates)
        valid = self.filter_valid(updates, now)

        if not valid:
            raise NoValidSources(len(updates))

        dropped = len(updates) - len(valid)
        if dropped:
            logger.debug(f"Dropped {dropped}/{len(updates)} invalid or stale updates")

        count = len(valid)
        prices = [u.price for u in valid]
        average_price = fmean(prices)
        stddev = pstdev(prices)

        # average_price > 0 after filtering; guarded anyway
        if average_price == 0:
            confidence = 0.0
        else:
            confidence = max(0.0, 1.0 - stddev / average_price)

        logger.debug(
            f"Aggregated {count} updates: price={average_price:.6f}, "
            f"confidence={confidence:.4f}, "
            f"sources=[{', '.join(u.source for u in valid)}]"
        )

        return Quote(
            price=average_price,
            timestamp=now,
            confidence=confidence,
            status=QuoteStatus.ACTIVE,
        )


_default_aggregator = PriceAggregator()


def aggregate(updates: Iterable[PriceUpdate], now: int | None = None) -> Quote:
    """Aggregate with the default 5 minute validity window.

    :param updates: Raw price contributions.
    :param now: Aggregation time in ms (defaults to the wall clock).
    :returns: Aggregated quote.
    :raises NoValidSources: If no update passes the validity check.
    """
    return _default_aggregator.aggregate(updates, now=now)
