"""Quote and PriceUpdate value types.

A Quote is a single timestamped, confidence-scored price observation. It is
produced either by decoding an oracle account or by aggregating several
PriceUpdate contributions, and is immutable once constructed.

.. code-block:: python

    >>> quote = Quote(price=101.5, timestamp=1_700_000_000_000, confidence=0.98)
    >>> quote.status
    <QuoteStatus.ACTIVE: 'active'>
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from .staleness import DEFAULT_MAX_AGE_MS, is_stale


class QuoteStatus(str, Enum):
    """Status reported for a quote."""

    INACTIVE = "inactive"
    ACTIVE = "active"
    STALE = "stale"


@dataclass(frozen=True)
class Quote:
    """A price observation.

    :ivar price: Price, never negative.
    :ivar timestamp: Observation time in ms since epoch.
    :ivar confidence: Confidence figure in [0, 1].
    :ivar status: Reported status of the source.
    """

    price: float
    timestamp: int
    confidence: float
    status: QuoteStatus = QuoteStatus.ACTIVE

    def __post_init__(self) -> None:
        if math.isnan(self.price) or math.isinf(self.price) or self.price < 0:
            raise ValueError(f"Quote price must be finite and >= 0, got {self.price}")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(
                f"Quote confidence must be within [0, 1], got {self.confidence}"
            )

    def is_stale(self, max_age: int = DEFAULT_MAX_AGE_MS, now: int | None = None) -> bool:
        """Check whether this quote is older than max_age ms."""
        return is_stale(self.timestamp, max_age=max_age, now=now)


@dataclass(frozen=True)
class PriceUpdate:
    """One raw price contribution from a named source.

    Not validated on construction; see staleness.is_valid_update().

    :ivar symbol: Asset symbol the price refers to.
    :ivar price: Reported price.
    :ivar timestamp: Report time in ms since epoch.
    :ivar source: Name of the reporting source.
    """

    symbol: str
    price: float
    timestamp: int
    source: str
