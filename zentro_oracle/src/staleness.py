"""Staleness and validity predicates for quotes and price updates.

All functions are pure: the current time can be passed explicitly and is
only read from the clock when omitted.
"""

from __future__ import annotations

import math
import time
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .Quote import PriceUpdate

# 5 minutes
DEFAULT_MAX_AGE_MS = 300_000


def now_ms() -> int:
    """Return the current time in milliseconds since the epoch."""
    return int(time.time() * 1000)


def is_stale(
    timestamp: int, max_age: int = DEFAULT_MAX_AGE_MS, now: int | None = None
) -> bool:
    """Check whether a timestamp is older than max_age.

    An age exactly equal to max_age is not stale.

    :param timestamp: Observation time in ms since epoch.
    :param max_age: Maximum allowed age in ms.
    :param now: Current time in ms (defaults to the wall clock).
    :returns: True if now - timestamp > max_age.

    .. code-block:: python

        >>> is_stale(1_000, max_age=500, now=1_500)
        False
        >>> is_stale(1_000, max_age=500, now=1_501)
        True
    """
    if now is None:
        now = now_ms()
    return now - timestamp > max_age


def is_valid_update(
    update: PriceUpdate, now: int | None = None, max_age: int = DEFAULT_MAX_AGE_MS
) -> bool:
    """Check whether a price update can take part in aggregation.

    :param update: Raw price contribution.
    :param now: Current time in ms (defaults to the wall clock).
    :param max_age: Maximum allowed age in ms.
    :returns: True if the price is positive and finite and the update is not
        stale.
    """
    if now is None:
        now = now_ms()
    if not (update.price > 0 and math.isfinite(update.price)):
        return False
    return now - update.timestamp <= max_age
