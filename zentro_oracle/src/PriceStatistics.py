"""Return and risk statistics over price series.

Empty or degenerate input yields a neutral 0 instead of an error. Dispersion
is computed with the statistics module, which sums exactly, so a constant
series has a standard deviation of exactly 0.
"""

from __future__ import annotations

from dataclasses import dataclass
from statistics import fmean, pstdev
from typing import Sequence

from .errors import InvalidPriceInput

DEFAULT_RISK_FREE_RATE = 0.02


@dataclass(frozen=True)
class PriceChange:
    """Absolute and percentage change between two prices."""

    change: float
    percentage: float


def average(prices: Sequence[float]) -> float:
    """Arithmetic mean, 0 for an empty sequence."""
    if not prices:
        return 0.0
    return fmean(prices)


def volatility(prices: Sequence[float]) -> float:
    """Population standard deviation, 0 for fewer than two prices."""
    if len(prices) < 2:
        return 0.0
    return pstdev(prices)


def sharpe_ratio(
    returns: Sequence[float], risk_free_rate: float = DEFAULT_RISK_FREE_RATE
) -> float:
    """Excess mean return per unit of standard deviation.

    :param returns: Period returns.
    :param risk_free_rate: Return of the risk-free benchmark (default: 0.02).
    :returns: (mean - risk_free_rate) / stddev, or 0 if returns is empty or
        has zero standard deviation.
    """
    if not returns:
        return 0.0
    stddev = pstdev(returns)
    if stddev == 0:
        return 0.0
    return (fmean(returns) - risk_free_rate) / stddev


def price_change(current: float, previous: float) -> PriceChange:
    """Change from previous to current, absolute and in percent.

    :raises InvalidPriceInput: If previous is 0.
    """
    if previous == 0:
        raise InvalidPriceInput("previous price must not be 0")
    change = current - previous
    return PriceChange(change=change, percentage=change / previous * 100)


def returns_from_prices(prices: Sequence[float]) -> list[float]:
    """Simple period returns of a price series.

    Periods starting from a zero price are skipped.
    """
    return [
        (current - previous) / previous
        for previous, current in zip(prices, prices[1:])
        if previous != 0
    ]
