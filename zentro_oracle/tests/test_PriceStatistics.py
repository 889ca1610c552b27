"""Unit tests for PriceStatistics and formatting helpers."""

import math

import pytest

from zentro_oracle.src.errors import InvalidPriceInput
from zentro_oracle.src.formatting import format_percentage_change, format_price
from zentro_oracle.src.PriceStatistics import (
    average,
    price_change,
    returns_from_prices,
    sharpe_ratio,
    volatility,
)


class TestAverage:
    """Test average()."""

    def test_empty(self) -> None:
        """Empty input should average to 0."""
        assert average([]) == 0.0

    def test_mean(self) -> None:
        """Should return the arithmetic mean."""
        assert average([1.0, 2.0, 3.0, 4.0]) == 2.5


class TestVolatility:
    """Test volatility()."""

    def test_constant_series(self) -> None:
        """A constant series has no volatility."""
        assert volatility([5, 5, 5]) == 0.0
        assert volatility([0.1, 0.1, 0.1]) == 0.0

    def test_short_series(self) -> None:
        """Fewer than two prices should give 0."""
        assert volatility([]) == 0.0
        assert volatility([42.0]) == 0.0

    def test_population_stddev(self) -> None:
        """Should divide by n, not n - 1."""
        assert volatility([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx(2.0)


class TestSharpeRatio:
    """Test sharpe_ratio()."""

    def test_empty(self) -> None:
        """Empty returns should give 0 for any rate."""
        assert sharpe_ratio([]) == 0.0
        assert sharpe_ratio([], 0.5) == 0.0

    def test_zero_stddev(self) -> None:
        """Identical returns should give 0 instead of dividing by zero."""
        assert sharpe_ratio([0.05, 0.05, 0.05]) == 0.0
        assert sharpe_ratio([0.1, 0.1, 0.1]) == 0.0
        assert sharpe_ratio([0.1, 0.1, 0.1], risk_free_rate=0.0) == 0.0

    def test_value(self) -> None:
        """Should be (mean - rf) / population stddev."""
        returns = [0.1, 0.2, 0.3]
        stddev = math.sqrt(((0.1 - 0.2) ** 2 + 0 + (0.3 - 0.2) ** 2) / 3)

        assert sharpe_ratio(returns) == pytest.approx((0.2 - 0.02) / stddev)
        assert sharpe_ratio(returns, risk_free_rate=0.0) == pytest.approx(0.2 / stddev)


class TestPriceChange:
    """Test price_change() and returns_from_prices()."""

    def test_change(self) -> None:
        """Should report absolute and percent change."""
        result = price_change(110.0, 100.0)
        assert result.change == pytest.approx(10.0)
        assert result.percentage == pytest.approx(10.0)

    def test_zero_previous(self) -> None:
        """Zero previous price should raise InvalidPriceInput."""
        with pytest.raises(InvalidPriceInput):
            price_change(1.0, 0.0)

    def test_returns(self) -> None:
        """Simple returns should be computed per period."""
        assert returns_from_prices([100.0, 110.0, 99.0]) == pytest.approx([0.1, -0.1])

    def test_returns_skip_zero(self) -> None:
        """Periods starting at 0 should be skipped."""
        assert returns_from_prices([0.0, 1.0, 2.0]) == pytest.approx([1.0])
        assert returns_from_prices([5.0]) == []


class TestFormatting:
    """Test format_price() and format_percentage_change()."""

    @pytest.mark.parametrize(
        ("price", "expected"),
        [
            (0, "0"),
            (0.00001234, "1.23e-05"),
            (0.5, "0.5000"),
            (12.5, "12.50"),
            (999.99, "999.99"),
            (1234567.8, "1,234,568"),
        ],
    )
    def test_format_price(self, price: float, expected: str) -> None:
        """Precision should follow the price magnitude."""
        assert format_price(price) == expected

    def test_format_price_decimals(self) -> None:
        """decimals should apply below 1."""
        assert format_price(0.123456, decimals=2) == "0.12"

    def test_format_percentage_change(self) -> None:
        """Positive changes should carry a plus sign."""
        assert format_percentage_change(1.5) == "+1.50%"
        assert format_percentage_change(0) == "+0.00%"
        assert format_percentage_change(-2.5) == "-2.50%"
