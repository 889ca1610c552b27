"""Display formatting for prices and percentage changes."""


def format_price(price: float, decimals: int = 4) -> str:
    """Format a price with precision that depends on its magnitude.

    .. code-block:: python

        >>> format_price(0.00001234)
        '1.23e-05'
        >>> format_price(0.5)
        '0.5000'
        >>> format_price(12.5)
        '12.50'
        >>> format_price(1234567.8)
        '1,234,568'
    """
    if price == 0:
        return "0"
    if price < 0.0001:
        return f"{price:.2e}"
    if price < 1:
        return f"{price:.{decimals}f}"
    if price < 1000:
        return f"{price:.2f}"
    return f"{price:,.0f}"


def format_percentage_change(change: float) -> str:
    """Format a percentage change with an explicit sign, e.g. '+1.50%'."""
    sign = "+" if change >= 0 else ""
    return f"{sign}{change:.2f}%"
