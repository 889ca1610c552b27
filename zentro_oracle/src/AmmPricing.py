"""AmmPricing: Odds conversion, fees, price impact and share-based market pricing.

Every function here is pure and validates its input, raising a PricingError
subclass instead of returning a default. Compound results are frozen
dataclasses.

.. code-block:: python

    >>> trading_fees(1000).net_amount
    996.5
    >>> result = price_impact(trade_amount=100, liquidity=1000, current_price=0.5)
    >>> round(result.new_price, 4), round(result.price_impact, 4)
    (0.4545, 0.0909)
"""

from __future__ import annotations

from dataclasses import dataclass

from .errors import (
    InvalidAmount,
    InvalidLiquidity,
    InvalidOdds,
    InvalidPriceInput,
    InvalidProbability,
    InvalidTolerance,
)


@dataclass(frozen=True)
class PricingConfig:
    """Fee and slippage tunables.

    :ivar base_fee: Base fee rate.
    :ivar liquidity_fee: Fee rate paid to liquidity providers.
    :ivar protocol_fee: Fee rate kept by the protocol.
    :ivar max_slippage: Slippage ceiling used by is_slippage_acceptable().
    """

    base_fee: float = 0.001  # 0.1%
    liquidity_fee: float = 0.002  # 0.2%
    protocol_fee: float = 0.0005  # 0.05%
    max_slippage: float = 0.05  # 5%

    def __post_init__(self) -> None:
        for field_name in ("base_fee", "liquidity_fee", "protocol_fee", "max_slippage"):
            value = getattr(self, field_name)
            if not 0.0 <= value < 1.0:
                raise ValueError(f"{field_name} must be within [0, 1), got {value}")

    @property
    def total_fee_rate(self) -> float:
        """Sum of the three fee rates."""
        return self.base_fee + self.liquidity_fee + self.protocol_fee


DEFAULT_PRICING_CONFIG = PricingConfig()


@dataclass(frozen=True)
class MarketPricingParams:
    """Tunables for share-based market pricing.

    :ivar base_price: Yes price of a market with no shares or liquidity.
    :ivar volatility_factor: Price premium added at full share imbalance.
    :ivar liquidity_depth: Liquidity at which the liquidity factor peaks.
    """

    base_price: float = 0.5
    volatility_factor: float = 0.01
    liquidity_depth: float = 1_000_000.0

    def __post_init__(self) -> None:
        if not 0.0 <= self.base_price <= 1.0:
            raise ValueError(f"base_price must be within [0, 1], got {self.base_price}")
        if self.volatility_factor < 0:
            raise ValueError(
                f"volatility_factor must not be negative, got {self.volatility_factor}"
            )
        if self.liquidity_depth < 0:
            raise ValueError(
                f"liquidity_depth must not be negative, got {self.liquidity_depth}"
            )


DEFAULT_MARKET_PARAMS = MarketPricingParams()

# Slippage applied to orders against an empty pool
EMPTY_POOL_SLIPPAGE = 0.05
MAX_ORDER_SLIPPAGE = 0.10


@dataclass(frozen=True)
class MarketOdds:
    """Normalized yes/no prices of a binary market.

    :ivar yes: Normalized yes price.
    :ivar no: Normalized no price (yes + no == 1).
    :ivar implied_probability: Probability of the yes outcome.
    """

    yes: float
    no: float
    implied_probability: float


@dataclass(frozen=True)
class TradeFeeBreakdown:
    """Fees charged on a trade amount.

    :ivar base_fee: Base fee component.
    :ivar liquidity_fee: Liquidity provider component.
    :ivar protocol_fee: Protocol component.
    :ivar total_fees: Sum of the three components.
    :ivar net_amount: Amount left after fees.
    """

    base_fee: float
    liquidity_fee: float
    protocol_fee: float
    total_fees: float
    net_amount: float


@dataclass(frozen=True)
class PriceImpactResult:
    """Effect of a trade on a constant-product pool.

    :ivar price_impact: Relative price move caused by the trade.
    :ivar new_price: Pool price after the trade.
    :ivar slippage: Slippage, equal to price_impact in this model.
    """

    price_impact: float
    new_price: float
    slippage: float


def odds_from_prices(yes_price: float, no_price: float) -> MarketOdds:
    """Normalize yes/no token prices into market odds.

    :param yes_price: Price of the yes token.
    :param no_price: Price of the no token.
    :returns: Normalized odds; implied probability is the yes share.
    :raises InvalidPriceInput: If either price is negative or
        yes_price + no_price <= 0.
    """
    if yes_price < 0 or no_price < 0:
        raise InvalidPriceInput(
            f"prices must not be negative, got yes={yes_price}, no={no_price}"
        )
    total = yes_price + no_price
    if total <= 0:
        raise InvalidPriceInput(
            f"yes_price + no_price must be positive, got {yes_price} + {no_price}"
        )
    yes = yes_price / total
    no = no_price / total
    return MarketOdds(yes=yes, no=no, implied_probability=yes)


def probability_to_odds(probability: float) -> float:
    """Convert an implied probability to fractional odds (1 - p) / p.

    :raises InvalidProbability: If probability is outside (0, 1].
    """
    if probability <= 0 or probability > 1:
        raise InvalidProbability(f"probability must be within (0, 1], got {probability}")
    return (1 - probability) / probability


def odds_to_probability(odds: float) -> float:
    """Convert fractional odds to an implied probability 1 / (odds + 1).

    :raises InvalidOdds: If odds are negative.
    """
    if odds < 0:
        raise InvalidOdds(f"odds must not be negative, got {odds}")
    return 1 / (odds + 1)


def trading_fees(
    amount: float, config: PricingConfig = DEFAULT_PRICING_CONFIG
) -> TradeFeeBreakdown:
    """Break down the fees charged on amount.

    :param amount: Trade amount.
    :param config: Fee rates (default: DEFAULT_PRICING_CONFIG).
    :returns: Fee components and the net amount.
    :raises InvalidAmount: If amount is negative.
    """
    if amount < 0:
        raise InvalidAmount(f"amount must not be negative, got {amount}")

    base_fee = amount * config.base_fee
    liquidity_fee = amount * config.liquidity_fee
    protocol_fee = amount * config.protocol_fee
    total_fees = base_fee + liquidity_fee + protocol_fee

    return TradeFeeBreakdown(
        base_fee=base_fee,
        liquidity_fee=liquidity_fee,
        protocol_fee=protocol_fee,
        total_fees=total_fees,
        net_amount=amount - total_fees,
    )


def price_impact(
    trade_amount: float, liquidity: float, current_price: float
) -> PriceImpactResult:
    """Simulate a trade against a constant-product pool.

    With k = liquidity * current_price, the post-trade price is
    k / (liquidity + trade_amount).

    :param trade_amount: Amount added to the pool (negative removes).
    :param liquidity: Pool liquidity before the trade.
    :param current_price: Pool price before the trade.
    :returns: New price and the relative impact.
    :raises InvalidLiquidity: If liquidity or current_price is not positive.
    :raises InvalidAmount: If the trade would drain the pool.
    """
    if liquidity <= 0 or current_price <= 0:
        raise InvalidLiquidity(
            f"liquidity and current_price must be positive, "
            f"got liquidity={liquidity}, current_price={current_price}"
        )

    new_liquidity = liquidity + trade_amount
    if new_liquidity <= 0:
        raise InvalidAmount(
            f"trade_amount {trade_amount} exceeds pool liquidity {liquidity}"
        )

    k = liquidity * current_price
    new_price = k / new_liquidity
    impact = abs(new_price - current_price) / current_price

    return PriceImpactResult(price_impact=impact, new_price=new_price, slippage=impact)


def market_price(
    yes_shares: float,
    no_shares: float,
    total_liquidity: float,
    params: MarketPricingParams = DEFAULT_MARKET_PARAMS,
) -> float:
    """Yes price implied by the outstanding shares of a market.

    The yes share ratio is scaled by a liquidity factor that runs linearly
    from 0.8 (empty pool) to 1.2 (pool at liquidity_depth and beyond), then
    raised by volatility_factor times the relative share imbalance. The
    result is capped at 1.

    :param yes_shares: Outstanding yes shares.
    :param no_shares: Outstanding no shares.
    :param total_liquidity: Pool liquidity.
    :param params: Pricing tunables (default: DEFAULT_MARKET_PARAMS).
    :returns: Yes price in [0, 1]; params.base_price for an empty market.
    :raises InvalidAmount: If a share count is negative.
    :raises InvalidLiquidity: If total_liquidity is negative.
    """
    if yes_shares < 0 or no_shares < 0:
        raise InvalidAmount(
            f"share counts must not be negative, got yes={yes_shares}, no={no_shares}"
        )
    if total_liquidity < 0:
        raise InvalidLiquidity(f"total_liquidity must not be negative, got {total_liquidity}")

    total_shares = yes_shares + no_shares
    if total_liquidity == 0 or total_shares == 0:
        return params.base_price

    yes_probability = yes_shares / total_shares

    if params.liquidity_depth == 0:
        liquidity_factor = 1.0
    else:
        depth_ratio = total_liquidity / params.liquidity_depth
        liquidity_factor = min(1.2, 0.8 + 0.4 * depth_ratio)

    imbalance = abs(yes_shares - no_shares) / total_shares
    price = yes_probability * liquidity_factor + imbalance * params.volatility_factor
    return min(price, 1.0)


def slippage_rate(order_size: float, total_liquidity: float) -> float:
    """Slippage rate for an order, growing with the square of its pool share.

    :param order_size: Number of shares traded.
    :param total_liquidity: Pool liquidity.
    :returns: (order_size / total_liquidity) ** 2 capped at 10%, or 5% for
        an empty pool.
    """
    if total_liquidity <= 0:
        return EMPTY_POOL_SLIPPAGE
    return min((order_size / total_liquidity) ** 2, MAX_ORDER_SLIPPAGE)


def _check_side_order(price: float, shares: float) -> None:
    if not 0.0 <= price <= 1.0:
        raise InvalidPriceInput(f"price must be within [0, 1], got {price}")
    if shares < 0:
        raise InvalidAmount(f"shares must not be negative, got {shares}")


def buy_cost(
    price: float, shares: float, total_liquidity: float, is_yes_side: bool
) -> float:
    """Cost of buying shares on one side, slippage included.

    :param price: Current yes price in [0, 1].
    :param shares: Number of shares to buy.
    :param total_liquidity: Pool liquidity.
    :param is_yes_side: True to buy yes shares, False to buy no shares.
    :returns: Side price times shares, raised by slippage_rate().
    :raises InvalidPriceInput: If price is outside [0, 1].
    :raises InvalidAmount: If shares is negative.
    """
    _check_side_order(price, shares)
    if shares == 0:
        return 0.0
    side_price = price if is_yes_side else 1 - price
    base_cost = side_price * shares
    return base_cost * (1 + slippage_rate(shares, total_liquidity))


def sell_proceeds(
    price: float, shares: float, total_liquidity: float, is_yes_side: bool
) -> float:
    """Proceeds of selling shares on one side, net of slippage.

    :param price: Current yes price in [0, 1].
    :param shares: Number of shares to sell.
    :param total_liquidity: Pool liquidity.
    :param is_yes_side: True to sell yes shares, False to sell no shares.
    :returns: Side price times shares, reduced by slippage_rate().
    :raises InvalidPriceInput: If price is outside [0, 1].
    :raises InvalidAmount: If shares is negative.
    """
    _check_side_order(price, shares)
    if shares == 0:
        return 0.0
    side_price = price if is_yes_side else 1 - price
    base_value = side_price * shares
    return base_value * (1 - slippage_rate(shares, total_liquidity))


def _check_tolerance(tolerance: float) -> None:
    if not 0.0 <= tolerance <= 1.0:
        raise InvalidTolerance(f"tolerance must be within [0, 1], got {tolerance}")


def minimum_received(expected_amount: float, tolerance: float) -> float:
    """Lowest acceptable output for expected_amount under a slippage tolerance.

    :raises InvalidTolerance: If tolerance is outside [0, 1].
    """
    _check_tolerance(tolerance)
    return expected_amount * (1 - tolerance)


def maximum_input(expected_input: float, tolerance: float) -> float:
    """Highest acceptable input for expected_input under a slippage tolerance.

    :raises InvalidTolerance: If tolerance is outside [0, 1].
    """
    _check_tolerance(tolerance)
    return expected_input * (1 + tolerance)


def is_slippage_acceptable(
    slippage: float, max_slippage: float = DEFAULT_PRICING_CONFIG.max_slippage
) -> bool:
    """Check slippage against a ceiling (inclusive)."""
    return slippage <= max_slippage


def payout_odds(price: float) -> tuple[float, float]:
    """Gross payout per unit staked on each side at a given yes price.

    A yes price of 0.25 pays 4x on yes and ~1.33x on no. A side whose payout
    is undefined (price 0 for yes, price 1 for no) pays 0; the other side
    pays 1x.

    :param price: Yes price in [0, 1]; values above 1 are treated as 1.
    :returns: Tuple of (yes_multiplier, no_multiplier).
    :raises InvalidPriceInput: If price is negative.
    """
    if price < 0:
        raise InvalidPriceInput(f"price must not be negative, got {price}")
    if price == 0:
        return 0.0, 1.0
    if price >= 1:
        return 1.0, 0.0
    return 1 / price, 1 / (1 - price)


def expected_return(investment: float, price: float, predicted_yes: bool) -> float:
    """Net profit if the predicted side wins.

    :param investment: Amount staked.
    :param price: Current yes price in [0, 1].
    :param predicted_yes: True to back yes, False to back no.
    :returns: Payout minus investment, floored at 0.
    :raises InvalidAmount: If investment is negative.
    :raises InvalidPriceInput: If price is negative.
    """
    if investment < 0:
        raise InvalidAmount(f"investment must not be negative, got {investment}")
    yes_multiplier, no_multiplier = payout_odds(price)
    multiplier = yes_multiplier if predicted_yes else no_multiplier
    return max(0.0, investment * multiplier - investment)
