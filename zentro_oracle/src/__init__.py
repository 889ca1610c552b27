"""
Zentro Oracle - Price Feed and AMM Pricing Module

This module provides:
- Quote / PriceUpdate: Price observation value types
- PriceSourceReader: Decoding of the 25-byte oracle account layout
- PriceAggregator: Equal-weight aggregation with a confidence figure
- OracleFeed: Polling lifecycle and push notifications for one account
- AmmPricing: Odds conversion, fees, price impact, slippage bounds and
  share-based market pricing
- PriceStatistics: Volatility and risk-adjusted return figures
- readers: Ledger account reader implementations
"""

from .AmmPricing import (
    DEFAULT_MARKET_PARAMS,
    DEFAULT_PRICING_CONFIG,
    MarketOdds,
    MarketPricingParams,
    PriceImpactResult,
    PricingConfig,
    TradeFeeBreakdown,
    buy_cost,
    expected_return,
    is_slippage_acceptable,
    market_price,
    maximum_input,
    minimum_received,
    odds_from_prices,
    odds_to_probability,
    payout_odds,
    price_impact,
    probability_to_odds,
    sell_proceeds,
    slippage_rate,
    trading_fees,
)
from .errors import (
    AccountNotFound,
    DecodeError,
    NoValidSources,
    OracleAccountNotFound,
    OracleError,
    PricingError,
    ReaderError,
)
from .formatting import format_percentage_change, format_price
from .OracleFeed import (
    DEFAULT_UPDATE_INTERVAL_MS,
    FeedState,
    HistoricalPriceSeries,
    OracleFeed,
    TickResult,
)
from .PriceAggregator import PriceAggregator, aggregate
from .PriceSourceReader import ACCOUNT_LAYOUT_SIZE, PriceSourceReader, decode_quote
from .PriceStatistics import (
    PriceChange,
    average,
    price_change,
    returns_from_prices,
    sharpe_ratio,
    volatility,
)
from .Quote import PriceUpdate, Quote, QuoteStatus
from .staleness import DEFAULT_MAX_AGE_MS, is_stale, is_valid_update

__all__ = [
    "ACCOUNT_LAYOUT_SIZE",
    "AccountNotFound",
    "DEFAULT_MARKET_PARAMS",
    "DEFAULT_MAX_AGE_MS",
    "DEFAULT_PRICING_CONFIG",
    "DEFAULT_UPDATE_INTERVAL_MS",
    "DecodeError",
    "FeedState",
    "HistoricalPriceSeries",
    "MarketOdds",
    "MarketPricingParams",
    "NoValidSources",
    "OracleAccountNotFound",
    "OracleError",
    "OracleFeed",
    "PriceAggregator",
    "PriceChange",
    "PriceImpactResult",
    "PriceSourceReader",
    "PriceUpdate",
    "PricingConfig",
    "PricingError",
    "Quote",
    "QuoteStatus",
    "ReaderError",
    "TickResult",
    "TradeFeeBreakdown",
    "aggregate",
    "average",
    "buy_cost",
    "decode_quote",
    "expected_return",
    "format_percentage_change",
    "format_price",
    "is_slippage_acceptable",
    "is_stale",
    "is_valid_update",
    "market_price",
    "maximum_input",
    "minimum_received",
    "odds_from_prices",
    "odds_to_probability",
    "payout_odds",
    "price_change",
    "price_impact",
    "probability_to_odds",
    "returns_from_prices",
    "sell_proceeds",
    "sharpe_ratio",
    "slippage_rate",
    "trading_fees",
    "volatility",
]
