"""Exception hierarchy for the oracle feed and the pricing engine.

Oracle errors (reads, decoding, aggregation) derive from OracleError.
Pricing validation errors derive from PricingError, which is also a
ValueError so callers validating numeric input can catch either.
"""


class OracleError(Exception):
    """Base exception for oracle feed errors."""

    pass


class AccountNotFound(OracleError):
    """Raised when the ledger has no account at the requested address.

    :ivar address: Address that was looked up.
    """

    def __init__(self, address: str, message: str | None = None):
        """Initialize the error.

        :param address: Address that was looked up.
        :param message: Optional override for the default message.
        """
        self.address = address
        super().__init__(message or f"Account not found: {address}")


class OracleAccountNotFound(AccountNotFound):
    """Raised by OracleFeed.initialize() when the bound account is absent."""

    def __init__(self, address: str):
        super().__init__(address, f"Oracle account not found: {address}")


class DecodeError(OracleError):
    """Raised when account data does not match the quote layout."""

    pass


class ReaderError(OracleError):
    """Raised when the ledger reader fails (transport or RPC error)."""

    pass


class NoValidSources(OracleError):
    """Raised when no price update survives validity filtering.

    :ivar total: Number of updates that were offered for aggregation.
    """

    def __init__(self, total: int):
        self.total = total
        super().__init__(f"No valid price updates available ({total} offered)")


class PricingError(ValueError):
    """Base exception for pricing engine input validation."""

    pass


class InvalidPriceInput(PricingError):
    """Raised when prices cannot be normalized (e.g., non-positive sum)."""

    pass


class InvalidProbability(PricingError):
    """Raised when a probability is outside (0, 1]."""

    pass


class InvalidOdds(PricingError):
    """Raised when odds are negative."""

    pass


class InvalidAmount(PricingError):
    """Raised when a trade or fee amount is invalid."""

    pass


class InvalidLiquidity(PricingError):
    """Raised when pool liquidity or current price is not positive."""

    pass


class InvalidTolerance(PricingError):
    """Raised when a slippage tolerance is outside [0, 1]."""

    pass
