"""In-memory ledger reader for local runs and tests."""

from __future__ import annotations

from ..PriceSourceReader import encode_quote
from ..Quote import Quote
from .base import AccountReader


class InMemoryAccountReader(AccountReader):
    """Dict-backed ledger.

    :ivar accounts: Mapping of address to raw account data.
    :ivar reads: Number of get_account_info() calls served.
    """

    name = "memory"

    def __init__(self, accounts: dict[str, bytes] | None = None) -> None:
        self.accounts: dict[str, bytes] = dict(accounts or {})
        self.reads = 0

    async def get_account_info(self, address: str) -> bytes | None:
        self.reads += 1
        return self.accounts.get(address)

    def set_account(self, address: str, data: bytes) -> None:
        """Store raw data at address."""
        self.accounts[address] = bytes(data)

    def set_quote(self, address: str, quote: Quote) -> None:
        """Store an encoded quote at address."""
        self.accounts[address] = encode_quote(quote)

    def remove_account(self, address: str) -> None:
        """Delete the account at address (no-op if absent)."""
        self.accounts.pop(address, None)
