"""
Ledger account readers.

The oracle feed consumes account data through the AccountReader interface
and never talks to the ledger directly.

Usage:
    from zentro_oracle.src.readers import RpcAccountReader

    reader = RpcAccountReader("https://api.devnet.solana.com")
    data = await reader.get_account_info("<address>")
"""

from .base import AccountReader, ReaderHTTPError
from .memory import InMemoryAccountReader
from .rpc import RpcAccountReader

__all__ = [
    "AccountReader",
    "InMemoryAccountReader",
    "ReaderHTTPError",
    "RpcAccountReader",
]
