"""PriceSourceReader: Decode oracle account data into a Quote.

Account layout (little-endian, 25 bytes):

    ======  ====  ===========================================
    offset  size  field
    ======  ====  ===========================================
    0       8     price (IEEE-754 double)
    8       8     timestamp, ms since epoch (unsigned 64-bit)
    16      8     confidence (IEEE-754 double)
    24      1     status (0=inactive, 1=active, 2=stale)
    ======  ====  ===========================================

Unknown status codes map to inactive. Bytes past offset 25 are ignored.

.. code-block:: python

    >>> data = encode_quote(Quote(price=42.0, timestamp=1_000, confidence=0.9))
    >>> len(data)
    25
    >>> decode_quote(data).price
    42.0
"""

from __future__ import annotations

import logging
import struct
from typing import TYPE_CHECKING

from .errors import AccountNotFound, DecodeError
from .Quote import Quote, QuoteStatus

if TYPE_CHECKING:
    from .readers import AccountReader

logger = logging.getLogger(__name__)

_LAYOUT = struct.Struct("<dQdB")

# Size of the on-chain quote record in bytes.
ACCOUNT_LAYOUT_SIZE = _LAYOUT.size

STATUS_CODES: dict[int, QuoteStatus] = {
    0: QuoteStatus.INACTIVE,
    1: QuoteStatus.ACTIVE,
    2: QuoteStatus.STALE,
}


def parse_status(code: int) -> QuoteStatus:
    """Map a status byte to a QuoteStatus (unknown codes are inactive)."""
    return STATUS_CODES.get(code, QuoteStatus.INACTIVE)


def decode_quote(data: bytes) -> Quote:
    """Decode raw account bytes into a Quote.

    :param data: Raw account data.
    :returns: Decoded quote.
    :raises DecodeError: If the buffer is shorter than the layout or holds
        values a Quote cannot represent (negative/NaN price, confidence
        outside [0, 1]).
    """
    if len(data) < ACCOUNT_LAYOUT_SIZE:
        raise DecodeError(
            f"Account data too short: {len(data)} bytes, "
            f"expected at least {ACCOUNT_LAYOUT_SIZE}"
        )

    price, timestamp, confidence, status_code = _LAYOUT.unpack_from(data, 0)
    try:
        return Quote(
            price=price,
            timestamp=timestamp,
            confidence=confidence,
            status=parse_status(status_code),
        )
    except ValueError as e:
        raise DecodeError(f"Invalid quote data: {e}") from e


def encode_quote(quote: Quote) -> bytes:
    """Encode a Quote into the 25-byte account layout.

    :param quote: Quote to encode.
    :returns: Raw account bytes.
    """
    status_code = next(
        code for code, status in STATUS_CODES.items() if status == quote.status
    )
    return _LAYOUT.pack(quote.price, quote.timestamp, quote.confidence, status_code)


class PriceSourceReader:
    """Reads one oracle account through a ledger reader and decodes it.

    Stateless apart from the reader reference.

    :ivar account_reader: Ledger collaborator used for account lookups.
    """

    def __init__(self, account_reader: AccountReader) -> None:
        self.account_reader = account_reader

    async def read_quote(self, address: str) -> Quote:
        """Read and decode the quote stored at address.

        :param address: Oracle account address.
        :returns: Decoded quote.
        :raises AccountNotFound: If the account does not exist.
        :raises DecodeError: If the account data is malformed.
        :raises ReaderError: If the ledger read itself fails.
        """
        data = await self.account_reader.get_account_info(address)
        if data is None:
            raise AccountNotFound(address)
        quote = decode_quote(data)
        logger.debug(
            f"[{address}] Decoded quote price={quote.price} "
            f"confidence={quote.confidence:.4f} status={quote.status.value}"
        )
        return quote

    async def account_exists(self, address: str) -> bool:
        """Check whether the ledger holds an account at address."""
        return await self.account_reader.get_account_info(address) is not None
