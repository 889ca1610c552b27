"""Unit tests for PriceSourceReader and the account layout."""

import struct

import pytest

from zentro_oracle.src.errors import AccountNotFound, DecodeError
from zentro_oracle.src.PriceSourceReader import (
    ACCOUNT_LAYOUT_SIZE,
    PriceSourceReader,
    decode_quote,
    encode_quote,
    parse_status,
)
from zentro_oracle.src.Quote import Quote, QuoteStatus
from zentro_oracle.src.readers import InMemoryAccountReader


def raw(price: float, timestamp: int, confidence: float, status: int) -> bytes:
    """Pack an account record by hand, field by field."""
    return (
        struct.pack("<d", price)
        + struct.pack("<Q", timestamp)
        + struct.pack("<d", confidence)
        + bytes([status])
    )


class TestDecodeQuote:
    """Test decode_quote()."""

    def test_layout_size(self) -> None:
        """Layout should be 25 bytes."""
        assert ACCOUNT_LAYOUT_SIZE == 25

    def test_decode_fields(self) -> None:
        """Each field should come from its fixed offset."""
        quote = decode_quote(raw(123.456, 1_700_000_000_123, 0.87, 1))

        assert quote.price == 123.456
        assert quote.timestamp == 1_700_000_000_123
        assert quote.confidence == 0.87
        assert quote.status is QuoteStatus.ACTIVE

    @pytest.mark.parametrize(
        ("code", "status"),
        [
            (0, QuoteStatus.INACTIVE),
            (1, QuoteStatus.ACTIVE),
            (2, QuoteStatus.STALE),
            (3, QuoteStatus.INACTIVE),
            (255, QuoteStatus.INACTIVE),
        ],
    )
    def test_status_codes(self, code: int, status: QuoteStatus) -> None:
        """Status byte should map to a status, unknown codes to inactive."""
        assert decode_quote(raw(1.0, 0, 0.5, code)).status is status
        assert parse_status(code) is status

    def test_trailing_bytes_ignored(self) -> None:
        """Data past the layout should not affect decoding."""
        data = raw(5.0, 10, 0.1, 2) + b"\xff" * 7
        quote = decode_quote(data)

        assert quote.price == 5.0
        assert quote.status is QuoteStatus.STALE

    def test_short_buffer(self) -> None:
        """Buffers shorter than 25 bytes should raise DecodeError."""
        with pytest.raises(DecodeError, match="too short"):
            decode_quote(raw(1.0, 0, 0.5, 1)[:24])

    def test_empty_buffer(self) -> None:
        """Empty data should raise DecodeError."""
        with pytest.raises(DecodeError):
            decode_quote(b"")

    def test_negative_price_rejected(self) -> None:
        """A negative price cannot form a Quote."""
        with pytest.raises(DecodeError, match="Invalid quote data"):
            decode_quote(raw(-1.0, 0, 0.5, 1))

    def test_nan_price_rejected(self) -> None:
        """A NaN price cannot form a Quote."""
        with pytest.raises(DecodeError):
            decode_quote(raw(float("nan"), 0, 0.5, 1))

    def test_confidence_out_of_range_rejected(self) -> None:
        """Confidence outside [0, 1] cannot form a Quote."""
        with pytest.raises(DecodeError):
            decode_quote(raw(1.0, 0, 1.5, 1))

    def test_encode_matches_manual_layout(self) -> None:
        """encode_quote() should write the same bytes as the manual layout."""
        quote = Quote(price=9.5, timestamp=77, confidence=0.25, status=QuoteStatus.STALE)

        assert encode_quote(quote) == raw(9.5, 77, 0.25, 2)


class TestPriceSourceReader:
    """Test PriceSourceReader against an in-memory ledger."""

    @pytest.mark.asyncio
    async def test_read_quote(self) -> None:
        """Existing account should decode to its quote."""
        ledger = InMemoryAccountReader({"oracle": raw(20.0, 1_000, 0.9, 1)})
        reader = PriceSourceReader(ledger)

        quote = await reader.read_quote("oracle")

        assert quote == Quote(price=20.0, timestamp=1_000, confidence=0.9)

    @pytest.mark.asyncio
    async def test_missing_account(self) -> None:
        """Absent account should raise AccountNotFound."""
        reader = PriceSourceReader(InMemoryAccountReader())

        with pytest.raises(AccountNotFound) as exc_info:
            await reader.read_quote("missing")
        assert exc_info.value.address == "missing"

    @pytest.mark.asyncio
    async def test_malformed_account(self) -> None:
        """Short account data should raise DecodeError."""
        reader = PriceSourceReader(InMemoryAccountReader({"oracle": b"\x00" * 10}))

        with pytest.raises(DecodeError):
            await reader.read_quote("oracle")

    @pytest.mark.asyncio
    async def test_account_exists(self) -> None:
        """account_exists() should reflect the ledger."""
        reader = PriceSourceReader(InMemoryAccountReader({"oracle": b""}))

        assert await reader.account_exists("oracle")
        assert not await reader.account_exists("other")
