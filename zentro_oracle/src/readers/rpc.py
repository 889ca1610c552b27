"""JSON-RPC ledger reader.

Method: getAccountInfo(address, {"encoding": "base64", "commitment": ...})
Response: {"result": {"value": null | {"data": [<base64>, "base64"], ...}}}

No retries: a failed read surfaces once and the feed tries again on its
next tick.
"""

import base64
import binascii
import itertools
import logging

import httpx

from ..errors import ReaderError
from .base import AccountReader

logger = logging.getLogger(__name__)


class RpcAccountReader(AccountReader):
    """Reads account data from a ledger JSON-RPC endpoint.

    :ivar rpc_url: Endpoint URL.
    :ivar commitment: Commitment level requested for reads.
    :ivar timeout: Request timeout in seconds.
    """

    name = "rpc"

    def __init__(
        self,
        rpc_url: str,
        commitment: str = "confirmed",
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the reader.

        :param rpc_url: JSON-RPC endpoint URL.
        :param commitment: Commitment level (default: "confirmed").
        :param timeout: Request timeout in seconds (default: 10).
        :param client: Optional client; the shared client is used otherwise.
        """
        self.rpc_url = rpc_url
        self.commitment = commitment
        self.timeout = timeout or self.DEFAULT_TIMEOUT
        self._client = client
        self._ids = itertools.count(1)

    @property
    def client(self) -> httpx.AsyncClient:
        """Client used for requests."""
        return self._client if self._client is not None else self.get_shared_client()

    async def get_account_info(self, address: str) -> bytes | None:
        """Fetch raw account data over JSON-RPC.

        :param address: Account address.
        :returns: Decoded account data, or None if the account is absent.
        :raises ReaderError: On transport errors, RPC errors or malformed
            responses.
        """
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": "getAccountInfo",
            "params": [
                address,
                {"encoding": "base64", "commitment": self.commitment},
            ],
        }

        data = await self._post_json(
            self.client, self.rpc_url, payload, timeout=self.timeout
        )

        if data.get("error"):
            error = data["error"]
            logger.warning(f"[rpc] getAccountInfo error for {address}: {error}")
            raise ReaderError(f"[rpc] RPC error for {address}: {error}")

        try:
            value = data["result"]["value"]
            if value is None:
                return None
            encoded, encoding = value["data"]
        except (KeyError, TypeError, ValueError) as e:
            raise ReaderError(f"[rpc] Malformed response for {address}: {e}") from e

        if encoding != "base64":
            raise ReaderError(f"[rpc] Unexpected encoding {encoding!r} for {address}")

        try:
            return base64.b64decode(encoded, validate=True)
        except (binascii.Error, TypeError) as e:
            raise ReaderError(f"[rpc] Invalid base64 data for {address}: {e}") from e
