"""Ledger account reader interface and the HTTP client readers share.

The feed needs one thing from the ledger: the raw bytes stored in an
account, or None when no such account exists. Network-backed readers reuse a
single process-wide httpx.AsyncClient so repeated polls keep their
connections alive.

.. code-block:: python

    class MyReader(AccountReader):
        name = "myreader"

        async def get_account_info(self, address: str) -> bytes | None:
            body = await self._post_json(self.client, self.url, {...})
            ...
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar

import httpx

from ..errors import ReaderError

logger = logging.getLogger(__name__)


class ReaderHTTPError(ReaderError):
    """The ledger endpoint answered with a non-2xx status.

    :ivar status_code: Status code of the response.
    :ivar url: Endpoint that was called.
    """

    def __init__(self, status_code: int, url: str, body: str = ""):
        self.status_code = status_code
        self.url = url
        detail = f": {body}" if body else ""
        super().__init__(f"HTTP {status_code} from {url}{detail}")


class AccountReader(ABC):
    """Base class for ledger account readers.

    Readers are fallible and unordered: two calls may observe different
    ledger states, and any call may raise ReaderError.

    :cvar name: Short identifier used as a log prefix.
    """

    name: ClassVar[str] = ""

    DEFAULT_TIMEOUT: ClassVar[float] = 10.0

    # One client for every network-backed reader in the process
    _shared_client: ClassVar[httpx.AsyncClient | None] = None

    @abstractmethod
    async def get_account_info(self, address: str) -> bytes | None:
        """Fetch the raw data stored in an account.

        :param address: Account address.
        :returns: Account data, or None if the account does not exist.
        :raises ReaderError: If the lookup itself fails.
        """

    @classmethod
    def get_shared_client(cls) -> httpx.AsyncClient:
        """Return the process-wide client, opening a new one if needed."""
        client = AccountReader._shared_client
        if client is None or client.is_closed:
            client = httpx.AsyncClient(
                timeout=httpx.Timeout(cls.DEFAULT_TIMEOUT, connect=5.0),
                limits=httpx.Limits(max_connections=4, max_keepalive_connections=2),
                headers={"Content-Type": "application/json"},
            )
            AccountReader._shared_client = client
        return client

    @classmethod
    async def close_shared_client(cls) -> None:
        """Close the process-wide client if one is open."""
        client = AccountReader._shared_client
        AccountReader._shared_client = None
        if client is not None and not client.is_closed:
            await client.aclose()

    async def _post_json(
        self,
        client: httpx.AsyncClient,
        url: str,
        payload: dict[str, Any],
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """POST a JSON payload and return the decoded JSON object.

        :param client: Client to send the request with.
        :param url: Endpoint URL.
        :param payload: Request body.
        :param timeout: Request timeout in seconds (default: DEFAULT_TIMEOUT).
        :returns: Decoded response object.
        :raises ReaderHTTPError: On a non-2xx response.
        :raises ReaderError: On transport errors or a body that is not a
            JSON object.
        """
        try:
            response = await client.post(
                url, json=payload, timeout=timeout or self.DEFAULT_TIMEOUT
            )
        except httpx.TimeoutException as e:
            raise ReaderError(f"[{self.name}] Request timeout calling {url}: {e}") from e
        except httpx.RequestError as e:
            raise ReaderError(f"[{self.name}] Request failed calling {url}: {e}") from e

        if not response.is_success:
            logger.debug(
                f"[{self.name}] POST {url} returned {response.status_code}: "
                f"{response.text[:200]}"
            )
            raise ReaderHTTPError(response.status_code, url, response.text[:200])

        try:
            body = response.json()
        except ValueError as e:
            raise ReaderError(f"[{self.name}] Invalid JSON from {url}: {e}") from e
        if not isinstance(body, dict):
            raise ReaderError(
                f"[{self.name}] Expected a JSON object from {url}, got {type(body).__name__}"
            )
        return body
