"""HTTP transport used by the document store."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import httpx

from gappdata.exceptions import HttpError

logger = logging.getLogger(__name__)


class Transport(ABC):
    """Performs one HTTP request/response exchange."""

    @abstractmethod
    async def send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: str | bytes | None = None,
    ) -> httpx.Response:
        """Send a request and return the response, whatever its status.

        Raises:
            HttpError: If no response could be obtained.
        """
        pass

    async def aclose(self) -> None:
        """Release any held connections."""
        pass


class HttpxTransport(Transport):
    """Transport backed by ``httpx.AsyncClient``.

    Example:
        >>> transport = HttpxTransport(timeout=10.0)
        >>> response = await transport.send("GET", url, {"Authorization": "Bearer ..."})
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ):
        """
        Args:
            client: Pre-configured client. Ownership stays with the caller.
            timeout: Request timeout in seconds for a client created here.
        """
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: str | bytes | None = None,
    ) -> httpx.Response:
        logger.debug(f"{method} {url}")
        try:
            response = await self._client.request(method, url, headers=headers, content=body)
        except httpx.HTTPError as e:
            raise HttpError(f"Request failed: {e}") from e

        logger.debug(f"{method} {url} -> {response.status_code}")
        return response

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
