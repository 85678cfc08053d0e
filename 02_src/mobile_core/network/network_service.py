"""NetworkService implementation over httpx."""

from typing import Protocol

import httpx

from ..logging_config import get_logger
from ..models import HttpConnection, NetworkRequest

logger = get_logger(__name__)


class INetworkService(Protocol):
    """Outbound HTTP for extensions."""

    async def send(self, request: NetworkRequest) -> HttpConnection:
        """Send a request. Never raises for transport errors."""
        ...

    async def close(self) -> None:
        """Release the underlying client."""
        ...


class NetworkService:
    """httpx-backed network service.

    A custom transport (e.g. httpx.MockTransport) can be injected; this is how
    functional tests intercept every outbound call.
    """

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None):
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(transport=self._transport)
        return self._client

    async def send(self, request: NetworkRequest) -> HttpConnection:
        """Send a request. Transport errors are reported in HttpConnection.error."""
        client = self._get_client()
        timeout = httpx.Timeout(
            request.read_timeout, connect=request.connect_timeout
        )

        try:
            response = await client.request(
                request.method.value,
                request.url,
                content=request.body,
                headers=request.headers,
                timeout=timeout,
            )
        except httpx.HTTPError as e:
            logger.warning("Network request to %s failed: %s", request.url, e)
            return HttpConnection(error=e)

        logger.debug(
            "%s %s -> %s", request.method.value, request.url, response.status_code
        )
        return HttpConnection(
            data=response.content,
            status_code=response.status_code,
            headers=dict(response.headers),
        )

    async def close(self) -> None:
        """Release the underlying client."""
        if self._client:
            await self._client.aclose()
            self._client = None
