"""
HTTP transport used by the retry engine.

The engine treats the transport as a black box: one call sends one request
and either returns an httpx.Response or raises. Redirects, TLS, pooling and
content handling all stay inside httpx.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx
import structlog


logger = structlog.get_logger(__name__)


class BaseTransport(ABC):
    """
    Abstract base class for transports the retry engine can drive.

    Responsibilities:
    - Send exactly one HTTP request per call
    - Return the response whatever its status code
    - Raise on transport failures (connection refused, reset, protocol errors)

    Does NOT handle:
    - Retries, backoff or per-attempt deadlines (that's RetryEngine's job)
    - Raising on HTTP error statuses
    """

    @abstractmethod
    async def send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """
        Send one request.

        Args:
            method: HTTP method
            url: Absolute request URL
            **kwargs: Passed through to the underlying client

        Returns:
            The response, including 4xx/5xx responses

        Raises:
            httpx.TransportError: On network and protocol failures
        """
        pass

    async def aclose(self) -> None:
        """Release any held resources."""

    async def __aenter__(self) -> "BaseTransport":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


class HttpxTransport(BaseTransport):
    """
    Transport backed by a lazily created httpx.AsyncClient.

    The client is reused across attempts and calls until aclose().
    A caller-provided client is used as-is and is not closed here.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        **client_kwargs: Any,
    ):
        """
        Initialize transport.

        Args:
            client: Existing AsyncClient to send through (owned by the caller)
            **client_kwargs: Options for the AsyncClient created on first use
                (e.g. transport=httpx.MockTransport(...) in tests). httpx's
                own timeout defaults to None here instead of 5 seconds
        """
        self._client = client
        self._owns_client = client is None
        # The engine's per-attempt timer is the only deadline unless one is given
        client_kwargs.setdefault("timeout", None)
        self._client_kwargs = client_kwargs

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(**self._client_kwargs)
            self._owns_client = True
            logger.debug("Created new httpx AsyncClient")
        return self._client

    async def send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        client = await self._get_client()
        return await client.request(method, url, **kwargs)

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            logger.debug("Closed httpx AsyncClient")
