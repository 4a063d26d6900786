"""
Base client for outbound HTTP calls.

Owns a lazily created httpx.AsyncClient and turns non-success
responses and transport failures into the proxy's error types.
Requests are sent once: there is no retry layer.
"""

import time
from abc import ABC, abstractmethod
from typing import Any

import httpx

from igdb_proxy.errors import ProxyError, UnclassifiedError
from igdb_proxy.logger import get_logger


class BaseClient(ABC):
    """
    Abstract base class for upstream API clients.

    Provides common functionality including:
    - HTTP client management
    - Error mapping with the upstream status and body
    - Structured logging

    Subclasses must implement:
    - source_name: Identifier for the upstream service
    - error_class: Exception raised on non-success responses
    """

    def __init__(
        self,
        *,
        timeout: float = 30,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            timeout: HTTP request timeout in seconds
            client: Pre-built httpx client (created lazily if None)
        """
        self._timeout = timeout
        self._client = client
        self._logger = get_logger(
            self.__class__.__name__,
            component="client",
            source=self.source_name,
        )

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Return identifier for this upstream service."""
        ...

    @property
    @abstractmethod
    def error_class(self) -> type[ProxyError]:
        """Exception type raised for non-success responses."""
        ...

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                headers={
                    "User-Agent": "IGDBProxy/1.0",
                    "Accept": "application/json",
                },
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client and release resources."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "BaseClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()

    async def _make_request(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Send a single HTTP request.

        Args:
            method: HTTP method (GET, POST, etc.)
            url: Request URL
            **kwargs: Additional arguments passed to httpx

        Returns:
            httpx.Response: Successful response

        Raises:
            ProxyError: ``error_class`` with upstream status and body text
                when the response is not a success
            UnclassifiedError: If the request could not be completed
        """
        self._logger.debug("Making request", method=method, url=url)
        start_time = time.perf_counter()

        try:
            response = await self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            self._logger.error("Request failed", url=url, error=str(e))
            raise UnclassifiedError(
                f"{self.source_name} request failed: {e}",
                source=self.source_name,
                endpoint=url,
            ) from e

        duration_ms = (time.perf_counter() - start_time) * 1000

        if not response.is_success:
            body = response.text
            self._logger.warning(
                "Upstream returned error",
                url=url,
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
            )
            raise self.error_class(
                f"{self.error_prefix}: {response.status_code} {body}",
                status_code=response.status_code,
                body=body,
                source=self.source_name,
                endpoint=url,
            )

        self._logger.debug(
            "Request complete",
            url=url,
            status_code=response.status_code,
            duration_ms=round(duration_ms, 2),
        )
        return response

    @property
    def error_prefix(self) -> str:
        """Leading text of error messages for this upstream."""
        return f"Error querying {self.source_name}"

    @abstractmethod
    def _parse_response(self, response: httpx.Response) -> Any:
        """
        Parse and validate a successful response.

        Raises:
            ProxyError: ``error_class`` if the body is not what we expect
        """
        ...
