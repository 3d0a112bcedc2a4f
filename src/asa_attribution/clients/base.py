"""Base async HTTP client with connection pooling.

API clients inherit from this base for consistent behavior:
- Async/await for non-blocking I/O
- Connection pooling via a context-managed httpx.AsyncClient
- Transport failures surfaced as TransportError
- One attempt per request; retry policy belongs to the caller

Usage:
    class MyAPIClient(BaseAsyncClient):
        def __init__(self):
            super().__init__(base_url="https://api.example.com")

        async def submit(self, body: bytes) -> httpx.Response:
            return await self._request("POST", "/", content=body)
"""

import logging

import httpx

from asa_attribution.errors import TransportError

logger = logging.getLogger(__name__)


class BaseAsyncClient:
    """Base async HTTP client.

    Args:
        base_url: Base URL for all API requests
        headers: Default headers for all requests
        timeout: Request timeout in seconds (default: 30)
    """

    def __init__(
        self,
        base_url: str,
        headers: dict[str, str] | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.base_url = base_url
        self.headers = headers or {}
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "BaseAsyncClient":
        """Async context manager entry."""
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=self.headers,
            timeout=self.timeout,
            limits=httpx.Limits(max_keepalive_connections=1, max_connections=2),
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        endpoint: str,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Make a single HTTP request and return the raw response.

        HTTP error statuses are returned, not raised; interpreting them is
        the subclass's job.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: Path relative to base_url ("" for the base URL itself)
            content: Raw request body
            headers: Per-request headers

        Returns:
            The httpx response

        Raises:
            RuntimeError: Client used outside ``async with``
            TransportError: Timeout, network failure, or a malformed response
        """
        if not self._client:
            raise RuntimeError("Client not initialized. Use async with context manager.")

        logger.debug("%s %s%s", method, self.base_url, endpoint)

        try:
            response = await self._client.request(
                method=method,
                url=endpoint,
                content=content,
                headers=headers,
            )
        except httpx.TimeoutException as e:
            logger.error("Request timeout for %s%s: %s", self.base_url, endpoint, e)
            raise TransportError(f"Request timeout: {e}") from e
        except httpx.NetworkError as e:
            logger.error("Network error for %s%s: %s", self.base_url, endpoint, e)
            raise TransportError(f"Network error: {e}") from e
        except httpx.HTTPError as e:
            logger.error("HTTP transport error for %s%s: %s", self.base_url, endpoint, e)
            raise TransportError(f"Transport error: {e}") from e

        if not isinstance(response, httpx.Response):
            raise TransportError(f"Response is not an HTTP response: {type(response).__name__}")

        logger.debug(
            "HTTP status code: %d. All headers: %s",
            response.status_code, dict(response.headers),
        )
        return response
