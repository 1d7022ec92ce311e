"""
Base HTTP client with request logging and uniform error handling.

Every call is a single attempt: no retry, no backoff. Any non-2xx status or
transport failure surfaces as FetchError.
"""

from typing import Any, Optional

import httpx

from user_admin.core.logging import get_logger

logger = get_logger(__name__)


class FetchError(Exception):
    """Raised when a backend request fails for any reason."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class BaseAPIClient:
    """
    Base class for API clients with common functionality.

    Features:
    - One shared httpx.AsyncClient per instance
    - Request/response logging
    - Error handling
    """

    def __init__(
        self,
        base_url: str,
        timeout: int = 30,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize API client.

        Args:
            base_url: Base URL for API
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests inject a MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "BaseAPIClient":
        """Async context manager entry."""
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()

    async def _ensure_client(self) -> None:
        """Ensure HTTP client is initialized."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                transport=self._transport,
            )

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def request(
        self,
        method: str,
        endpoint: str,
        error_message: str = "Request failed",
        parse_body: bool = True,
        **kwargs: Any,
    ) -> Any:
        """
        Make a single HTTP request.

        Args:
            method: HTTP method
            endpoint: Path appended to the base URL
            error_message: Message carried by FetchError on failure
            parse_body: Decode the JSON body; False ignores it
            **kwargs: Additional arguments for httpx.request

        Returns:
            Decoded JSON body, or None for an empty body

        Raises:
            FetchError: On non-success status or transport failure
        """
        await self._ensure_client()

        url = f"{self.base_url}/{endpoint.lstrip('/')}"

        logger.debug(f"{method} {url}", extra={"params": kwargs.get("params")})

        try:
            assert self._client is not None
            response = await self._client.request(method, url, **kwargs)
        except httpx.RequestError as e:
            logger.error(f"Request error: {method} {url}: {e}")
            raise FetchError(f"{error_message}: {e}") from e

        if not response.is_success:
            # Error bodies are not parsed
            logger.error(f"HTTP error: {method} {url} -> {response.status_code}")
            raise FetchError(
                f"{error_message} (HTTP {response.status_code})",
                status_code=response.status_code,
            )

        logger.debug(f"{method} {url} -> {response.status_code}")

        if not parse_body or not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Invalid JSON from {method} {url}")
            raise FetchError(f"{error_message}: invalid JSON response", response.status_code) from e

    async def get(self, endpoint: str, **kwargs: Any) -> Any:
        """Make GET request."""
        return await self.request("GET", endpoint, **kwargs)

    async def post(self, endpoint: str, **kwargs: Any) -> Any:
        """Make POST request."""
        return await self.request("POST", endpoint, **kwargs)

    async def put(self, endpoint: str, **kwargs: Any) -> Any:
        """Make PUT request."""
        return await self.request("PUT", endpoint, **kwargs)

    async def delete(self, endpoint: str, **kwargs: Any) -> Any:
        """Make DELETE request."""
        return await self.request("DELETE", endpoint, **kwargs)
