"""HTTP client helper."""

from collections.abc import Mapping, Sequence
from typing import Any, Optional

import aiohttp

QueryParams = Mapping[str, str] | Sequence[tuple[str, str]]

JSON_HEADERS = {"Accept": "application/json"}


class HTTPClient:
    """Async HTTP client wrapper."""

    def __init__(self, base_url: Optional[str] = None, timeout: float = 30.0) -> None:
        self.base_url = base_url
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def session(self) -> aiohttp.ClientSession:
        """Get or create session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    def resolve(self, url: str) -> str:
        # Relative paths are joined onto base_url
        if self.base_url and not url.startswith("http"):
            return f"{self.base_url.rstrip('/')}{url}"
        return url

    async def get(
        self,
        url: str,
        params: Optional[QueryParams] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> Any:
        """GET request returning the decoded JSON body.

        Raises:
            aiohttp.ClientResponseError: On a non-2xx status
            aiohttp.ContentTypeError: When the body is not JSON
        """
        # Sequence params keep their order on the wire
        request_params = list(params) if isinstance(params, Sequence) else params
        request_headers = {**JSON_HEADERS, **(headers or {})}
        async with self.session.get(
            self.resolve(url), params=request_params, headers=request_headers
        ) as response:
            response.raise_for_status()
            return await response.json()

    @property
    def closed(self) -> bool:
        return self._session is None or self._session.closed

    async def close(self) -> None:
        """Close the session if one was opened."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "HTTPClient":
        """Context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        await self.close()
