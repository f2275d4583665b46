"""Page fetching against the store collection endpoint.

The fetcher turns (query, page) into one GET request, decodes the body into
`Store` models and classifies the page as full or short. It knows nothing
about which queries are current; the controller discards stale results.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol

import aiohttp
from pydantic import ValidationError

from ..api.query_builder import CanonicalQuery
from ..config import ListingConfig
from ..core.exceptions import DecodeError, TransportError
from ..models.store import Store
from ..utils.http import HTTPClient


class JSONGetter(Protocol):
    """Anything with HTTPClient's `get` signature."""

    async def get(
        self,
        url: str,
        params: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any: ...


@dataclass(frozen=True)
class PageResult:
    """One decoded page.

    Attributes:
        page: Page number that was requested
        stores: Decoded stores in response order
        has_more: True iff the page was full (len == page_size)
        query: Full query that was sent, pagination included
    """

    page: int
    stores: tuple[Store, ...]
    has_more: bool
    query: CanonicalQuery

    def __len__(self) -> int:
        return len(self.stores)


class PageFetcher:
    """Fetches single pages of stores."""

    def __init__(
        self,
        config: ListingConfig | None = None,
        *,
        client: JSONGetter | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            config: Listing configuration (page size, delay, endpoint)
            client: HTTP client; a new HTTPClient is created when omitted
        """
        self._config = config or ListingConfig()
        self._owns_client = client is None
        self._client: JSONGetter = client or HTTPClient(timeout=self._config.timeout)

    @property
    def page_size(self) -> int:
        return self._config.page_size

    async def fetch(self, query: CanonicalQuery, page: int) -> PageResult:
        """Fetch one page.

        Args:
            query: Filter portion of the query
            page: 1-based page number

        Returns:
            PageResult with decoded stores

        Raises:
            TransportError: Non-success status, connection failure or timeout
            DecodeError: Body is not a JSON array of valid stores
        """
        request = query.with_page(page, self.page_size)

        # Minimum round-trip so fast scrolling cannot flood the endpoint
        if self._config.loading_delay > 0:
            await asyncio.sleep(self._config.loading_delay)

        try:
            body = await self._client.get(self._config.collection_url, params=request.pairs)
        except aiohttp.ContentTypeError as e:
            raise DecodeError(
                f"Failed to fetch stores: response is not JSON ({e.message})", page=page
            ) from e
        except aiohttp.ClientResponseError as e:
            raise TransportError(
                f"Failed to fetch stores: HTTP {e.status} {e.message}".rstrip(),
                status_code=e.status,
                page=page,
            ) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(
                f"Failed to fetch stores: {str(e) or type(e).__name__}", page=page
            ) from e
        except ValueError as e:
            raise DecodeError(f"Failed to fetch stores: malformed JSON ({e})", page=page) from e

        stores = self._decode(body, page)
        return PageResult(
            page=page,
            stores=stores,
            has_more=len(stores) == self.page_size,
            query=request,
        )

    def _decode(self, body: Any, page: int) -> tuple[Store, ...]:
        if not isinstance(body, Sequence) or isinstance(body, (str, bytes)):
            raise DecodeError(
                f"Failed to fetch stores: expected a list, got {type(body).__name__}", page=page
            )
        try:
            return tuple(Store.model_validate(record) for record in body)
        except ValidationError as e:
            raise DecodeError(
                f"Failed to fetch stores: invalid store record ({e.error_count()} errors)", page=page
            ) from e

    async def close(self) -> None:
        """Close the HTTP client if this fetcher created it."""
        if self._owns_client and isinstance(self._client, HTTPClient):
            await self._client.close()

    async def __aenter__(self) -> PageFetcher:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
