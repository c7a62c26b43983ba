"""
Image-search provider boundary.

Provides:
- ImageSearchProvider: abstract async search interface
- OpenverseClient: httpx-based client for the Openverse images API
- item_from_record: tolerant mapping from provider records to Item

Status handling:
- 429 surfaces immediately as RateLimited with the Retry-After hint
- 5xx, timeouts and connection errors are retried once after a short delay
- Any other non-2xx surfaces as UpstreamError with the status preserved
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import httpx
import structlog

from ..config import settings
from ..errors import MalformedResponse, RateLimited, TransientNetworkFailure, UpstreamError
from ..models.items import Item


logger = structlog.get_logger(__name__)


def _str_or_none(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def item_from_record(record: Any) -> Optional[Item]:
    """
    Map one provider record to an Item.

    Records without a non-empty string id are dropped (None). Missing
    optional fields default to "" or None; the thumbnail falls back to the
    full image URL.

    Examples:
        >>> item_from_record({"id": "a1", "url": "https://x/full.jpg"}).thumbnail_ref
        'https://x/full.jpg'
        >>> item_from_record({"title": "no id"}) is None
        True
    """
    if not isinstance(record, dict):
        return None
    item_id = record.get("id")
    if not isinstance(item_id, str) or not item_id:
        return None

    full_ref = _str_or_none(record.get("url")) or ""
    return Item(
        id=item_id,
        title=_str_or_none(record.get("title")) or "",
        thumbnail_ref=_str_or_none(record.get("thumbnail")) or full_ref,
        full_ref=full_ref,
        creator=_str_or_none(record.get("creator")) or "",
        creator_url=_str_or_none(record.get("creator_url")),
        license=_str_or_none(record.get("license")) or "",
        license_version=_str_or_none(record.get("license_version")),
        source_name=_str_or_none(record.get("source")),
    )


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    """Parse a Retry-After header given in seconds. HTTP-date values are ignored."""
    if not value:
        return None
    try:
        seconds = float(value.strip())
    except ValueError:
        return None
    return max(seconds, 0.0)


class ImageSearchProvider(ABC):
    """Returns ranked image metadata for a text query."""

    @abstractmethod
    async def search(
        self,
        query: str,
        page: int = 1,
        license_type: Optional[str] = None,
    ) -> List[Item]:
        """
        Search images.

        Args:
            query: Free-text query
            page: 1-based page number
            license_type: License filter (provider specific)

        Returns:
            Items in provider rank order

        Raises:
            RateLimited, UpstreamError, TransientNetworkFailure, MalformedResponse
        """

    async def close(self) -> None:
        """Release network resources."""


class OpenverseClient(ImageSearchProvider):
    """
    Async client for the Openverse images API.

    Example:
        client = OpenverseClient()
        items = await client.search("stormy sea, small boat", page=1)
        await client.close()
    """

    provider_name = "openverse"

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        retry_delay: Optional[float] = None,
        license_type: Optional[str] = None,
        page_size: Optional[int] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = (base_url or settings.image_search_base_url).rstrip("/")
        self.timeout_seconds = timeout_seconds or settings.image_search_timeout_seconds
        self.retry_delay = (
            retry_delay if retry_delay is not None else settings.image_search_retry_delay_seconds
        )
        self.license_type = license_type or settings.image_search_license_type
        self.page_size = page_size or settings.image_search_page_size
        self._http_client = http_client
        self._owns_client = http_client is None

        self.logger = logger.bind(provider=self.provider_name)

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client (lazy initialization)."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout_seconds))
        return self._http_client

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._http_client is not None and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None

    async def search(
        self,
        query: str,
        page: int = 1,
        license_type: Optional[str] = None,
    ) -> List[Item]:
        params: Dict[str, Any] = {
            "q": query,
            "page": page,
            "page_size": self.page_size,
            "license_type": license_type or self.license_type,
        }
        response = await self._request_with_retry(params)

        try:
            payload = response.json()
        except ValueError as e:
            raise MalformedResponse(f"{self.provider_name} returned non-JSON content") from e

        results = payload.get("results") if isinstance(payload, dict) else None
        if not isinstance(results, list):
            results = []

        items = [item for item in map(item_from_record, results) if item is not None]
        self.logger.debug(
            "image_search_completed",
            query=query,
            page=page,
            records=len(results),
            items=len(items),
        )
        return items

    async def _request_with_retry(self, params: Dict[str, Any]) -> httpx.Response:
        """GET the images endpoint, retrying once on 5xx or transport failure."""
        url = f"{self.base_url}/images/"
        attempts = 2

        for attempt in range(1, attempts + 1):
            last_attempt = attempt == attempts
            try:
                response = await self._get_client().get(url, params=params)
            except httpx.TransportError as e:
                if last_attempt:
                    raise TransientNetworkFailure(
                        f"{self.provider_name} unreachable: {type(e).__name__}"
                    ) from e
                self.logger.warning(
                    "image_search_retry",
                    attempt=attempt,
                    error=str(e),
                    error_type=type(e).__name__,
                    wait_seconds=self.retry_delay,
                )
                await asyncio.sleep(self.retry_delay)
                continue

            status = response.status_code
            if 200 <= status < 300:
                return response

            if status == 429:
                retry_after = parse_retry_after(response.headers.get("retry-after"))
                self.logger.warning("image_search_rate_limited", retry_after=retry_after)
                raise RateLimited(retry_after=retry_after, provider=self.provider_name)

            if 500 <= status < 600 and not last_attempt:
                self.logger.warning(
                    "image_search_retry",
                    attempt=attempt,
                    status_code=status,
                    wait_seconds=self.retry_delay,
                )
                await asyncio.sleep(self.retry_delay)
                continue

            self.logger.error("image_search_failed", status_code=status)
            raise UpstreamError(status, provider=self.provider_name)

        raise AssertionError("unreachable")  # pragma: no cover
