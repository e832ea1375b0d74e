"""Cached HTTP client shared by all upstream geodata fetchers."""

import asyncio
import logging
from typing import Any, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from hazardrisk.config import settings
from hazardrisk.data.cache import TTLCache

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FetchError(Exception):
    """An upstream request failed, returned a non-200 status, or was malformed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def build_url(url: str, params: dict[str, Any] | None = None) -> str:
    """Return the fully parameterized URL used as the cache key."""
    return str(httpx.URL(url, params=params or {}))


def decode(adapter: TypeAdapter[T], body: bytes, source: str) -> T:
    """Validate a JSON body, raising FetchError on malformed payloads."""
    try:
        return adapter.validate_json(body)
    except ValidationError as e:
        raise FetchError(f"{source} decode: {e.error_count()} validation error(s)") from e


class GeoDataClient:
    def __init__(
        self,
        cache: TTLCache | None = None,
        http_client: httpx.AsyncClient | None = None,
        user_agent: str | None = None,
        max_response_bytes: int | None = None,
        timeout_seconds: float | None = None,
    ):
        self._owns_cache = cache is None
        self.cache = cache if cache is not None else TTLCache(settings.cache_cleanup_interval_seconds)
        self._owns_http = http_client is None
        self.timeout_seconds = timeout_seconds or settings.http_timeout_seconds
        self.http = http_client or httpx.AsyncClient(timeout=self.timeout_seconds, follow_redirects=True)
        self.headers = {"User-Agent": user_agent or settings.user_agent}
        self.max_response_bytes = max_response_bytes or settings.max_response_bytes

    async def get(
        self, url: str, params: dict[str, Any] | None = None, ttl: float | None = None
    ) -> bytes:
        """Fetch a URL through the cache.

        ttl=None skips the cache entirely (both lookup and store).
        """
        key = build_url(url, params)
        if ttl is not None:
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug("Cache hit: %s", key)
                return cached

        body = await self._fetch(key)

        if ttl is not None:
            self.cache.set(key, body, ttl)
        return body

    async def _fetch(self, url: str) -> bytes:
        """GET a URL, bounded by a total deadline rather than per-phase timeouts."""
        try:
            async with asyncio.timeout(self.timeout_seconds):
                return await self._read(url)
        except TimeoutError as e:
            raise FetchError(f"fetching {url}: timed out after {self.timeout_seconds:g}s") from e
        except httpx.HTTPError as e:
            raise FetchError(f"fetching {url}: {e!r}") from e

    async def _read(self, url: str) -> bytes:
        chunks: list[bytes] = []
        size = 0
        async with self.http.stream("GET", url, headers=self.headers, follow_redirects=True) as resp:
            if resp.status_code != 200:
                raise FetchError(
                    f"fetching {url}: status {resp.status_code}",
                    status_code=resp.status_code,
                )
            async for chunk in resp.aiter_bytes():
                remaining = self.max_response_bytes - size
                if len(chunk) > remaining:
                    chunks.append(chunk[:remaining])
                    size += remaining
                    logger.warning("Response from %s truncated at %d bytes", url, size)
                    break
                chunks.append(chunk)
                size += len(chunk)
        return b"".join(chunks)

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()
        if self._owns_cache:
            self.cache.close()
