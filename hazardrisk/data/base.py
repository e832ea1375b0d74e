"""Protocol definitions for data sources.

Every upstream fetcher takes a RawDataSource, so tests and alternative
transports can stand in for the cached HTTP client.
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class RawDataSource(Protocol):
    async def get(
        self, url: str, params: dict[str, Any] | None = None, ttl: float | None = None
    ) -> bytes:
        """Return the raw response body for a GET request.

        A non-None ttl caches the body under the full query URL.
        Raises FetchError on transport failure or a non-200 status.
        """
        ...
