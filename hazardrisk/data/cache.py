"""In-memory TTL cache for upstream responses.

Keys are fully parameterized query URLs, values are raw response bodies.
Expired entries are hidden on read and reclaimed by a background thread that
periodically rebuilds the store from the surviving entries, so keys that are
never read again do not accumulate.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)

DEFAULT_CLEANUP_INTERVAL = 300.0  # 5 minutes


@dataclass(frozen=True)
class _CacheEntry:
    value: bytes
    expires_at: float


class TTLCache:
    """Thread-safe byte cache with per-entry expiry.

    One plain lock guards the store instead of a reader/writer lock: reads
    hold it for a single dict lookup and compaction swaps in a rebuilt dict,
    so readers never wait on more than a pointer copy.
    """

    def __init__(
        self,
        cleanup_interval: float = DEFAULT_CLEANUP_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._clock = clock
        self._cleanup_interval = cleanup_interval
        self._lock = threading.Lock()
        self._entries: dict[str, _CacheEntry] = {}
        self._stop = threading.Event()
        self._closed = False
        self._cleaner = threading.Thread(
            target=self._cleanup_loop, name="ttl-cache-cleanup", daemon=True,
        )
        self._cleaner.start()

    def get(self, key: str) -> bytes | None:
        """Return the cached value, or None if missing or expired."""
        with self._lock:
            entry = self._entries.get(key)
        if entry is None or self._clock() >= entry.expires_at:
            return None
        return entry.value

    def set(self, key: str, value: bytes, ttl_seconds: float) -> None:
        entry = _CacheEntry(value=value, expires_at=self._clock() + ttl_seconds)
        with self._lock:
            self._entries[key] = entry

    def purge_expired(self) -> int:
        """Rebuild the store with only unexpired entries.

        Returns the number of entries dropped.
        """
        now = self._clock()
        with self._lock:
            fresh = {k: v for k, v in self._entries.items() if now < v.expires_at}
            dropped = len(self._entries) - len(fresh)
            self._entries = fresh
        if dropped:
            logger.debug("Cache compaction dropped %d expired entries", dropped)
        return dropped

    def close(self) -> None:
        """Stop the cleanup thread. Safe to call more than once."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._stop.set()
        if self._cleaner is not threading.current_thread():
            self._cleaner.join()

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _cleanup_loop(self) -> None:
        while not self._stop.wait(self._cleanup_interval):
            self.purge_expired()
