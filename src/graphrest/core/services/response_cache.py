"""Response cache - TTL memoization of successful GET responses."""

import asyncio
import contextlib
import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from cachetools import TTLCache  # type: ignore[import-untyped]

from graphrest.core.entities.cache_entry import CacheEntry
from graphrest.core.entities.cache_key import CacheKey

logger = logging.getLogger(__name__)

CACHEABLE_METHOD = "GET"


@dataclass(frozen=True)
class CacheHit:
    """A fresh cache entry together with its age at lookup time."""

    entry: CacheEntry
    age: int
    ttl: int

    @property
    def payload(self) -> Any:
        return self.entry.payload

    @property
    def headers(self) -> dict[str, str]:
        """Stored headers plus the hit marker and remaining freshness."""
        headers = dict(self.entry.headers)
        headers["X-Cache"] = "HIT"
        headers["X-Cache-Age"] = str(self.age)
        headers["Cache-Control"] = f"public, max-age={max(0, self.ttl - self.age)}"
        return headers


class ResponseCache:
    """Process-wide cache of REST responses keyed by method and URL.

    Entries older than the TTL are treated as absent and evicted on
    read; a periodic sweep evicts entries that are never read again.
    Requests interleave only at await points, so no locking is done:
    concurrent misses for one URL may both store, the last write wins.
    """

    def __init__(
        self,
        ttl: timedelta = timedelta(seconds=120),
        sweep_interval: timedelta = timedelta(seconds=60),
        maxsize: int = 10000,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the response cache.

        Args:
            ttl: Fixed time-to-live of every entry.
            sweep_interval: Period of the background sweep.
            maxsize: Maximum number of entries.
            timer: Clock used for capture times and expiry.
        """
        self._ttl = ttl
        self._sweep_interval = sweep_interval
        self._timer = timer
        self._entries: TTLCache[CacheKey, CacheEntry] = TTLCache(
            maxsize=maxsize,
            ttl=ttl.total_seconds(),
            timer=timer,
        )
        self._sweep_task: asyncio.Task[None] | None = None

        # Statistics
        self._hits = 0
        self._misses = 0

    @property
    def ttl_seconds(self) -> int:
        """Return the TTL in whole seconds."""
        return int(self._ttl.total_seconds())

    @property
    def stats(self) -> dict[str, int]:
        """Get cache statistics.

        Returns:
            Dictionary with hits, misses, total lookups and current size.
        """
        return {
            "hits": self._hits,
            "misses": self._misses,
            "total": self._hits + self._misses,
            "size": len(self._entries),
        }

    def lookup(self, method: str, url: str) -> CacheHit | None:
        """Look up a fresh response.

        Args:
            method: HTTP method, used literally.
            url: Full request URL, used literally.

        Returns:
            The CacheHit, or None when absent or expired.
        """
        entry = self._entries.get(CacheKey(method, url))
        if entry is None:
            # An expired entry stays physically present until evicted
            self._entries.expire()
            self._misses += 1
            return None

        self._hits += 1
        age = int(entry.age(self._timer()))
        return CacheHit(entry=entry, age=age, ttl=self.ttl_seconds)

    def store(
        self,
        method: str,
        url: str,
        payload: Any,
        headers: Mapping[str, str] | None = None,
        status_code: int = 200,
    ) -> CacheEntry | None:
        """Store a response.

        Only GET responses with a 2xx status are stored.

        Args:
            method: HTTP method.
            url: Full request URL.
            payload: Parsed response body.
            headers: Response headers to replay on a hit.
            status_code: HTTP status of the response.

        Returns:
            The stored CacheEntry, or None when the response is not cacheable.
        """
        if method != CACHEABLE_METHOD or not 200 <= status_code < 300:
            return None

        entry = CacheEntry.create(payload, captured_at=self._timer(), headers=headers)
        self._entries[CacheKey(method, url)] = entry
        return entry

    def miss_headers(self) -> dict[str, str]:
        """Return the headers marking a freshly stored response."""
        return {
            "X-Cache": "MISS",
            "Cache-Control": f"public, max-age={self.ttl_seconds}",
        }

    def sweep(self) -> int:
        """Evict every expired entry.

        Returns:
            Number of entries evicted.
        """
        expired = self._entries.expire()
        return len(expired) if expired is not None else 0

    def start(self) -> None:
        """Start the periodic sweep task on the running event loop."""
        if self._sweep_task is not None and not self._sweep_task.done():
            return
        self._sweep_task = asyncio.create_task(
            self._sweep_periodically(), name="response-cache-sweep"
        )

    async def stop(self) -> None:
        """Cancel the periodic sweep task and wait for it to finish."""
        task, self._sweep_task = self._sweep_task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    @property
    def running(self) -> bool:
        """Check if the sweep task is active."""
        return self._sweep_task is not None and not self._sweep_task.done()

    async def _sweep_periodically(self) -> None:
        interval = self._sweep_interval.total_seconds()
        while True:
            await asyncio.sleep(interval)
            removed = self.sweep()
            if removed:
                logger.debug("Response cache sweep evicted %d entries", removed)

    def clear(self) -> None:
        """Clear all entries and reset statistics."""
        self._entries.clear()
        self._hits = 0
        self._misses = 0

    def __len__(self) -> int:
        """Return the number of entries held."""
        return len(self._entries)
