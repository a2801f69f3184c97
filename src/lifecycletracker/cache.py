"""In-memory registry response cache with a fixed time-to-live.

One ``ResponseCache`` belongs to one ``RegistryClient``; there is no
process-wide instance. Entries expire lazily: an expired entry is reported as
a miss on lookup and replaced by the next ``set``. There is no background
sweep.

Writes replace a single key at once, which is safe under asyncio's
cooperative scheduling. A thread-based caller would need a lock around
``get``/``set``.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

import structlog

from lifecycletracker.models.cache import CacheEntry, CacheStats

if TYPE_CHECKING:
    from collections.abc import Callable

log = structlog.get_logger()


class ResponseCache:
    """TTL cache keyed by registry request path. Implements CacheProtocol."""

    def __init__(self, ttl_seconds: float, *, clock: Callable[[], float] = time.monotonic) -> None:
        if ttl_seconds < 0:
            raise ValueError(f"ttl_seconds must be >= 0, got {ttl_seconds}")
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    def get(self, key: str) -> Any | None:
        """Return the cached payload, or ``None`` on a miss or expired entry."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            log.debug("cache_entry_expired", key=key)
            return None
        return entry.payload

    def set(self, key: str, payload: Any) -> None:
        now = self._clock()
        self._entries[key] = CacheEntry(
            key=key,
            payload=payload,
            inserted_at=now,
            expires_at=now + self._ttl_seconds,
        )

    def clear(self) -> None:
        cleared = len(self._entries)
        self._entries.clear()
        log.debug("cache_cleared", entries=cleared)

    def stats(self) -> CacheStats:
        """Report every stored key, expired or not, in insertion order."""
        return CacheStats(size=len(self._entries), keys=list(self._entries))
