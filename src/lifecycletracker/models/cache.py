from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class CacheEntry(BaseModel):
    """Raw decoded registry payload stored under its request path."""

    key: str  # Request path, e.g. "/python/3.12"
    payload: Any  # Decoded JSON, validated by the client on every read
    inserted_at: float
    expires_at: float  # inserted_at + ttl_seconds, same clock

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class CacheStats(BaseModel):
    size: int
    keys: list[str]
