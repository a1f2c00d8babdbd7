"""Time-boxed in-memory cache with an injectable clock."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Generic, TypeVar

from binary_edge.common.types import Clock

T = TypeVar("T")


@dataclass
class _Entry(Generic[T]):
    value: T
    stored_at: float


class TTLCache(Generic[T]):
    """Keyed cache whose entries go stale after ``ttl`` seconds.

    Stale entries are kept so callers can fall back to them when a refresh
    fails (e.g. on HTTP 429). Pass ``clock`` to control staleness in tests.
    """

    def __init__(self, ttl: float, clock: Clock | None = None) -> None:
        if ttl < 0:
            raise ValueError(f"ttl must be >= 0, got {ttl}")
        self._ttl = ttl
        self._clock = clock or time.monotonic
        self._entries: dict[str, _Entry[T]] = {}

    @property
    def ttl(self) -> float:
        return self._ttl

    def get(self, key: str) -> T | None:
        """Return the cached value if present and fresh, else None."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.stored_at >= self._ttl:
            return None
        return entry.value

    def get_stale(self, key: str) -> T | None:
        """Return the cached value regardless of age."""
        entry = self._entries.get(key)
        return entry.value if entry is not None else None

    def put(self, key: str, value: T) -> None:
        self._entries[key] = _Entry(value=value, stored_at=self._clock())

    def age(self, key: str) -> float | None:
        """Seconds since ``key`` was stored, or None if absent."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        return self._clock() - entry.stored_at

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._entries
