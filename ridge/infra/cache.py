"""A bounded, thread-safe cache whose entries expire after a fixed time."""

from __future__ import annotations

import hashlib
import threading
import time
from datetime import timedelta
from typing import Generic, TypeVar

T = TypeVar("T")


class Cache(Generic[T]):
    """TTL cache holding at most max_size entries.

    When full, expired entries are dropped first, then the entry closest to
    expiry.
    """

    def __init__(self, ttl: float | timedelta, max_size: int) -> None:
        self._ttl = ttl.total_seconds() if isinstance(ttl, timedelta) else float(ttl)
        self._max_size = max_size
        self._entries: dict[str, tuple[T, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str, default: T | None = None) -> T | None:
        """The cached value, or default if missing or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return default
            value, expires_at = entry
            if time.monotonic() > expires_at:
                del self._entries[key]
                return default
            return value

    def put(self, key: str, value: T) -> None:
        """Store a value, evicting to stay within the size bound."""
        with self._lock:
            now = time.monotonic()
            for stale in [k for k, (_, exp) in self._entries.items() if now > exp]:
                del self._entries[stale]

            if self._entries and len(self._entries) >= self._max_size:
                oldest = min(self._entries, key=lambda k: self._entries[k][1])
                del self._entries[oldest]

            self._entries[key] = (value, now + self._ttl)

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        """Number of entries, possibly including expired ones."""
        with self._lock:
            return len(self._entries)


def cache_key(abs_path: str, opts_string: str) -> str:
    """Deterministic 32-hex-digit key from a path and an options string."""
    digest = hashlib.sha256(f"{abs_path}|{opts_string}".encode()).digest()
    return digest[:16].hex()