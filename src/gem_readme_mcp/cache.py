"""In-memory TTL cache and the cache-key builders used by the tools."""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# ─── TTLs (seconds) ──────────────────────────────────────────

SEARCH_TTL = 600  # 10 minutes
PACKAGE_INFO_TTL = 3600
README_TTL = 3600


@dataclass(frozen=True, slots=True)
class CacheEntry:
    value: object
    expires_at: float


class MemoryCache:
    """Key-value store whose entries expire ``ttl`` seconds after ``set``.

    Expiration is lazy: an expired entry reads as absent and is dropped on
    access. When ``max_entries`` is set and the cache is full, expired entries
    are purged first, then the oldest insertion is evicted.
    """

    def __init__(
        self,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._max_entries = max_entries
        self._clock = clock

    def get(self, key: str) -> object | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            del self._entries[key]
            return None
        return entry.value

    def set(self, key: str, value: object, ttl: float) -> None:
        # Re-insert so replaced keys move to the end of the eviction order.
        self._entries.pop(key, None)
        if self._max_entries is not None and len(self._entries) >= self._max_entries:
            self._make_room()
        self._entries[key] = CacheEntry(value=value, expires_at=self._clock() + ttl)

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def purge_expired(self) -> int:
        """Drop every expired entry. Returns the number removed."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if now >= entry.expires_at]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)

    def _make_room(self) -> None:
        if self.purge_expired():
            return
        oldest = next(iter(self._entries))
        del self._entries[oldest]
        logger.debug("Cache full (%d entries), evicted %s", self._max_entries, oldest)


# ─── Key builders ────────────────────────────────────────────


def _key(*parts: object) -> str:
    # JSON keeps absent values as a fixed null placeholder and escapes any
    # delimiter that might appear inside a free-text query.
    return json.dumps(parts, separators=(",", ":"))


def _canonical_score(value: float | None) -> float | None:
    return None if value is None else float(value)


def search_results_key(
    query: str,
    limit: int,
    popularity: float | None,
    quality: float | None,
) -> str:
    return _key(
        "search",
        query,
        int(limit),
        _canonical_score(popularity),
        _canonical_score(quality),
    )


def gem_info_key(name: str) -> str:
    return _key("gem", name)


def gem_versions_key(name: str) -> str:
    return _key("versions", name)


def readme_key(name: str, version: str, include_examples: bool) -> str:
    return _key("readme", name, version, include_examples)


def package_info_key(name: str, include_dependencies: bool, include_dev_dependencies: bool) -> str:
    return _key("info", name, include_dependencies, include_dev_dependencies)
