"""
RequestCache - content-addressed response cache with TTL and bounded size.

Features:
- Keys derived from operation type, normalized prompt and normalized options
- Per-entry TTL, expired entries dropped lazily on lookup
- Oldest-created-first eviction once the cache grows past ``max_size``
- ``get_or_generate`` memoization for async generators
"""

import hashlib
import heapq
import json
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Generic, Mapping, TypeVar

from loguru import logger
from pydantic import BaseModel

T = TypeVar("T")


def normalize_prompt(prompt: str) -> str:
    return prompt.strip().lower()


def normalize_options(options: Mapping[str, Any] | BaseModel | None) -> str:
    """Serialize options with stable key ordering, ignoring unset values."""
    if options is None:
        return "{}"
    if isinstance(options, BaseModel):
        options = options.model_dump(exclude_none=True)
    cleaned = {k: v for k, v in options.items() if v is not None}
    return json.dumps(cleaned, sort_keys=True, separators=(",", ":"), default=str)


def build_cache_key(
    operation: str,
    prompt: str = "",
    options: Mapping[str, Any] | BaseModel | None = None,
) -> str:
    """Build the address of a request: ``<operation>:<sha256>``."""
    material = "\n".join(
        (operation, normalize_prompt(prompt), normalize_options(options))
    )
    digest = hashlib.sha256(material.encode()).hexdigest()
    return f"{operation}:{digest}"


@dataclass
class CacheEntry(Generic[T]):
    """A stored response and the moment it was stored."""

    key: str
    value: T
    created_at: datetime
    ttl: timedelta
    sequence: int = 0

    def expires_at(self) -> datetime:
        return self.created_at + self.ttl

    def is_expired(self, now: datetime) -> bool:
        """Expired strictly after ``created_at + ttl``."""
        return now > self.created_at + self.ttl


@dataclass
class CacheResult(Generic[T]):
    """Result from ``get_or_generate``."""

    data: T
    from_cache: bool


class RequestCache:
    """
    In-memory request cache.

    Usage:
        cache = RequestCache(max_size=200, default_ttl=timedelta(minutes=30))

        key = build_cache_key("text", prompt, options)
        result = await cache.get_or_generate(key, lambda: fetch(prompt))
        if result.from_cache:
            ...

    Eviction order is kept in a min-heap of ``(created_at, sequence, key)``.
    Heap items whose sequence no longer matches the live entry are stale
    and skipped.
    """

    def __init__(
        self,
        max_size: int = 200,
        default_ttl: timedelta = timedelta(minutes=30),
        clock: Callable[[], datetime] = datetime.now,
        debug: bool = False,
    ):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self._entries: dict[str, CacheEntry[Any]] = {}
        self._by_age: list[tuple[datetime, int, str]] = []
        self._sequence = 0
        self._max_size = max_size
        self._default_ttl = default_ttl
        self._clock = clock
        self._debug = debug
        self._stats = CacheStats()

    def generate_key(
        self,
        operation: str,
        prompt: str = "",
        options: Mapping[str, Any] | BaseModel | None = None,
    ) -> str:
        return build_cache_key(operation, prompt, options)

    def get(self, key: str) -> Any | None:
        """
        Get a live value from cache.

        Returns None on a miss; an expired entry is removed and counts as a miss.
        """
        entry = self._lookup(key)
        return entry.value if entry is not None else None

    def _lookup(self, key: str) -> CacheEntry[Any] | None:
        entry = self._entries.get(key)
        if entry is None:
            self._stats.misses += 1
            self._log(f"miss {key[:50]}")
            return None

        if entry.is_expired(self._clock()):
            del self._entries[key]
            self._stats.misses += 1
            self._stats.expirations += 1
            self._log(f"expired {key[:50]}")
            return None

        self._stats.hits += 1
        self._log(f"hit {key[:50]}")
        return entry

    def set(self, key: str, value: Any, ttl: timedelta | None = None) -> None:
        """
        Store a value.

        Args:
            key: Address from ``build_cache_key``
            value: Response to keep
            ttl: Lifetime, ``default_ttl`` when omitted
        """
        ttl = self._default_ttl if ttl is None else ttl
        now = self._clock()
        self._sequence += 1

        self._entries[key] = CacheEntry(
            key=key,
            value=value,
            created_at=now,
            ttl=ttl,
            sequence=self._sequence,
        )
        heapq.heappush(self._by_age, (now, self._sequence, key))
        self._log(f"store {key[:50]} for {ttl.total_seconds():.0f}s")

        while len(self._entries) > self._max_size:
            self._evict_oldest()
        self._compact()

    async def get_or_generate(
        self,
        key: str,
        generator: Callable[[], Awaitable[T]],
        ttl: timedelta | None = None,
    ) -> CacheResult[T]:
        """
        Return the cached value for ``key`` or generate, store and return it.

        If ``generator`` raises, nothing is stored and the error propagates.
        """
        cached = self._lookup(key)
        if cached is not None:
            return CacheResult(data=cached.value, from_cache=True)

        data = await generator()
        self.set(key, data, ttl)
        return CacheResult(data=data, from_cache=False)

    def delete(self, key: str) -> bool:
        """Drop ``key``; returns whether it was present."""
        if key in self._entries:
            del self._entries[key]
            self._log(f"delete {key[:50]}")
            return True
        return False

    def invalidate(self, pattern: str) -> int:
        """
        Invalidate all keys containing ``pattern``.

        Returns:
            Number of entries invalidated
        """
        keys_to_delete = [k for k in self._entries if pattern in k]
        for key in keys_to_delete:
            del self._entries[key]

        if keys_to_delete:
            self._log(f"invalidated {len(keys_to_delete)} entries matching {pattern!r}")

        return len(keys_to_delete)

    def clear(self) -> None:
        """Drop every entry and the eviction heap."""
        count = len(self._entries)
        self._entries.clear()
        self._by_age.clear()
        self._log(f"cleared {count} entries")

    def cleanup_expired(self) -> int:
        """Eagerly drop expired entries and return how many were removed."""
        now = self._clock()
        expired_keys = [k for k, v in self._entries.items() if v.is_expired(now)]
        for key in expired_keys:
            del self._entries[key]

        self._stats.expirations += len(expired_keys)
        self._compact()
        if expired_keys:
            self._log(f"cleanup dropped {len(expired_keys)} expired entries")

        return len(expired_keys)

    def _evict_oldest(self) -> None:
        """Evict the entry with the smallest creation time."""
        while self._by_age:
            _, sequence, key = heapq.heappop(self._by_age)
            entry = self._entries.get(key)
            if entry is None or entry.sequence != sequence:
                continue
            del self._entries[key]
            self._stats.evictions += 1
            self._log(f"evict {key[:50]}")
            return

    def _compact(self) -> None:
        """Drop stale heap items once they outnumber live entries."""
        if len(self._by_age) <= 2 * len(self._entries):
            return
        self._by_age = [
            (entry.created_at, entry.sequence, key)
            for key, entry in self._entries.items()
        ]
        heapq.heapify(self._by_age)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get_stats(self) -> "CacheStats":
        """Counters with the current size filled in."""
        self._stats.size = len(self._entries)
        self._stats.max_size = self._max_size
        return self._stats

    def _log(self, message: str) -> None:
        """Debug log, only when ``debug`` is on."""
        if self._debug:
            logger.debug(f"[RequestCache] {message}")


@dataclass
class CacheStats:
    """Counters since construction; size is refreshed by ``get_stats``."""

    hits: int = 0
    misses: int = 0
    evictions: int = 0
    expirations: int = 0
    size: int = 0
    max_size: int = 0

    @property
    def hit_rate(self) -> float:
        """Hits over lookups."""
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total

    def to_dict(self) -> dict[str, Any]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "expirations": self.expirations,
            "size": self.size,
            "max_size": self.max_size,
            "hit_rate": f"{self.hit_rate:.2%}",
        }
