"""
cache/store.py -- In-process TTL cache that fronts slow or rate-limited upstreams.

Avoids redundant upstream calls by memoizing successful responses for a
caller-chosen time-to-live. The TTL is passed per lookup, so one cache can
hold long-lived reference data (country info, 24 h) next to short-lived feeds
(news, 30 min).

Failure contract:
  fetch_fn raising UpstreamError  -> nothing is cached; the caller gets
                                     Lookup(value=empty, note=<reason>) and
                                     renders "no data" as a normal state.
  fetch_fn raising anything else  -> propagates (e.g. UpstreamNotFound, which
                                     the route turns into a 404).

Concurrency:
  Entry reads and writes happen under one lock. Misses additionally take a
  per-key lock so concurrent misses for the same key share a single upstream
  call: the waiter re-checks the entry once it gets the lock. A key lock is
  reference-counted by the callers waiting on it and dropped when the last
  one leaves, so failing keys leave nothing behind.

Growth:
  max_entries=0 keeps every key until it is overwritten or purged.
  A positive max_entries evicts the least recently used entry on overflow.
  purge_expired() drops stale entries; the API lifespan calls it periodically.

Any value returned by fetch_fn is cached, None included.

Usage:
    cache = TTLCache()
    lookup = cache.get_or_fetch("info:FR", 86400, lambda: fetch_country_info("FR", 10))
    lookup.value, lookup.note, lookup.from_cache
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from core.errors import UpstreamError

logger = logging.getLogger("travelglobe.cache")

T = TypeVar("T")

_MISSING = object()


@dataclass
class CacheEntry:
    value: Any
    fetched_at: float
    ttl: float

    def is_fresh(self, now: float, ttl: float | None = None) -> bool:
        return now - self.fetched_at < (self.ttl if ttl is None else ttl)


@dataclass(frozen=True)
class Lookup(Generic[T]):
    """Result of get_or_fetch: the value plus how it was obtained.

    note is set only when the upstream failed and value is the caller's
    empty placeholder.
    """

    value: T
    note: str | None = None
    from_cache: bool = False


@dataclass
class _KeyLock:
    lock: threading.Lock = field(default_factory=threading.Lock)
    holders: int = 0


class TTLCache:
    def __init__(self, max_entries: int = 0, clock: Callable[[], float] = time.monotonic) -> None:
        if max_entries < 0:
            raise ValueError("max_entries must be >= 0")
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()
        self._key_locks: dict[str, _KeyLock] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: str, ttl: float, default: Any = None) -> Any:
        """Return the cached value if present and younger than ttl, else default."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or not entry.is_fresh(now, ttl):
                return default
            self._entries.move_to_end(key)
            return entry.value

    def set(self, key: str, value: Any, ttl: float) -> None:
        """Store value for key with the current timestamp, replacing any existing entry."""
        with self._lock:
            self._entries[key] = CacheEntry(value=value, fetched_at=self._clock(), ttl=ttl)
            self._entries.move_to_end(key)
            if self.max_entries and len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted %s (max_entries=%d)", evicted, self.max_entries)

    def get_or_fetch(self, key: str, ttl: float, fetch_fn: Callable[[], T], empty: T | None = None) -> Lookup[T]:
        """Return a fresh cached value, or call fetch_fn and cache its result.

        An UpstreamError from fetch_fn is downgraded to Lookup(empty, note=...)
        and nothing is stored, so the next call retries the upstream.
        """
        cached = self.get(key, ttl, _MISSING)
        if cached is not _MISSING:
            return Lookup(value=cached, from_cache=True)

        with self._single_flight(key):
            cached = self.get(key, ttl, _MISSING)
            if cached is not _MISSING:
                return Lookup(value=cached, from_cache=True)
            try:
                value = fetch_fn()
            except UpstreamError as exc:
                logger.warning("Upstream fetch for %s failed: %s", key, exc.detail or exc.message)
                return Lookup(value=empty, note=exc.message)
            self.set(key, value, ttl)
            return Lookup(value=value)

    def purge_expired(self) -> int:
        """Delete every entry older than its own TTL. Returns the number removed."""
        now = self._clock()
        with self._lock:
            stale = [k for k, e in self._entries.items() if not e.is_fresh(now)]
            for key in stale:
                del self._entries[key]
        if stale:
            logger.info("Purged %d expired cache entries", len(stale))
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    @contextmanager
    def _single_flight(self, key: str) -> Iterator[None]:
        """Hold the per-key lock; the lock is forgotten once nobody holds or awaits it."""
        with self._lock:
            slot = self._key_locks.get(key)
            if slot is None:
                slot = self._key_locks[key] = _KeyLock()
            slot.holders += 1
        try:
            with slot.lock:
                yield
        finally:
            with self._lock:
                slot.holders -= 1
                if slot.holders == 0:
                    del self._key_locks[key]
