"""Bounded in-memory cache for thread analyses with TTL support."""

from __future__ import annotations

import asyncio
import logging
import time
from collections import OrderedDict
from collections.abc import Awaitable, Callable

from napoleon_ai.core.config import CacheSettings
from napoleon_ai.core.models import AIAnalysis

LOGGER = logging.getLogger(__name__)


class CacheEntry:
    """Cache entry with optional expiration time."""

    __slots__ = ("value", "expires_at")

    def __init__(self, value: AIAnalysis, expires_at: float | None) -> None:
        self.value = value
        self.expires_at = expires_at

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now > self.expires_at


class AnalysisCache:
    """LRU cache of analyses keyed by thread id.

    Concurrent requests for the same key share a single in-flight call, so a
    thread is analysed at most once until its entry expires, is evicted or the
    cache is cleared. Failed calls are never stored.
    """

    def __init__(
        self,
        max_entries: int = 1024,
        ttl_seconds: float | None = 600,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._max_entries = max_entries
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._in_flight: dict[str, asyncio.Future[AIAnalysis]] = {}

    @classmethod
    def from_settings(
        cls, settings: CacheSettings, *, clock: Callable[[], float] = time.monotonic
    ) -> AnalysisCache:
        return cls(settings.max_entries, settings.ttl_seconds, clock=clock)

    def get(self, key: str) -> AIAnalysis | None:
        """Return the cached analysis if present and not expired."""
        entry = self._entries.get(key)
        if entry is None:
            LOGGER.debug("Analysis cache miss for thread %s", key)
            return None
        if entry.is_expired(self._clock()):
            LOGGER.debug("Analysis cache entry expired for thread %s", key)
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        LOGGER.debug("Analysis cache hit for thread %s", key)
        return entry.value

    def set(self, key: str, value: AIAnalysis) -> None:
        """Store ``value`` under ``key``, evicting the least recently used entry."""
        expires_at = None
        if self._ttl_seconds is not None:
            expires_at = self._clock() + self._ttl_seconds
        self._entries[key] = CacheEntry(value, expires_at)
        self._entries.move_to_end(key)
        while len(self._entries) > self._max_entries:
            evicted, _ = self._entries.popitem(last=False)
            LOGGER.debug("Evicted cached analysis for thread %s", evicted)

    async def get_or_create(
        self,
        key: str,
        factory: Callable[[], Awaitable[AIAnalysis]],
        *,
        validate: Callable[[AIAnalysis], None] | None = None,
    ) -> AIAnalysis:
        """Return the cached analysis or produce it once via ``factory``.

        ``validate`` runs before the result is stored; if it raises, the
        error propagates and nothing is cached.
        """
        cached = self.get(key)
        if cached is not None:
            return cached

        pending = self._in_flight.get(key)
        if pending is not None:
            LOGGER.debug("Joining in-flight analysis for thread %s", key)
            return await pending

        future: asyncio.Future[AIAnalysis] = asyncio.get_running_loop().create_future()
        self._in_flight[key] = future
        try:
            value = await factory()
            if validate is not None:
                validate(value)
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as exc:
            future.set_exception(exc)
            # Mark the exception as retrieved when nobody joined the request.
            future.exception()
            raise
        else:
            self.set(key, value)
            future.set_result(value)
            return value
        finally:
            self._in_flight.pop(key, None)

    def clear(self) -> int:
        """Drop every stored analysis and return how many were removed."""
        count = len(self._entries)
        self._entries.clear()
        LOGGER.info("Cleared %d cached analyses", count)
        return count

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries


__all__ = ["AnalysisCache", "CacheEntry"]
