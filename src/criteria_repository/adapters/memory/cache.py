"""InMemoryTaggedCache - testing and single-process implementation of ITaggedCache."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger("criteria_repository.memory_cache")


@dataclass
class _Entry:
    value: Any
    expires_at: float


class InMemoryTaggedCache:
    """
    Dict-backed tagged cache.

    Entries are addressed by ``(tag, key)``; the same key under two tags
    names two entries. Expiry is checked lazily on read against *clock*
    (``time.monotonic`` unless injected). A ``ttl`` of zero or less means
    the computed value is returned but not stored.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, dict[str, _Entry]] = {}

    async def remember(
        self,
        key: str,
        ttl: int,
        tag: str,
        compute: Callable[[], Awaitable[Any]],
    ) -> Any:
        bucket = self._entries.get(tag, {})
        entry = bucket.get(key)
        if entry is not None:
            if entry.expires_at > self._clock():
                return entry.value
            del bucket[key]

        value = await compute()
        if ttl > 0:
            self._entries.setdefault(tag, {})[key] = _Entry(
                value, self._clock() + ttl
            )
        return value

    async def forget(self, key: str, tag: str) -> None:
        self._entries.get(tag, {}).pop(key, None)

    async def flush(self, tag: str) -> None:
        removed = self._entries.pop(tag, {})
        logger.debug("Flushed %d entries under tag %s", len(removed), tag)

    # -- introspection (tests) ---------------------------------------------

    def has(self, key: str, tag: str) -> bool:
        entry = self._entries.get(tag, {}).get(key)
        return entry is not None and entry.expires_at > self._clock()

    def keys(self, tag: str) -> list[str]:
        return list(self._entries.get(tag, {}))

    def clear(self) -> None:
        self._entries.clear()
