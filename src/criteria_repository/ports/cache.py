"""ITaggedCache - Protocol for tag-addressable cache stores."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


@runtime_checkable
class ITaggedCache(Protocol):
    """
    Cache store grouping entries under a tag.

    Every entry belongs to exactly one tag; flushing a tag drops all of its
    entries at once. Implementations raise ``CacheStoreError`` when the
    backing store cannot be reached or a value cannot be (de)serialized.
    """

    async def remember(
        self,
        key: str,
        ttl: int,
        tag: str,
        compute: Callable[[], Awaitable[Any]],
    ) -> Any:
        """
        Return the live entry stored under *key*, or await *compute*, store
        its result under *key* and *tag* for *ttl* seconds and return it.
        ``None`` is a storable result.
        """
        ...

    async def forget(self, key: str, tag: str) -> None:
        """Drop a single entry. Missing keys are ignored."""
        ...

    async def flush(self, tag: str) -> None:
        """Drop every entry stored under *tag*."""
        ...
