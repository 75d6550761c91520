"""Redis adapters."""

from __future__ import annotations

from .cache import RedisTaggedCache

__all__ = ["RedisTaggedCache"]
