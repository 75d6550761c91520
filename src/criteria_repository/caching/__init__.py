"""Tagged read-through caching for repositories."""

from __future__ import annotations

from .keys import CacheKeyDeriver
from .repository import CachedRepository
from .tags import TagResolver

__all__ = ["CacheKeyDeriver", "CachedRepository", "TagResolver"]
