"""Repository configuration models."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CacheConfig(BaseModel):
    """Cache options shared by every ``CachedRepository``.

    Attributes:
        active: Global switch. When ``False`` cached terminals execute
            directly and never touch the store.
        time: Entry time-to-live in seconds.
        guards: Auth guard names, in lookup order, used to derive a
            per-principal cache tag.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    active: bool = True
    time: int = Field(default=3600, ge=0)
    guards: tuple[str, ...] = ("web", "api")


class RepositoryConfig(BaseModel):
    """Top-level configuration passed explicitly to repositories."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    cache: CacheConfig = Field(default_factory=CacheConfig)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> RepositoryConfig:
        """Build from a nested mapping such as ``{"cache": {"time": 60}}``.

        Unknown keys are rejected by validation; missing keys use defaults.
        """
        return cls.model_validate(dict(data or {}))
