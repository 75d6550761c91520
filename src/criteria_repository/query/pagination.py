"""Pagination result containers."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

T = TypeVar("T")

DEFAULT_PER_PAGE = 15


@dataclass(frozen=True)
class Page(Generic[T]):
    """A page of results together with the total row count."""

    items: list[T] = field(default_factory=list)
    total: int = 0
    per_page: int = DEFAULT_PER_PAGE
    current_page: int = 1

    @property
    def last_page(self) -> int:
        return max(1, math.ceil(self.total / self.per_page)) if self.per_page else 1

    @property
    def has_more(self) -> bool:
        return self.current_page < self.last_page

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": list(self.items),
            "total": self.total,
            "per_page": self.per_page,
            "current_page": self.current_page,
            "last_page": self.last_page,
        }


@dataclass(frozen=True)
class SimplePage(Generic[T]):
    """A page of results without a total count.

    ``has_more`` is detected by fetching one row past the page size.
    """

    items: list[T] = field(default_factory=list)
    per_page: int = DEFAULT_PER_PAGE
    current_page: int = 1
    has_more: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": list(self.items),
            "per_page": self.per_page,
            "current_page": self.current_page,
            "has_more": self.has_more,
        }
