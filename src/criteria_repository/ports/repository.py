"""ICriteriaRepository - Protocol for criteria-driven repositories."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    from sqlalchemy import Select

    from ..criteria.collection import CriteriaSet, CriterionLike
    from ..query.pagination import Page, SimplePage

T = TypeVar("T")


@runtime_checkable
class ICriteriaRepository(Protocol[T]):
    """
    Capabilities shared by ``BaseRepository`` and ``CachedRepository``.

    Builder methods return the repository for chaining; terminal methods
    are coroutines that consume the pending query and scope.
    """

    @property
    def entity(self) -> type[T]: ...

    # -- criteria ------------------------------------------------------------

    def push_criteria(self, criterion: CriterionLike) -> ICriteriaRepository[T]: ...

    def pop_criteria(self, criterion: CriterionLike) -> ICriteriaRepository[T]: ...

    def get_criteria(self) -> CriteriaSet: ...

    def skip_criteria(self, skip: bool = True) -> ICriteriaRepository[T]: ...

    def clear_criteria(self) -> ICriteriaRepository[T]: ...

    # -- scope and pending query -----------------------------------------------

    def scope_query(
        self, callback: Callable[[Select[Any]], Select[Any]]
    ) -> ICriteriaRepository[T]: ...

    def reset_scope(self) -> ICriteriaRepository[T]: ...

    def get_query(self) -> Select[Any]: ...

    def reset_query(self) -> ICriteriaRepository[T]: ...

    # -- reads -----------------------------------------------------------------

    async def all(self, columns: Sequence[str] | None = None) -> list[Any]: ...

    async def get(self, columns: Sequence[str] | None = None) -> list[Any]: ...

    async def first(self, columns: Sequence[str] | None = None) -> Any | None: ...

    async def find_by_id(
        self, entity_id: Any, columns: Sequence[str] | None = None
    ) -> Any | None: ...

    async def find_where(
        self,
        where: Mapping[str, Any] | Sequence[Sequence[Any]],
        columns: Sequence[str] | None = None,
    ) -> list[Any]: ...

    async def count(self) -> int: ...

    async def paginate(
        self,
        per_page: int = 15,
        page: int = 1,
        columns: Sequence[str] | None = None,
    ) -> Page[Any]: ...

    async def simple_paginate(
        self,
        per_page: int = 15,
        page: int = 1,
        columns: Sequence[str] | None = None,
    ) -> SimplePage[Any]: ...

    # -- writes ----------------------------------------------------------------

    async def create(self, attributes: Mapping[str, Any]) -> T: ...

    async def update(self, attributes: Mapping[str, Any], entity_id: Any) -> T: ...

    async def delete(self, entity_id: Any) -> bool: ...
