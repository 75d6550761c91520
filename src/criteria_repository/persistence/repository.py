"""
BaseRepository - criteria-driven repository over an ``AsyncSession``.

Query state lives on the instance: a ``CriteriaSet`` that persists across
calls, a one-shot ``ScopeSlot`` and the pending ``Select`` held by a
``QuerySession``. Every terminal coroutine builds its statement as::

    scope(criteria(pending_query))

executes it, and resets the pending query and the scope whether or not the
call succeeded. Criteria stay until they are popped or cleared.

Writes ``flush`` the session but never commit; transaction boundaries belong
to the caller.
"""

from __future__ import annotations

import functools
import inspect
import logging
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from ..criteria.collection import CriteriaSet
from ..exceptions import EntityNotFoundError, MissingSessionError
from ..query.columns import model_mapper, resolve_column, resolve_relationship
from ..query.conditions import build_clause, normalize_conditions
from ..query.pagination import DEFAULT_PER_PAGE, Page, SimplePage
from ..query.scope import ScopeSlot
from ..query.session import QuerySession

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping, Sequence

    from sqlalchemy import Select
    from sqlalchemy.ext.asyncio import AsyncSession

    from ..criteria.collection import CriterionLike
    from ..criteria.registry import CriterionRegistry
    from ..criteria.standard import ConditionInput

T = TypeVar("T")
R = TypeVar("R")

logger = logging.getLogger("criteria_repository.repository")


def terminal(
    method: Callable[..., Awaitable[R]],
) -> Callable[..., Awaitable[R]]:
    """Reset the pending query and scope after *method*, even if it raises."""

    @functools.wraps(method)
    async def wrapper(self: BaseRepository[Any], *args: Any, **kwargs: Any) -> R:
        try:
            return await method(self, *args, **kwargs)
        finally:
            self.reset_query()
            self.reset_scope()

    return wrapper


class BaseRepository(Generic[T]):
    """
    Repository for one mapped SQLAlchemy model.

    Subclasses usually pin the model as a class attribute::

        class OrderRepository(BaseRepository[Order]):
            model = Order

        repo = OrderRepository(session)
        active = await repo.push_criteria(EqualsCriteria("status", "active")).all()

    Args:
        session: The ``AsyncSession`` statements are executed on.
        model: Mapped class; overrides the ``model`` class attribute.
        registry: Registry used to resolve criteria pushed by name.

    Raises:
        MissingSessionError: *session* is ``None``.
        EntityResolutionError: the model is not a mapped SQLAlchemy class.
    """

    model: ClassVar[type[Any] | None] = None

    def __init__(
        self,
        session: AsyncSession | None,
        model: type[T] | None = None,
        *,
        registry: CriterionRegistry | None = None,
    ) -> None:
        if session is None:
            raise MissingSessionError(
                f"{type(self).__name__} requires an AsyncSession"
            )
        entity = model if model is not None else type(self).model
        self._mapper = model_mapper(entity)
        self._model: type[T] = entity  # type: ignore[assignment]
        self._session = session
        self._criteria = CriteriaSet(registry)
        self._scope = ScopeSlot()
        self._query = QuerySession(entity)  # type: ignore[arg-type]

    @property
    def entity(self) -> type[T]:
        """The mapped class this repository reads and writes."""
        return self._model

    @property
    def session(self) -> AsyncSession:
        return self._session

    # -- criteria ------------------------------------------------------------

    def push_criteria(self, criterion: CriterionLike) -> BaseRepository[T]:
        self._criteria.push(criterion)
        return self

    def pop_criteria(self, criterion: CriterionLike) -> BaseRepository[T]:
        self._criteria.pop(criterion)
        return self

    def get_criteria(self) -> CriteriaSet:
        return self._criteria

    def skip_criteria(self, skip: bool = True) -> BaseRepository[T]:
        self._criteria.set_skip(skip)
        return self

    def clear_criteria(self) -> BaseRepository[T]:
        self._criteria.clear()
        return self

    def apply_criteria(self, query: Select[Any] | None = None) -> Select[Any]:
        """Return *query* (default: the pending query) with criteria applied."""
        return self._criteria.apply(query if query is not None else self._query.get())

    # -- scope ---------------------------------------------------------------

    def scope_query(
        self, callback: Callable[[Select[Any]], Select[Any]]
    ) -> BaseRepository[T]:
        """Transform the statement of the next terminal call only."""
        self._scope.set(callback)
        return self

    def apply_scope(self, query: Select[Any] | None = None) -> Select[Any]:
        """Return *query* passed through the scope without consuming it."""
        return self._scope.apply(query if query is not None else self._query.get())

    def reset_scope(self) -> BaseRepository[T]:
        self._scope.reset()
        return self

    # -- pending query ---------------------------------------------------------

    def get_query(self) -> Select[Any]:
        return self._query.get()

    def set_query(self, query: Select[Any]) -> BaseRepository[T]:
        self._query.set(query)
        return self

    def reset_query(self) -> BaseRepository[T]:
        self._query.reset()
        return self

    def preview_query(self) -> Select[Any]:
        """Pending query with the scope applied; nothing is consumed."""
        return self._scope.apply(self._query.get())

    def build_query(self) -> Select[Any]:
        """Statement the next terminal call would start from."""
        return self._scope.apply(self._criteria.apply(self._query.get()))

    # -- builder helpers -------------------------------------------------------

    def order_by(self, column: str, direction: str = "asc") -> BaseRepository[T]:
        col = resolve_column(self._model, column)
        ordering = col.desc() if direction.lower() == "desc" else col.asc()
        self._query.set(self._query.get().order_by(ordering))
        return self

    def with_relations(self, *relations: str) -> BaseRepository[T]:
        """Eager-load *relations* with ``selectinload``."""
        options = [
            selectinload(resolve_relationship(self._model, name))
            for name in relations
        ]
        self._query.set(self._query.get().options(*options))
        return self

    def where_has(
        self, relation: str, where: ConditionInput | None = None
    ) -> BaseRepository[T]:
        """Keep rows with at least one related row matching *where*."""
        self._query.set(self._query.get().where(self._relation_exists(relation, where)))
        return self

    def where_doesnt_have(
        self, relation: str, where: ConditionInput | None = None
    ) -> BaseRepository[T]:
        """Keep rows without any related row matching *where*."""
        self._query.set(
            self._query.get().where(~self._relation_exists(relation, where))
        )
        return self

    def _relation_exists(self, relation: str, where: ConditionInput | None) -> Any:
        attr = resolve_relationship(self._model, relation)
        prop = attr.property
        related = prop.mapper.class_
        clause = (
            build_clause(related, normalize_conditions(where)) if where else None
        )
        if prop.uselist:
            return attr.any(clause)
        return attr.has(clause)

    # -- reads -----------------------------------------------------------------

    @terminal
    async def all(self, columns: Sequence[str] | None = None) -> list[Any]:
        return await self._fetch_all(self.build_query(), columns)

    @terminal
    async def get(self, columns: Sequence[str] | None = None) -> list[Any]:
        return await self._fetch_all(self.build_query(), columns)

    @terminal
    async def first(self, columns: Sequence[str] | None = None) -> Any | None:
        return await self._fetch_first(self.build_query(), columns)

    @terminal
    async def first_or_new(
        self,
        attributes: Mapping[str, Any],
        values: Mapping[str, Any] | None = None,
    ) -> T:
        """First row matching *attributes*, or an unsaved instance built from
        *attributes* and *values*. The new instance is not added to the session.
        """
        query = self.build_query().where(
            build_clause(self._model, normalize_conditions(attributes))
        )
        found = await self._fetch_first(query, None)
        if found is not None:
            return found  # type: ignore[no-any-return]
        return self._model(**{**attributes, **(values or {})})

    @terminal
    async def find_by_id(
        self, entity_id: Any, columns: Sequence[str] | None = None
    ) -> Any | None:
        query = self._by_id(self.build_query(), entity_id)
        return await self._fetch_first(query, columns)

    @terminal
    async def find_or_fail(
        self, entity_id: Any, columns: Sequence[str] | None = None
    ) -> Any:
        found = await self._fetch_first(
            self._by_id(self.build_query(), entity_id), columns
        )
        if found is None:
            raise EntityNotFoundError(self._model.__name__, entity_id)
        return found

    @terminal
    async def find_where(
        self, where: ConditionInput, columns: Sequence[str] | None = None
    ) -> list[Any]:
        """Rows matching *where* (see ``query.conditions`` for the syntax)."""
        clause = build_clause(self._model, normalize_conditions(where))
        return await self._fetch_all(self.build_query().where(clause), columns)

    @terminal
    async def find_where_in(
        self,
        column: str,
        values: Sequence[Any],
        columns: Sequence[str] | None = None,
    ) -> list[Any]:
        col = resolve_column(self._model, column)
        query = self.build_query().where(col.in_(list(values)))
        return await self._fetch_all(query, columns)

    @terminal
    async def find_where_not_in(
        self,
        column: str,
        values: Sequence[Any],
        columns: Sequence[str] | None = None,
    ) -> list[Any]:
        col = resolve_column(self._model, column)
        query = self.build_query().where(col.not_in(list(values)))
        return await self._fetch_all(query, columns)

    @terminal
    async def find_by_field(
        self, field: str, value: Any, columns: Sequence[str] | None = None
    ) -> list[Any]:
        col = resolve_column(self._model, field)
        return await self._fetch_all(self.build_query().where(col == value), columns)

    @terminal
    async def chunk(
        self,
        size: int,
        callback: Callable[[list[Any]], Any],
        columns: Sequence[str] | None = None,
    ) -> bool:
        """
        Feed matching rows to *callback* in batches of *size*.

        Batches are ordered by primary key after any existing ordering.
        *callback* may be a plain function or a coroutine function; returning
        ``False`` stops iteration, in which case ``False`` is returned.
        """
        if size <= 0:
            raise ValueError("chunk size must be positive")
        query = self.build_query().order_by(*self._mapper.primary_key)
        page = 0
        while True:
            batch = await self._fetch_all(
                query.limit(size).offset(page * size), columns
            )
            if not batch:
                return True
            outcome = callback(batch)
            if inspect.isawaitable(outcome):
                outcome = await outcome
            if outcome is False:
                return False
            if len(batch) < size:
                return True
            page += 1

    @terminal
    async def count(self) -> int:
        return await self._count(self.build_query())

    @terminal
    async def sum(self, column: str) -> Any:
        """Sum of *column* over matching rows; ``0`` when nothing matches."""
        col = resolve_column(self._model, column)
        sub = self.build_query().with_only_columns(col.label("value")).subquery()
        result = await self._session.execute(
            select(func.coalesce(func.sum(sub.c.value), 0))
        )
        return result.scalar_one()

    @terminal
    async def paginate(
        self,
        per_page: int = DEFAULT_PER_PAGE,
        page: int = 1,
        columns: Sequence[str] | None = None,
    ) -> Page[Any]:
        per_page, page = _page_bounds(per_page, page)
        query = self.build_query()
        total = await self._count(query)
        items = await self._fetch_all(
            query.limit(per_page).offset((page - 1) * per_page), columns
        )
        return Page(items=items, total=total, per_page=per_page, current_page=page)

    @terminal
    async def simple_paginate(
        self,
        per_page: int = DEFAULT_PER_PAGE,
        page: int = 1,
        columns: Sequence[str] | None = None,
    ) -> SimplePage[Any]:
        per_page, page = _page_bounds(per_page, page)
        query = self.build_query().limit(per_page + 1).offset((page - 1) * per_page)
        items = await self._fetch_all(query, columns)
        return SimplePage(
            items=items[:per_page],
            per_page=per_page,
            current_page=page,
            has_more=len(items) > per_page,
        )

    # -- writes ----------------------------------------------------------------

    @terminal
    async def create(self, attributes: Mapping[str, Any]) -> T:
        """Insert a new row. Criteria and scope do not take part."""
        instance = self._model(**attributes)
        self._session.add(instance)
        await self._session.flush()
        logger.debug("Created %s", self._model.__name__)
        return instance

    @terminal
    async def update(self, attributes: Mapping[str, Any], entity_id: Any) -> T:
        """Update the row with *entity_id* among rows matching criteria and scope.

        Raises:
            EntityNotFoundError: no such row is visible to this repository.
        """
        instance = await self._locate(entity_id)
        self._assign(instance, attributes)
        await self._session.flush()
        logger.debug("Updated %s id=%s", self._model.__name__, entity_id)
        return instance

    @terminal
    async def update_or_create(
        self,
        attributes: Mapping[str, Any],
        values: Mapping[str, Any] | None = None,
    ) -> T:
        """Update the first row matching *attributes* with *values*, or create
        one from both mappings.
        """
        values = values or {}
        query = self.build_query().where(
            build_clause(self._model, normalize_conditions(attributes))
        )
        instance = await self._fetch_first(query, None)
        if instance is None:
            instance = self._model(**{**attributes, **values})
            self._session.add(instance)
        else:
            self._assign(instance, values)
        await self._session.flush()
        return instance  # type: ignore[no-any-return]

    @terminal
    async def delete(self, entity_id: Any) -> bool:
        """Delete the row with *entity_id*.

        Raises:
            EntityNotFoundError: no such row is visible to this repository.
        """
        instance = await self._locate(entity_id)
        await self._session.delete(instance)
        await self._session.flush()
        logger.debug("Deleted %s id=%s", self._model.__name__, entity_id)
        return True

    # -- execution helpers -----------------------------------------------------

    def _by_id(self, query: Select[Any], entity_id: Any) -> Select[Any]:
        pk = self._mapper.primary_key
        if len(pk) == 1:
            return query.where(pk[0] == entity_id)
        return query.where(*(col == value for col, value in zip(pk, entity_id)))

    def _project(self, query: Select[Any], columns: Sequence[str]) -> Select[Any]:
        cols = [resolve_column(self._model, name) for name in columns]
        return query.with_only_columns(*cols)

    async def _fetch_all(
        self, query: Select[Any], columns: Sequence[str] | None
    ) -> list[Any]:
        if columns:
            result = await self._session.execute(self._project(query, columns))
            return [dict(row) for row in result.mappings().all()]
        result = await self._session.execute(query)
        return list(result.scalars().all())

    async def _fetch_first(
        self, query: Select[Any], columns: Sequence[str] | None
    ) -> Any | None:
        rows = await self._fetch_all(query.limit(1), columns)
        return rows[0] if rows else None

    async def _count(self, query: Select[Any]) -> int:
        stmt = select(func.count()).select_from(query.subquery())
        result = await self._session.execute(stmt)
        return int(result.scalar_one())

    async def _locate(self, entity_id: Any) -> T:
        instance = await self._fetch_first(
            self._by_id(self.build_query(), entity_id), None
        )
        if instance is None:
            raise EntityNotFoundError(self._model.__name__, entity_id)
        return instance  # type: ignore[no-any-return]

    def _assign(self, instance: Any, attributes: Mapping[str, Any]) -> None:
        for name, value in attributes.items():
            resolve_column(self._model, name)
            setattr(instance, name, value)


def _page_bounds(per_page: int, page: int) -> tuple[int, int]:
    return max(1, int(per_page)), max(1, int(page))
