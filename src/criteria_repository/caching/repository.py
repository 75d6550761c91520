"""CachedRepository - Decorator adding tagged read-through caching to a repository."""

from __future__ import annotations

import functools
import logging
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from ..config import RepositoryConfig
from ..query.pagination import DEFAULT_PER_PAGE
from .keys import CacheKeyDeriver
from .tags import TagResolver

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping, Sequence

    from sqlalchemy import Select
    from sqlalchemy.ext.asyncio import AsyncSession

    from ..criteria.collection import CriteriaSet, CriterionLike
    from ..criteria.standard import ConditionInput
    from ..persistence.repository import BaseRepository
    from ..ports.auth import IAuthContext
    from ..ports.cache import ITaggedCache
    from ..query.pagination import Page, SimplePage

T = TypeVar("T")
R = TypeVar("R")

logger = logging.getLogger("criteria_repository.caching")


class CachedRepository(Generic[T]):
    """
    Decorator that caches the reads of a ``BaseRepository``.

    Pattern:
    - read: derive key -> ``cache.remember`` -> on miss delegate to inner
    - write: flush the repository tag -> delegate to inner
    - builder methods: delegate to inner, return the decorator for chaining

    Every cached read resets the inner scope and pending query as well as a
    manual key set with ``set_cache_key``, whether the value came from the
    store, from the database or the cache was skipped.

    Args:
        inner: The repository doing the actual queries.
        cache: Tagged cache store.
        config: Cache options; defaults to ``RepositoryConfig()``.
        auth: Auth context consulted when user tagging is enabled.
    """

    def __init__(
        self,
        inner: BaseRepository[T],
        cache: ITaggedCache,
        config: RepositoryConfig | None = None,
        auth: IAuthContext | None = None,
        *,
        key_deriver: CacheKeyDeriver | None = None,
    ) -> None:
        self._inner = inner
        self._cache = cache
        self._config = config or RepositoryConfig()
        self._keys = key_deriver or CacheKeyDeriver()
        self._tags = TagResolver(type(inner), self._config.cache.guards, auth)
        self._skip = False
        self._manual_key: str | None = None

    @property
    def inner(self) -> BaseRepository[T]:
        return self._inner

    @property
    def entity(self) -> type[T]:
        return self._inner.entity

    @property
    def session(self) -> AsyncSession:
        return self._inner.session

    # -- cache controls --------------------------------------------------------

    def skip_cache(self, skip: bool = True) -> CachedRepository[T]:
        """Bypass the store for every following read until switched back."""
        self._skip = skip
        return self

    def use_user_tag(self, enabled: bool = True) -> CachedRepository[T]:
        """Group entries per authenticated principal."""
        self._tags.use_user_tag = enabled
        return self

    def set_user_tag(self, tag: Any) -> CachedRepository[T]:
        self._tags.set_override(tag)
        return self

    def clear_user_tag(self) -> CachedRepository[T]:
        self._tags.clear_override()
        return self

    def set_cache_key(self, key: str) -> CachedRepository[T]:
        """Use *key* verbatim for the next cached read only."""
        self._manual_key = key
        return self

    def get_tag(self) -> str:
        return self._tags.resolve()

    async def clear_cache(self, key: str | None = None) -> CachedRepository[T]:
        """Forget *key* under the current tag, or flush the whole tag."""
        tag = self.get_tag()
        if key:
            await self._cache.forget(key, tag)
            logger.debug("Forgot cache key %s (tag %s)", key, tag)
        else:
            await self._cache.flush(tag)
            logger.debug("Flushed cache tag %s", tag)
        return self

    @property
    def cache_active(self) -> bool:
        return self._config.cache.active and not self._skip

    # -- delegated builder methods ---------------------------------------------

    def push_criteria(self, criterion: CriterionLike) -> CachedRepository[T]:
        self._inner.push_criteria(criterion)
        return self

    def pop_criteria(self, criterion: CriterionLike) -> CachedRepository[T]:
        self._inner.pop_criteria(criterion)
        return self

    def get_criteria(self) -> CriteriaSet:
        return self._inner.get_criteria()

    def skip_criteria(self, skip: bool = True) -> CachedRepository[T]:
        self._inner.skip_criteria(skip)
        return self

    def clear_criteria(self) -> CachedRepository[T]:
        self._inner.clear_criteria()
        return self

    def apply_criteria(self, query: Select[Any] | None = None) -> Select[Any]:
        return self._inner.apply_criteria(query)

    def scope_query(
        self, callback: Callable[[Select[Any]], Select[Any]]
    ) -> CachedRepository[T]:
        self._inner.scope_query(callback)
        return self

    def apply_scope(self, query: Select[Any] | None = None) -> Select[Any]:
        return self._inner.apply_scope(query)

    def reset_scope(self) -> CachedRepository[T]:
        self._inner.reset_scope()
        return self

    def get_query(self) -> Select[Any]:
        return self._inner.get_query()

    def set_query(self, query: Select[Any]) -> CachedRepository[T]:
        self._inner.set_query(query)
        return self

    def reset_query(self) -> CachedRepository[T]:
        self._inner.reset_query()
        return self

    def preview_query(self) -> Select[Any]:
        return self._inner.preview_query()

    def order_by(self, column: str, direction: str = "asc") -> CachedRepository[T]:
        self._inner.order_by(column, direction)
        return self

    def with_relations(self, *relations: str) -> CachedRepository[T]:
        self._inner.with_relations(*relations)
        return self

    def where_has(
        self, relation: str, where: ConditionInput | None = None
    ) -> CachedRepository[T]:
        self._inner.where_has(relation, where)
        return self

    def where_doesnt_have(
        self, relation: str, where: ConditionInput | None = None
    ) -> CachedRepository[T]:
        self._inner.where_doesnt_have(relation, where)
        return self

    # -- cached reads ----------------------------------------------------------

    async def all(self, columns: Sequence[str] | None = None) -> list[Any]:
        return await self._remember(
            "all", {"columns": columns}, functools.partial(self._inner.all, columns)
        )

    async def get(self, columns: Sequence[str] | None = None) -> list[Any]:
        return await self._remember(
            "get", {"columns": columns}, functools.partial(self._inner.get, columns)
        )

    async def first(self, columns: Sequence[str] | None = None) -> Any | None:
        return await self._remember(
            "first",
            {"columns": columns},
            functools.partial(self._inner.first, columns),
        )

    async def first_or_new(
        self,
        attributes: Mapping[str, Any],
        values: Mapping[str, Any] | None = None,
    ) -> T:
        return await self._remember(
            "first_or_new",
            {"attributes": attributes, "values": values},
            functools.partial(self._inner.first_or_new, attributes, values),
        )

    async def find_by_id(
        self, entity_id: Any, columns: Sequence[str] | None = None
    ) -> Any | None:
        return await self._remember(
            "find_by_id",
            {"id": entity_id, "columns": columns},
            functools.partial(self._inner.find_by_id, entity_id, columns),
        )

    async def find_where(
        self, where: ConditionInput, columns: Sequence[str] | None = None
    ) -> list[Any]:
        return await self._remember(
            "find_where",
            {"where": where, "columns": columns},
            functools.partial(self._inner.find_where, where, columns),
        )

    async def find_where_in(
        self,
        column: str,
        values: Sequence[Any],
        columns: Sequence[str] | None = None,
    ) -> list[Any]:
        return await self._remember(
            "find_where_in",
            {"column": column, "values": list(values), "columns": columns},
            functools.partial(self._inner.find_where_in, column, values, columns),
        )

    async def find_where_not_in(
        self,
        column: str,
        values: Sequence[Any],
        columns: Sequence[str] | None = None,
    ) -> list[Any]:
        return await self._remember(
            "find_where_not_in",
            {"column": column, "values": list(values), "columns": columns},
            functools.partial(self._inner.find_where_not_in, column, values, columns),
        )

    async def find_by_field(
        self, field: str, value: Any, columns: Sequence[str] | None = None
    ) -> list[Any]:
        return await self._remember(
            "find_by_field",
            {"field": field, "value": value, "columns": columns},
            functools.partial(self._inner.find_by_field, field, value, columns),
        )

    async def paginate(
        self,
        per_page: int = DEFAULT_PER_PAGE,
        page: int = 1,
        columns: Sequence[str] | None = None,
    ) -> Page[Any]:
        return await self._remember(
            "paginate",
            {"per_page": per_page, "page": page, "columns": columns},
            functools.partial(self._inner.paginate, per_page, page, columns),
        )

    async def simple_paginate(
        self,
        per_page: int = DEFAULT_PER_PAGE,
        page: int = 1,
        columns: Sequence[str] | None = None,
    ) -> SimplePage[Any]:
        return await self._remember(
            "simple_paginate",
            {"per_page": per_page, "page": page, "columns": columns},
            functools.partial(self._inner.simple_paginate, per_page, page, columns),
        )

    async def count(self) -> int:
        return await self._remember("count", {}, self._inner.count)

    async def sum(self, column: str) -> Any:
        return await self._remember(
            "sum", {"column": column}, functools.partial(self._inner.sum, column)
        )

    # -- uncached reads --------------------------------------------------------

    async def find_or_fail(
        self, entity_id: Any, columns: Sequence[str] | None = None
    ) -> Any:
        return await self._inner.find_or_fail(entity_id, columns)

    async def chunk(
        self,
        size: int,
        callback: Callable[[list[Any]], Any],
        columns: Sequence[str] | None = None,
    ) -> bool:
        return await self._inner.chunk(size, callback, columns)

    # -- writes ----------------------------------------------------------------

    async def create(self, attributes: Mapping[str, Any]) -> T:
        await self._invalidate()
        return await self._inner.create(attributes)

    async def update(self, attributes: Mapping[str, Any], entity_id: Any) -> T:
        await self._invalidate()
        return await self._inner.update(attributes, entity_id)

    async def update_or_create(
        self,
        attributes: Mapping[str, Any],
        values: Mapping[str, Any] | None = None,
    ) -> T:
        await self._invalidate()
        return await self._inner.update_or_create(attributes, values)

    async def delete(self, entity_id: Any) -> bool:
        await self._invalidate()
        return await self._inner.delete(entity_id)

    # -- internals -------------------------------------------------------------

    def cache_key(self, method: str, arguments: Mapping[str, Any]) -> str:
        """Key the next *method* call with *arguments* would be stored under.

        Criteria take part only while they are applied; with
        ``skip_criteria`` on the key matches a read without criteria.
        """
        if self._manual_key is not None:
            return self._manual_key
        criteria = self._inner.get_criteria()
        return self._keys.derive(
            method,
            type(self._inner),
            self.get_tag(),
            dict(arguments),
            [] if criteria.skip else criteria,
            self._inner.preview_query(),
        )

    async def _remember(
        self,
        method: str,
        arguments: Mapping[str, Any],
        compute: Callable[[], Awaitable[R]],
    ) -> R:
        try:
            if not self.cache_active:
                logger.debug("Cache skipped for %s", method)
                return await compute()

            key = self.cache_key(method, arguments)
            tag = self.get_tag()
            logger.debug("Cache lookup for %s (tag %s)", key, tag)

            async def load() -> R:
                logger.debug("Cache miss for %s", key)
                return await compute()

            value = await self._cache.remember(
                key, self._config.cache.time, tag, load
            )
            return value  # type: ignore[no-any-return]
        finally:
            self._inner.reset_scope()
            self._inner.reset_query()
            self._manual_key = None

    async def _invalidate(self) -> None:
        self._manual_key = None
        tag = self.get_tag()
        await self._cache.flush(tag)
        logger.debug("Flushed cache tag %s before write", tag)
