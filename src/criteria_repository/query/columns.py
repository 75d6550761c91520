"""Column and relationship lookup on mapped models."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import inspect as sa_inspect

from ..exceptions import EntityResolutionError, FieldNotFoundError

if TYPE_CHECKING:
    from sqlalchemy import Select
    from sqlalchemy.orm import Mapper


def model_mapper(model: Any) -> Mapper[Any]:
    """Return the ORM mapper of *model* or raise ``EntityResolutionError``."""
    if not isinstance(model, type):
        raise EntityResolutionError(model)
    mapper = sa_inspect(model, raiseerr=False)
    if mapper is None or not hasattr(mapper, "column_attrs"):
        raise EntityResolutionError(model)
    return mapper  # type: ignore[no-any-return]


def statement_entity(query: Select[Any]) -> type[Any]:
    """Return the primary mapped entity a ``Select`` was built from."""
    descriptions = query.column_descriptions
    entity = descriptions[0].get("entity") if descriptions else None
    if entity is None:
        raise EntityResolutionError(query)
    return entity  # type: ignore[no-any-return]


def resolve_column(model: type[Any], name: str) -> Any:
    """Return the instrumented attribute for column *name* on *model*."""
    mapper = model_mapper(model)
    if name in mapper.column_attrs:
        return getattr(model, name)
    descriptors = mapper.all_orm_descriptors
    if name in descriptors and name not in mapper.relationships:
        # hybrid properties and other queryable descriptors
        return getattr(model, name)
    raise FieldNotFoundError(name, model.__name__, list(mapper.column_attrs.keys()))


def resolve_relationship(model: type[Any], name: str) -> Any:
    """Return the relationship attribute *name* on *model*."""
    mapper = model_mapper(model)
    if name not in mapper.relationships:
        raise FieldNotFoundError(
            name, model.__name__, list(mapper.relationships.keys())
        )
    return getattr(model, name)


def column_for(query: Select[Any], name: str) -> Any:
    """Resolve *name* against the primary entity of *query*."""
    return resolve_column(statement_entity(query), name)
