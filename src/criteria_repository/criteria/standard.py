"""Standard criteria shipped with the package."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING, Any, Literal, Union, cast

from sqlalchemy import asc, desc, func, or_

from ..query.columns import column_for, statement_entity
from ..query.conditions import Condition, build_clause, normalize_conditions
from .base import BaseCriterion

if TYPE_CHECKING:
    from sqlalchemy import Select

DateValue = Union[date, datetime, str, None]
ConditionInput = Union[Mapping[str, Any], Sequence[Sequence[Any]]]


@dataclass(frozen=True)
class EqualsCriteria(BaseCriterion):
    """``column = value``."""

    column: str
    value: Any

    def apply(self, query: Select[Any]) -> Select[Any]:
        return query.where(column_for(query, self.column) == self.value)

    def describe(self) -> tuple[Any, ...]:
        return ("equals", self.column, self.value)


@dataclass(frozen=True)
class ContainsCriteria(BaseCriterion):
    """``column LIKE '%search%'``."""

    column: str
    search: str

    def apply(self, query: Select[Any]) -> Select[Any]:
        return query.where(column_for(query, self.column).like(f"%{self.search}%"))

    def describe(self) -> tuple[Any, ...]:
        return ("contains", self.column, self.search)


@dataclass(frozen=True)
class DateCriteria(BaseCriterion):
    """Inclusive bounds on a date/time column; either bound may be omitted."""

    date_from: DateValue = None
    date_to: DateValue = None
    column: str = "created_at"

    def apply(self, query: Select[Any]) -> Select[Any]:
        col = column_for(query, self.column)
        if self.date_from is not None:
            query = query.where(col >= self.date_from)
        if self.date_to is not None:
            query = query.where(col <= self.date_to)
        return query

    def describe(self) -> tuple[Any, ...]:
        return ("date", self.column, self.date_from, self.date_to)


@dataclass(frozen=True)
class DateRangeCriteria(BaseCriterion):
    """
    Date range on a column.

    With both bounds the column must fall ``BETWEEN`` them. With a single
    bound only the date part of the column is compared, so a ``date_to`` of
    ``2024-01-31`` includes rows stamped later that day.
    """

    date_from: DateValue = None
    date_to: DateValue = None
    column: str = "created_at"

    def apply(self, query: Select[Any]) -> Select[Any]:
        col = column_for(query, self.column)
        if self.date_from is not None and self.date_to is not None:
            return query.where(col.between(self.date_from, self.date_to))
        if self.date_from is not None:
            return query.where(func.date(col) >= _date_part(self.date_from))
        if self.date_to is not None:
            return query.where(func.date(col) <= _date_part(self.date_to))
        return query

    def describe(self) -> tuple[Any, ...]:
        return ("date_range", self.column, self.date_from, self.date_to)


def _date_part(value: date | datetime | str) -> str:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return value


@dataclass(frozen=True)
class FindWhereCriteria(BaseCriterion):
    """AND of conditions in ``find_where`` syntax.

    ``where`` is normalised to ``(column, operator, value)`` triples on
    construction.
    """

    where: ConditionInput

    def __post_init__(self) -> None:
        object.__setattr__(self, "where", normalize_conditions(self.where))

    @property
    def conditions(self) -> tuple[Condition, ...]:
        return self.where  # type: ignore[return-value]

    def apply(self, query: Select[Any]) -> Select[Any]:
        return query.where(build_clause(statement_entity(query), self.conditions))

    def describe(self) -> tuple[Any, ...]:
        return ("find_where", self.conditions)


@dataclass(frozen=True)
class FindWhereInCriteria(BaseCriterion):
    """``column IN (values)``."""

    column: str
    values: tuple[Any, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", tuple(self.values))

    def apply(self, query: Select[Any]) -> Select[Any]:
        return query.where(column_for(query, self.column).in_(self.values))

    def describe(self) -> tuple[Any, ...]:
        return ("find_where_in", self.column, self.values)


@dataclass(frozen=True)
class FindWhereNotInCriteria(BaseCriterion):
    """``column NOT IN (values)``."""

    column: str
    values: tuple[Any, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", tuple(self.values))

    def apply(self, query: Select[Any]) -> Select[Any]:
        return query.where(column_for(query, self.column).not_in(self.values))

    def describe(self) -> tuple[Any, ...]:
        return ("find_where_not_in", self.column, self.values)


@dataclass(frozen=True)
class FindWhereOrWhereCriteria(BaseCriterion):
    """
    Grouped disjunction: ``(where) OR (or_where[0]) OR (or_where[1]) ...``.

    The whole group is AND-ed onto the query, so it never widens filters
    applied by earlier criteria.
    """

    where: ConditionInput
    or_where: tuple[ConditionInput, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "where", normalize_conditions(self.where))
        object.__setattr__(
            self,
            "or_where",
            tuple(normalize_conditions(group) for group in self.or_where),
        )

    def apply(self, query: Select[Any]) -> Select[Any]:
        model = statement_entity(query)
        groups = [
            build_clause(model, cast("tuple[Condition, ...]", group))
            for group in (self.where, *self.or_where)
        ]
        return query.where(or_(*groups))

    def describe(self) -> tuple[Any, ...]:
        return ("find_where_or_where", self.where, self.or_where)


@dataclass(frozen=True)
class LimitCriteria(BaseCriterion):
    """Cap the number of returned rows."""

    limit: int

    def apply(self, query: Select[Any]) -> Select[Any]:
        return query.limit(self.limit)

    def describe(self) -> tuple[Any, ...]:
        return ("limit", self.limit)


@dataclass(frozen=True)
class OffsetCriteria(BaseCriterion):
    """Skip the first *offset* rows."""

    offset: int

    def apply(self, query: Select[Any]) -> Select[Any]:
        return query.offset(self.offset)

    def describe(self) -> tuple[Any, ...]:
        return ("offset", self.offset)


@dataclass(frozen=True)
class OrderByCriteria(BaseCriterion):
    """Append an ORDER BY clause."""

    column: str
    direction: Literal["asc", "desc"] = "asc"

    def apply(self, query: Select[Any]) -> Select[Any]:
        col = column_for(query, self.column)
        if self.direction.lower() == "desc":
            return query.order_by(desc(col))
        return query.order_by(asc(col))

    def describe(self) -> tuple[Any, ...]:
        return ("order_by", self.column, self.direction)
