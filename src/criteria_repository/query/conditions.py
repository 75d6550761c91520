"""
Condition syntax used by ``find_where`` and ``FindWhereCriteria``.

Accepted shapes::

    {"status": "active"}                       # column = value
    {"age": (">=", 18)}                        # column <operator> value
    [("age", ">=", 18), ("name", "like", "A%")]
    [("status", "active")]                     # 2-tuple means equality

Every shape is normalised to a tuple of ``(column, operator, value)`` triples
so that criteria built from equal input compare and describe identically.
"""

from __future__ import annotations

import operator as op_module
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import and_, true

from ..exceptions import InvalidConditionError
from .columns import resolve_column

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy import ColumnElement

Condition = tuple[str, str, Any]


def _in(column: Any, value: Any) -> Any:
    return column.in_(list(value))


def _not_in(column: Any, value: Any) -> Any:
    return column.not_in(list(value))


OPERATORS: dict[str, Callable[[Any, Any], Any]] = {
    "=": op_module.eq,
    "==": op_module.eq,
    "!=": op_module.ne,
    "<>": op_module.ne,
    "<": op_module.lt,
    "<=": op_module.le,
    ">": op_module.gt,
    ">=": op_module.ge,
    "like": lambda column, value: column.like(value),
    "not like": lambda column, value: column.not_like(value),
    "in": _in,
    "not in": _not_in,
}


def _freeze(value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        return tuple(sorted(value, key=repr))
    if isinstance(value, list):
        return tuple(value)
    return value


def _check_operator(operator: Any) -> str:
    if not isinstance(operator, str) or operator.lower() not in OPERATORS:
        raise InvalidConditionError(
            f"Unknown operator {operator!r}. "
            f"Valid operators: {', '.join(sorted(OPERATORS))}"
        )
    return operator.lower()


def _is_operator_pair(value: Any) -> bool:
    return (
        isinstance(value, tuple)
        and len(value) == 2
        and isinstance(value[0], str)
        and value[0].lower() in OPERATORS
    )


def normalize_conditions(
    conditions: Mapping[str, Any] | Sequence[Sequence[Any]],
) -> tuple[Condition, ...]:
    """Normalise any accepted condition shape to ``(column, op, value)`` triples."""
    normalized: list[Condition] = []

    if isinstance(conditions, Mapping):
        for column, value in conditions.items():
            if _is_operator_pair(value):
                operator, operand = value
                normalized.append(
                    (column, _check_operator(operator), _freeze(operand))
                )
            else:
                normalized.append((column, "=", _freeze(value)))
        return tuple(normalized)

    if isinstance(conditions, (str, bytes)) or not isinstance(conditions, Sequence):
        raise InvalidConditionError(
            f"Conditions must be a mapping or a sequence of tuples, "
            f"got {type(conditions).__name__}"
        )

    for item in conditions:
        if isinstance(item, (str, bytes)) or not isinstance(item, Sequence):
            raise InvalidConditionError(f"Malformed condition: {item!r}")
        if len(item) == 3:
            column, operator, operand = item
            normalized.append(
                (str(column), _check_operator(operator), _freeze(operand))
            )
        elif len(item) == 2:
            column, operand = item
            normalized.append((str(column), "=", _freeze(operand)))
        else:
            raise InvalidConditionError(f"Malformed condition: {item!r}")
    return tuple(normalized)


def build_clause(
    model: type[Any], conditions: tuple[Condition, ...]
) -> ColumnElement[bool]:
    """AND together normalised *conditions* as a SQLAlchemy expression."""
    clauses = [
        OPERATORS[operator](resolve_column(model, column), operand)
        for column, operator, operand in conditions
    ]
    if not clauses:
        return cast("ColumnElement[bool]", true())
    if len(clauses) == 1:
        return cast("ColumnElement[bool]", clauses[0])
    return and_(*clauses)
