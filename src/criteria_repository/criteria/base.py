"""Criterion primitives."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from sqlalchemy import Select


@runtime_checkable
class ICriterion(Protocol):
    """
    Protocol for query criteria.

    A criterion is an immutable predicate transformer: ``apply`` receives a
    ``Select`` statement and returns a new one, and depends on nothing but the
    statement and the criterion's own fields.
    """

    def apply(self, query: Select[Any]) -> Select[Any]:
        """Return *query* transformed by this criterion."""
        ...

    def describe(self) -> tuple[Any, ...]:
        """
        Return structural key material: a type tag followed by field values.
        Two criteria of the same type with equal fields describe identically.
        """
        ...


class BaseCriterion(ABC):
    """Base class for criteria shipped with the package.

    Subclasses are frozen dataclasses, so equality is structural and
    instances cannot be mutated after being pushed.
    """

    @abstractmethod
    def apply(self, query: Select[Any]) -> Select[Any]: ...

    @abstractmethod
    def describe(self) -> tuple[Any, ...]: ...

    @classmethod
    def identifier(cls) -> str:
        """Fully-qualified class name, usable with ``CriteriaSet.pop``."""
        return f"{cls.__module__}.{cls.__qualname__}"
