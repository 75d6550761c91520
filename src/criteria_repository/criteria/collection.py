"""CriteriaSet - ordered, skippable collection of criteria."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Union

from ..exceptions import InvalidCriterionError
from .base import ICriterion
from .registry import CriterionRegistry, default_registry, instantiate

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from sqlalchemy import Select

logger = logging.getLogger("criteria_repository.criteria")

CriterionLike = Union[ICriterion, type, str]


def _qualified_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


def _is_criterion_class(value: type) -> bool:
    return callable(getattr(value, "apply", None)) and callable(
        getattr(value, "describe", None)
    )


class CriteriaSet:
    """
    Criteria attached to one repository instance.

    Insertion order is application order. ``pop`` removes every entry of
    the matching concrete type (subclasses are not matched). The ``skip``
    flag turns ``apply`` into a no-op without discarding the contents.
    """

    def __init__(self, registry: CriterionRegistry | None = None) -> None:
        self._registry = registry if registry is not None else default_registry
        self._items: list[ICriterion] = []
        self.skip = False

    # -- mutation ------------------------------------------------------------

    def push(self, criterion: CriterionLike) -> ICriterion:
        """Append a criterion instance, zero-argument class, or registered name.

        Returns the criterion instance that was appended.

        Raises:
            InvalidCriterionError: *criterion* cannot be resolved to an
                ``ICriterion`` instance.
        """
        resolved = self._resolve(criterion)
        self._items.append(resolved)
        logger.debug("Pushed criterion %s", type(resolved).__name__)
        return resolved

    def pop(self, criterion: CriterionLike) -> int:
        """Remove every entry whose concrete type matches *criterion*.

        Accepts an instance (matched by its type), a class, a registered name
        or a fully-qualified class name. Returns the number of removed
        entries; removing nothing is not an error.
        """
        matches = self._matcher(criterion)
        before = len(self._items)
        self._items = [item for item in self._items if not matches(type(item))]
        removed = before - len(self._items)
        if removed:
            logger.debug("Popped %d criteria matching %r", removed, criterion)
        return removed

    def clear(self) -> None:
        """Remove all criteria. The skip flag is left untouched."""
        self._items = []

    def set_skip(self, skip: bool = True) -> None:
        self.skip = skip

    # -- application -------------------------------------------------------

    def apply(self, query: Select[Any]) -> Select[Any]:
        """Fold the criteria over *query* in insertion order."""
        if self.skip:
            return query
        for criterion in self._items:
            query = criterion.apply(query)
        return query

    def describe(self) -> list[tuple[Any, ...]]:
        """Structural description of every criterion, in order."""
        return [criterion.describe() for criterion in self._items]

    # -- container protocol ------------------------------------------------

    def __iter__(self) -> Iterator[ICriterion]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __repr__(self) -> str:
        names = ", ".join(type(c).__name__ for c in self._items)
        return f"CriteriaSet([{names}], skip={self.skip})"

    # -- helpers -------------------------------------------------------------

    def _resolve(self, criterion: CriterionLike) -> ICriterion:
        if isinstance(criterion, str):
            return self._registry.create(criterion)
        if isinstance(criterion, type):
            if not _is_criterion_class(criterion):
                raise InvalidCriterionError(
                    criterion, "class does not implement apply() and describe()"
                )
            return instantiate(criterion)
        if isinstance(criterion, ICriterion):
            return criterion
        raise InvalidCriterionError(criterion)

    def _matcher(self, criterion: CriterionLike) -> Callable[[type], bool]:
        if isinstance(criterion, str):
            registered = self._registry.lookup(criterion)
            return lambda cls: cls is registered or _qualified_name(cls) == criterion
        target = criterion if isinstance(criterion, type) else type(criterion)
        return lambda cls: cls is target
