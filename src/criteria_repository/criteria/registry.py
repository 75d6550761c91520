"""Registry mapping string identifiers to zero-argument criterion classes."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, TypeVar

from ..exceptions import InvalidCriterionError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from .base import ICriterion

logger = logging.getLogger("criteria_repository.criteria")

C = TypeVar("C", bound=type)


class CriterionRegistry:
    """
    Explicit name → class table used for pushing and popping criteria by name.

    Only classes that can be constructed without arguments are useful here;
    the check happens when the name is resolved to an instance, not at
    registration time, so parameterised classes can still be popped by name.

    Example::

        registry = CriterionRegistry()

        @registry.register("active")
        @dataclass(frozen=True)
        class ActiveCriteria(BaseCriterion):
            ...

        repo.push_criteria("active")
    """

    def __init__(self) -> None:
        self._classes: dict[str, type[ICriterion]] = {}

    def register(self, name: str) -> Callable[[C], C]:
        """Class decorator registering the decorated class under *name*."""

        def decorator(cls: C) -> C:
            self.add(name, cls)
            return cls

        return decorator

    def add(self, name: str, cls: type[ICriterion]) -> None:
        existing = self._classes.get(name)
        if existing is not None and existing is not cls:
            logger.warning(
                "Criterion name %r re-registered: %s replaces %s",
                name,
                cls.__qualname__,
                existing.__qualname__,
            )
        self._classes[name] = cls

    def remove(self, name: str) -> None:
        self._classes.pop(name, None)

    def lookup(self, name: str) -> type[ICriterion] | None:
        return self._classes.get(name)

    def create(self, name: str) -> ICriterion:
        """Instantiate the class registered under *name* with no arguments."""
        cls = self._classes.get(name)
        if cls is None:
            raise InvalidCriterionError(
                name, "no criterion registered under this name"
            )
        return instantiate(cls)

    def __contains__(self, name: object) -> bool:
        return name in self._classes

    def __iter__(self) -> Iterator[str]:
        return iter(self._classes)

    def __len__(self) -> int:
        return len(self._classes)


def instantiate(cls: type[ICriterion]) -> ICriterion:
    """Build *cls* with no arguments, reporting failures as invalid criteria."""
    try:
        return cls()
    except TypeError as e:
        raise InvalidCriterionError(
            cls, f"{cls.__qualname__} cannot be constructed without arguments"
        ) from e


default_registry = CriterionRegistry()
