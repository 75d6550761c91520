"""Exception hierarchy for criteria-repository."""

from __future__ import annotations

from difflib import get_close_matches
from typing import Any


class RepositoryError(Exception):
    """Root exception for the entire criteria-repository package."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": str(self),
        }


class InvalidCriterionError(RepositoryError):
    """Raised when a value pushed as criterion does not satisfy the contract.

    Usage: ``CriteriaSet.push`` raises this for anything that is neither an
    ``ICriterion`` instance, a zero-argument criterion class, nor a name
    known to the criterion registry.
    """

    def __init__(self, value: object, reason: str | None = None) -> None:
        self.value = value
        self.reason = reason
        if isinstance(value, str):
            label = value
        elif isinstance(value, type):
            label = value.__qualname__
        else:
            label = type(value).__name__
        msg = f"{label!r} is not a criterion or a resolvable criterion identifier"
        if reason:
            msg += f" - {reason}"
        super().__init__(msg)


class EntityResolutionError(RepositoryError):
    """Raised when the configured entity model is not a mapped SQLAlchemy class."""

    def __init__(self, model: object) -> None:
        self.model = model
        name = getattr(model, "__name__", repr(model))
        super().__init__(f"Given class ({name}) must be a mapped SQLAlchemy model")


class MissingSessionError(RepositoryError):
    """Raised when a repository is used without an ``AsyncSession``."""


class NotFoundError(RepositoryError):
    """Raised when a requested row does not exist."""


class EntityNotFoundError(NotFoundError):
    """Raised by find-or-fail lookups when no row matches the primary key."""

    def __init__(self, entity_type: str, entity_id: object) -> None:
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id={entity_id!r} not found")


class InvalidConditionError(RepositoryError):
    """Raised when a ``find_where`` condition cannot be interpreted."""


class FieldNotFoundError(RepositoryError):
    """
    Invalid column name with fuzzy-matched suggestions.

    Example error message::

        Invalid field 'stauts' on 'Order'.
        Did you mean one of these?
          • status

        Available fields: created_at, id, status, total
    """

    def __init__(
        self,
        invalid_field: str,
        model_name: str,
        available_fields: list[str],
        cutoff: float = 0.6,
    ) -> None:
        self.invalid_field = invalid_field
        self.model_name = model_name
        self.available_fields = available_fields
        self.suggestions = get_close_matches(
            invalid_field, available_fields, n=5, cutoff=cutoff
        )
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        lines = [f"Invalid field '{self.invalid_field}' on '{self.model_name}'."]
        if self.suggestions:
            lines.append("Did you mean one of these?")
            for s in self.suggestions:
                lines.append(f"  • {s}")

        sorted_fields = sorted(self.available_fields)
        preview = ", ".join(sorted_fields[:15])
        if len(sorted_fields) > 15:
            preview += ", ..."
        lines.append(f"Available fields: {preview}")
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "FIELD_NOT_FOUND",
            "field": self.invalid_field,
            "model": self.model_name,
            "suggestions": self.suggestions,
            "available_fields": sorted(self.available_fields),
        }


# ── Cache Exceptions ─────────────────────────────────────────────────


class CacheError(RepositoryError):
    """Base class for all cache-related errors."""


class CacheKeyError(CacheError):
    """Raised when the cache key cannot be derived from criteria or query."""


class CacheStoreError(CacheError):
    """Raised when the cache store is unreachable or a value cannot be
    (de)serialized.

    Cache outages surface to the caller; there is no fallback to uncached
    execution.
    """

    def __init__(self, operation: str, key: str, reason: str | None = None) -> None:
        self.operation = operation
        self.key = key
        self.reason = reason
        msg = f"Cache {operation} failed for {key!r}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)
