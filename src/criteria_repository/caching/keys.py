"""Deterministic cache keys for repository reads."""

from __future__ import annotations

import hashlib
import json
import logging
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from ..exceptions import CacheKeyError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy import Select

    from ..criteria.base import ICriterion

logger = logging.getLogger("criteria_repository.caching")


def _qualified_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


def _json_serializer(obj: Any) -> Any:
    """Serialize dates, decimals, enums and pydantic models; reject the rest."""
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    if isinstance(obj, Enum):
        return obj.value
    if hasattr(obj, "isoformat"):
        return obj.isoformat()
    if isinstance(obj, (Decimal, UUID)):
        return str(obj)
    if isinstance(obj, bytes):
        return obj.hex()
    if isinstance(obj, (set, frozenset)):
        return sorted(obj, key=repr)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


class CacheKeyDeriver:
    """
    Builds ``{method}@{repository}_{tag}-{digest}`` keys.

    The digest is a sha256 over canonical JSON of the call arguments, the
    structural description of every pushed criterion and the pending query
    (compiled SQL text plus bound parameters). Equal inputs always produce
    the same key; criterion object identity never takes part. Values JSON
    cannot encode and the serializer hook does not know raise ``CacheKeyError``
    instead of being stringified.
    """

    def derive(
        self,
        method: str,
        repository: type,
        tag: str,
        arguments: Any,
        criteria: Iterable[ICriterion],
        query: Select[Any],
    ) -> str:
        material = {
            "arguments": arguments,
            "criteria": self.describe_criteria(criteria),
            "query": self.describe_query(query),
        }
        try:
            payload = json.dumps(material, sort_keys=True, default=_json_serializer)
        except (TypeError, ValueError) as e:
            raise CacheKeyError(
                f"Cannot serialize cache key material for {method}: {e}"
            ) from e
        digest = hashlib.sha256(payload.encode("utf-8")).hexdigest()
        key = f"{method}@{_qualified_name(repository)}_{tag}-{digest}"
        logger.debug("Derived cache key %s", key)
        return key

    @staticmethod
    def describe_criteria(criteria: Iterable[ICriterion]) -> list[list[Any]]:
        return [
            [_qualified_name(type(criterion)), list(criterion.describe())]
            for criterion in criteria
        ]

    @staticmethod
    def describe_query(query: Select[Any]) -> dict[str, Any]:
        try:
            compiled = query.compile()
        except SQLAlchemyError as e:
            raise CacheKeyError(f"Cannot compile pending query: {e}") from e
        return {"sql": str(compiled), "params": dict(compiled.params)}
