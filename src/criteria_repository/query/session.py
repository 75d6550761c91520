"""QuerySession - the pending ``Select`` for one repository instance."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import select

if TYPE_CHECKING:
    from sqlalchemy import Select


class QuerySession:
    """
    Lazily built ``select(model)`` that terminal operations start from.

    Builder-style repository calls (``order_by``, ``where_has`` ...) replace
    the pending statement; terminal operations discard it with ``reset`` so
    predicates never leak from one call into the next.
    """

    __slots__ = ("_model", "_query")

    def __init__(self, model: type[Any]) -> None:
        self._model = model
        self._query: Select[Any] | None = None

    @property
    def model(self) -> type[Any]:
        return self._model

    def get(self) -> Select[Any]:
        if self._query is None:
            self._query = select(self._model)
        return self._query

    def set(self, query: Select[Any]) -> None:
        """Replace the pending statement with a prebuilt one."""
        self._query = query

    def reset(self) -> None:
        self._query = None

    @property
    def is_pending(self) -> bool:
        return self._query is not None
