"""ScopeSlot - one-shot query transformation supplied by the caller."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy import Select


class ScopeSlot:
    """
    Holds at most one scope callback.

    Unlike criteria, a scope is consumed by the next terminal operation:
    the repository resets the slot after every terminal call. Setting a new
    scope before the previous one was applied silently replaces it.
    """

    __slots__ = ("_callback",)

    def __init__(self) -> None:
        self._callback: Callable[[Select[Any]], Select[Any]] | None = None

    def set(self, callback: Callable[[Select[Any]], Select[Any]]) -> None:
        self._callback = callback

    def apply(self, query: Select[Any]) -> Select[Any]:
        """Return *query* passed through the callback, or unchanged if unset."""
        callback = self._callback
        if callback is None or not callable(callback):
            return query
        return callback(query)

    def reset(self) -> None:
        self._callback = None

    @property
    def is_set(self) -> bool:
        return self._callback is not None
