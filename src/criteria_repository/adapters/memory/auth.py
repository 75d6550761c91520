"""ContextVar-backed authentication context.

Keeps the authenticated principal id of every guard in a single context
variable, so each asyncio task sees the principals of its own request.
"""

from __future__ import annotations

from contextvars import ContextVar, Token
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping

_principals_context: ContextVar[Mapping[str, Any]] = ContextVar(
    "criteria_repository_principals", default=MappingProxyType({})
)


class ContextVarGuard:
    """Guard view over the principal stored for *name*."""

    def __init__(self, name: str) -> None:
        self.name = name

    def is_authenticated(self) -> bool:
        return _principals_context.get().get(self.name) is not None

    def current_principal_id(self) -> Any:
        return _principals_context.get().get(self.name)

    def __repr__(self) -> str:
        return f"ContextVarGuard({self.name!r})"


class ContextVarAuthContext:
    """
    ``IAuthContext`` implementation reading principals from a ``ContextVar``.

    Example:
        ```python
        auth = ContextVarAuthContext()
        token = auth.login("api", 42)
        try:
            orders = await repo.use_user_tag().all()
        finally:
            auth.reset(token)
        ```
    """

    def guard(self, name: str) -> ContextVarGuard:
        return ContextVarGuard(name)

    def login(self, guard: str, principal_id: Any) -> Token[Mapping[str, Any]]:
        """Authenticate *principal_id* on *guard* in the current context.

        Returns a token for ``reset``.
        """
        if principal_id is None:
            raise ValueError("principal_id must not be None")
        current = dict(_principals_context.get())
        current[guard] = principal_id
        return _principals_context.set(MappingProxyType(current))

    def logout(self, guard: str) -> None:
        """Drop the principal of *guard* in the current context."""
        current = dict(_principals_context.get())
        current.pop(guard, None)
        _principals_context.set(MappingProxyType(current))

    def reset(self, token: Token[Mapping[str, Any]]) -> None:
        """Restore the principals in effect before the matching ``login``."""
        _principals_context.reset(token)
