"""Authentication context ports used to derive per-principal cache tags."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class IAuthGuard(Protocol):
    """A named authentication channel (``web``, ``api`` ...)."""

    def is_authenticated(self) -> bool: ...

    def current_principal_id(self) -> Any:
        """Identifier of the authenticated principal, ``None`` if anonymous."""
        ...


@runtime_checkable
class IAuthContext(Protocol):
    """Lookup of guards by name."""

    def guard(self, name: str) -> IAuthGuard: ...
