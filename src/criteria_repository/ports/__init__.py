"""Protocols for the collaborators a repository depends on."""

from __future__ import annotations

from .auth import IAuthContext, IAuthGuard
from .cache import ITaggedCache
from .repository import ICriteriaRepository

__all__ = [
    "IAuthContext",
    "IAuthGuard",
    "ICriteriaRepository",
    "ITaggedCache",
]
