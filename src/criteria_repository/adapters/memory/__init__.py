"""In-process adapters for tests and single-process deployments."""

from __future__ import annotations

from .auth import ContextVarAuthContext, ContextVarGuard
from .cache import InMemoryTaggedCache

__all__ = ["ContextVarAuthContext", "ContextVarGuard", "InMemoryTaggedCache"]
