"""Query state held by a repository between builder calls and execution."""

from __future__ import annotations

from .columns import resolve_column, resolve_relationship, statement_entity
from .conditions import OPERATORS, build_clause, normalize_conditions
from .pagination import DEFAULT_PER_PAGE, Page, SimplePage
from .scope import ScopeSlot
from .session import QuerySession

__all__ = [
    "DEFAULT_PER_PAGE",
    "OPERATORS",
    "Page",
    "QuerySession",
    "ScopeSlot",
    "SimplePage",
    "build_clause",
    "normalize_conditions",
    "resolve_column",
    "resolve_relationship",
    "statement_entity",
]
