"""criteria-repository - Criteria-composed, cache-aware repositories for SQLAlchemy.

Redis support lives in ``criteria_repository.adapters.redis``.
"""

from __future__ import annotations

# ── Adapters ────────────────────────────────────────────────────
from .adapters.memory import ContextVarAuthContext, InMemoryTaggedCache
from .adapters.serialization import JsonSerializer, PickleSerializer

# ── Caching ──────────────────────────────────────────────────────
from .caching import CacheKeyDeriver, CachedRepository, TagResolver
from .config import CacheConfig, RepositoryConfig

# ── Criteria ─────────────────────────────────────────────────────
from .criteria import (
    BaseCriterion,
    ContainsCriteria,
    CriteriaSet,
    CriterionRegistry,
    DateCriteria,
    DateRangeCriteria,
    EqualsCriteria,
    FindWhereCriteria,
    FindWhereInCriteria,
    FindWhereNotInCriteria,
    FindWhereOrWhereCriteria,
    ICriterion,
    LimitCriteria,
    OffsetCriteria,
    OrderByCriteria,
    default_registry,
)

# ── Exceptions ───────────────────────────────────────────────────
from .exceptions import (
    CacheError,
    CacheKeyError,
    CacheStoreError,
    EntityNotFoundError,
    EntityResolutionError,
    FieldNotFoundError,
    InvalidConditionError,
    InvalidCriterionError,
    MissingSessionError,
    NotFoundError,
    RepositoryError,
)

# ── Persistence ──────────────────────────────────────────────────
from .persistence import BaseRepository

# ── Ports ────────────────────────────────────────────────────────
from .ports import IAuthContext, IAuthGuard, ICriteriaRepository, ITaggedCache
from .query import Page, QuerySession, ScopeSlot, SimplePage

__all__ = [
    "BaseCriterion",
    "BaseRepository",
    "CacheConfig",
    "CacheError",
    "CacheKeyDeriver",
    "CacheKeyError",
    "CacheStoreError",
    "CachedRepository",
    "ContainsCriteria",
    "ContextVarAuthContext",
    "CriteriaSet",
    "CriterionRegistry",
    "DateCriteria",
    "DateRangeCriteria",
    "EntityNotFoundError",
    "EntityResolutionError",
    "EqualsCriteria",
    "FieldNotFoundError",
    "FindWhereCriteria",
    "FindWhereInCriteria",
    "FindWhereNotInCriteria",
    "FindWhereOrWhereCriteria",
    "IAuthContext",
    "IAuthGuard",
    "ICriteriaRepository",
    "ICriterion",
    "ITaggedCache",
    "InMemoryTaggedCache",
    "InvalidConditionError",
    "InvalidCriterionError",
    "JsonSerializer",
    "LimitCriteria",
    "MissingSessionError",
    "NotFoundError",
    "OffsetCriteria",
    "OrderByCriteria",
    "Page",
    "PickleSerializer",
    "QuerySession",
    "RepositoryError",
    "ScopeSlot",
    "SimplePage",
    "TagResolver",
    "default_registry",
]
