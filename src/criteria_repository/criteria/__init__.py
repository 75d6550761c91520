"""Criteria: immutable, composable query transformers."""

from __future__ import annotations

from .base import BaseCriterion, ICriterion
from .collection import CriteriaSet, CriterionLike
from .registry import CriterionRegistry, default_registry
from .standard import (
    ContainsCriteria,
    DateCriteria,
    DateRangeCriteria,
    EqualsCriteria,
    FindWhereCriteria,
    FindWhereInCriteria,
    FindWhereNotInCriteria,
    FindWhereOrWhereCriteria,
    LimitCriteria,
    OffsetCriteria,
    OrderByCriteria,
)

__all__ = [
    "BaseCriterion",
    "ContainsCriteria",
    "CriteriaSet",
    "CriterionLike",
    "CriterionRegistry",
    "DateCriteria",
    "DateRangeCriteria",
    "EqualsCriteria",
    "FindWhereCriteria",
    "FindWhereInCriteria",
    "FindWhereNotInCriteria",
    "FindWhereOrWhereCriteria",
    "ICriterion",
    "LimitCriteria",
    "OffsetCriteria",
    "OrderByCriteria",
    "default_registry",
]
