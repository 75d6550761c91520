"""Tests for the standard criteria and the criterion registry."""

from __future__ import annotations

from dataclasses import FrozenInstanceError, dataclass
from datetime import date, datetime
from typing import Any

import pytest
from models import Order, ids
from sqlalchemy import select

from criteria_repository import (
    BaseCriterion,
    ContainsCriteria,
    CriterionRegistry,
    DateCriteria,
    DateRangeCriteria,
    EqualsCriteria,
    FieldNotFoundError,
    FindWhereCriteria,
    FindWhereInCriteria,
    FindWhereNotInCriteria,
    FindWhereOrWhereCriteria,
    ICriterion,
    InvalidConditionError,
    InvalidCriterionError,
    LimitCriteria,
    OffsetCriteria,
    OrderByCriteria,
)


async def _run(session, *criteria: ICriterion) -> list[Order]:
    query = select(Order)
    for criterion in criteria:
        query = criterion.apply(query)
    result = await session.execute(query)
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Structural properties
# ---------------------------------------------------------------------------


def test_criteria_are_frozen():
    criterion = EqualsCriteria("status", "active")
    with pytest.raises(FrozenInstanceError):
        criterion.value = "pending"  # type: ignore[misc]


def test_equal_criteria_describe_identically():
    assert EqualsCriteria("status", "active") == EqualsCriteria("status", "active")
    assert (
        EqualsCriteria("status", "active").describe()
        == EqualsCriteria("status", "active").describe()
    )
    assert (
        EqualsCriteria("status", "active").describe()
        != EqualsCriteria("status", "pending").describe()
    )


def test_standard_criteria_satisfy_protocol():
    assert isinstance(LimitCriteria(3), ICriterion)
    assert isinstance(FindWhereCriteria({"status": "active"}), ICriterion)


def test_identifier_is_qualified_name():
    assert EqualsCriteria.identifier() == (
        "criteria_repository.criteria.standard.EqualsCriteria"
    )


def test_apply_returns_new_statement():
    base = select(Order)
    filtered = EqualsCriteria("status", "active").apply(base)
    assert filtered is not base
    assert "WHERE" not in str(base)
    assert "WHERE" in str(filtered)


def test_find_where_normalises_mapping_and_sequence():
    from_mapping = FindWhereCriteria({"status": "active", "total": (">=", 100)})
    from_sequence = FindWhereCriteria([("status", "active"), ("total", ">=", 100)])
    assert from_mapping.conditions == (("status", "=", "active"), ("total", ">=", 100))
    assert from_mapping.describe() == from_sequence.describe()


def test_find_where_rejects_unknown_operator():
    with pytest.raises(InvalidConditionError):
        FindWhereCriteria([("total", "~~", 1)])


def test_unknown_column_raises_field_not_found():
    with pytest.raises(FieldNotFoundError) as exc_info:
        EqualsCriteria("stauts", "active").apply(select(Order))
    assert "status" in exc_info.value.suggestions


# ---------------------------------------------------------------------------
# Behaviour against the database
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_equals(session):
    rows = await _run(session, EqualsCriteria("status", "active"))
    assert ids(rows) == [1, 2, 5]


@pytest.mark.asyncio
async def test_contains(session):
    rows = await _run(session, ContainsCriteria("status", "cel"))
    assert ids(rows) == [4]


@pytest.mark.asyncio
async def test_date_criteria_bounds_are_inclusive(session):
    rows = await _run(
        session,
        DateCriteria(
            date_from=datetime(2024, 1, 20, 15, 30),
            date_to=datetime(2024, 2, 15, 18, 45),
        ),
    )
    assert ids(rows) == [2, 3, 4]


@pytest.mark.asyncio
async def test_date_criteria_single_bound(session):
    rows = await _run(session, DateCriteria(date_from=datetime(2024, 2, 1)))
    assert ids(rows) == [3, 4, 5]


@pytest.mark.asyncio
async def test_date_range_between(session):
    rows = await _run(
        session,
        DateRangeCriteria(
            date_from=datetime(2024, 1, 1), date_to=datetime(2024, 1, 31)
        ),
    )
    assert ids(rows) == [1, 2]


@pytest.mark.asyncio
async def test_date_range_upper_bound_compares_date_part(session):
    # Order 4 was created at 18:45 on 2024-02-15 and is still included.
    rows = await _run(session, DateRangeCriteria(date_to=date(2024, 2, 15)))
    assert ids(rows) == [1, 2, 3, 4]


@pytest.mark.asyncio
async def test_date_range_without_bounds_is_noop(session):
    rows = await _run(session, DateRangeCriteria())
    assert ids(rows) == [1, 2, 3, 4, 5]


@pytest.mark.asyncio
async def test_find_where_operators(session):
    rows = await _run(
        session, FindWhereCriteria({"status": "active", "total": (">", 100)})
    )
    assert ids(rows) == [2, 5]


@pytest.mark.asyncio
async def test_find_where_in_and_not_in(session):
    within = await _run(
        session, FindWhereInCriteria("status", ["pending", "cancelled"])
    )
    outside = await _run(
        session, FindWhereNotInCriteria("status", ["pending", "cancelled"])
    )
    assert ids(within) == [3, 4]
    assert ids(outside) == [1, 2, 5]


@pytest.mark.asyncio
async def test_find_where_or_where_is_grouped(session):
    # The OR group must not widen the preceding customer filter.
    rows = await _run(
        session,
        EqualsCriteria("customer_id", 2),
        FindWhereOrWhereCriteria(
            {"status": "pending"}, or_where=({"total": (">=", 250)},)
        ),
    )
    assert ids(rows) == [3, 5]


@pytest.mark.asyncio
async def test_limit_offset_order(session):
    rows = await _run(
        session,
        OrderByCriteria("total", "desc"),
        OffsetCriteria(1),
        LimitCriteria(2),
    )
    assert [row.id for row in rows] == [2, 1]


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ActiveCriteria(BaseCriterion):
    def apply(self, query: Any) -> Any:
        return EqualsCriteria("status", "active").apply(query)

    def describe(self) -> tuple[Any, ...]:
        return ("active",)


def test_registry_creates_registered_class():
    registry = CriterionRegistry()
    registry.register("active")(ActiveCriteria)

    assert "active" in registry
    assert isinstance(registry.create("active"), ActiveCriteria)
    assert list(registry) == ["active"]


def test_registry_unknown_name():
    with pytest.raises(InvalidCriterionError):
        CriterionRegistry().create("missing")


def test_registry_rejects_classes_needing_arguments():
    registry = CriterionRegistry()
    registry.add("limit", LimitCriteria)
    with pytest.raises(InvalidCriterionError, match="without arguments"):
        registry.create("limit")


def test_registry_warns_on_replacement(caplog):
    registry = CriterionRegistry()
    registry.add("active", ActiveCriteria)
    with caplog.at_level("WARNING", logger="criteria_repository.criteria"):
        registry.add("active", EqualsCriteria)
    assert "re-registered" in caplog.text
    registry.remove("active")
    assert len(registry) == 0
