"""Tests for CriteriaSet ordering, removal and skipping."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest
from models import Order
from sqlalchemy import select

from criteria_repository import (
    BaseCriterion,
    CriteriaSet,
    CriterionRegistry,
    EqualsCriteria,
    InvalidCriterionError,
    LimitCriteria,
)


@dataclass(frozen=True)
class Recording(BaseCriterion):
    """Appends its name to a shared log when applied."""

    name: str
    log: list[str] = field(default_factory=list, compare=False)

    def apply(self, query: Any) -> Any:
        self.log.append(self.name)
        return query

    def describe(self) -> tuple[Any, ...]:
        return ("recording", self.name)


@dataclass(frozen=True)
class Other(Recording):
    pass


@dataclass(frozen=True)
class NoArgs(BaseCriterion):
    def apply(self, query: Any) -> Any:
        return query.where(Order.status == "active")

    def describe(self) -> tuple[Any, ...]:
        return ("no_args",)


class TestOrdering:
    def test_apply_follows_insertion_order(self):
        log: list[str] = []
        criteria = CriteriaSet()
        for name in ("a", "b", "c"):
            criteria.push(Recording(name, log))

        criteria.apply(select(Order))

        assert log == ["a", "b", "c"]

    def test_describe_follows_insertion_order(self):
        criteria = CriteriaSet()
        criteria.push(LimitCriteria(10))
        criteria.push(EqualsCriteria("status", "active"))
        assert criteria.describe() == [
            ("limit", 10),
            ("equals", "status", "active"),
        ]

    def test_iteration_is_a_snapshot(self):
        criteria = CriteriaSet()
        criteria.push(LimitCriteria(1))
        for _ in criteria:
            criteria.push(LimitCriteria(2))
        assert len(criteria) == 2


class TestPop:
    def test_pop_removes_every_entry_of_the_type(self):
        log: list[str] = []
        criteria = CriteriaSet()
        criteria.push(Recording("a", log))
        criteria.push(LimitCriteria(5))
        criteria.push(Recording("b", log))

        removed = criteria.pop(Recording("anything"))

        assert removed == 2
        assert [type(c) for c in criteria] == [LimitCriteria]

    def test_pop_matches_exact_type_only(self):
        criteria = CriteriaSet()
        criteria.push(Recording("a"))
        criteria.push(Other("b"))

        criteria.pop(Recording)

        assert [type(c) for c in criteria] == [Other]

    def test_pop_by_qualified_name(self):
        criteria = CriteriaSet()
        criteria.push(EqualsCriteria("status", "active"))
        criteria.pop(EqualsCriteria.identifier())
        assert len(criteria) == 0

    def test_pop_by_registered_name(self):
        registry = CriterionRegistry()
        registry.add("no_args", NoArgs)
        criteria = CriteriaSet(registry)
        criteria.push("no_args")
        criteria.pop("no_args")
        assert not criteria

    def test_pop_missing_is_noop(self):
        criteria = CriteriaSet()
        criteria.push(LimitCriteria(1))
        assert criteria.pop(EqualsCriteria) == 0
        assert len(criteria) == 1


class TestPush:
    def test_push_class_instantiates_it(self):
        criteria = CriteriaSet()
        pushed = criteria.push(NoArgs)
        assert isinstance(pushed, NoArgs)

    def test_push_registered_name(self):
        registry = CriterionRegistry()
        registry.add("no_args", NoArgs)
        criteria = CriteriaSet(registry)
        assert isinstance(criteria.push("no_args"), NoArgs)

    def test_push_unknown_name(self):
        with pytest.raises(InvalidCriterionError):
            CriteriaSet(CriterionRegistry()).push("missing")

    @pytest.mark.parametrize("value", [42, object(), int])
    def test_push_rejects_non_criteria(self, value):
        with pytest.raises(InvalidCriterionError):
            CriteriaSet().push(value)

    def test_push_class_with_required_arguments(self):
        with pytest.raises(InvalidCriterionError):
            CriteriaSet().push(LimitCriteria)


class TestSkip:
    def test_skip_makes_apply_a_noop(self):
        log: list[str] = []
        criteria = CriteriaSet()
        criteria.push(Recording("a", log))
        criteria.set_skip(True)

        query = select(Order)
        assert criteria.apply(query) is query
        assert log == []

    def test_skip_does_not_discard_contents(self):
        log: list[str] = []
        criteria = CriteriaSet()
        criteria.push(Recording("a", log))
        criteria.set_skip(True)
        criteria.apply(select(Order))
        criteria.set_skip(False)
        criteria.apply(select(Order))

        assert log == ["a"]
        assert len(criteria) == 1

    def test_clear_keeps_skip_flag(self):
        criteria = CriteriaSet()
        criteria.push(LimitCriteria(1))
        criteria.set_skip(True)
        criteria.clear()
        assert len(criteria) == 0
        assert criteria.skip is True
