"""Tests for the exception hierarchy."""

from __future__ import annotations

import pytest

from criteria_repository import (
    CacheError,
    CacheKeyError,
    CacheStoreError,
    EntityNotFoundError,
    EntityResolutionError,
    FieldNotFoundError,
    InvalidConditionError,
    InvalidCriterionError,
    LimitCriteria,
    MissingSessionError,
    NotFoundError,
    RepositoryError,
)


@pytest.mark.parametrize(
    "exc_type",
    [
        CacheError,
        CacheKeyError,
        EntityResolutionError,
        FieldNotFoundError,
        InvalidConditionError,
        InvalidCriterionError,
        MissingSessionError,
        NotFoundError,
    ],
)
def test_rooted_at_repository_error(exc_type):
    assert issubclass(exc_type, RepositoryError)


def test_cache_errors_share_a_base():
    assert issubclass(CacheStoreError, CacheError)
    assert issubclass(CacheKeyError, CacheError)


def test_entity_not_found():
    error = EntityNotFoundError("Order", 7)
    assert isinstance(error, NotFoundError)
    assert str(error) == "Order with id=7 not found"
    assert error.to_dict() == {
        "error": "EntityNotFoundError",
        "message": "Order with id=7 not found",
    }


def test_invalid_criterion_labels():
    assert "'active'" in str(InvalidCriterionError("active"))
    assert "'LimitCriteria'" in str(InvalidCriterionError(LimitCriteria))
    assert "'int'" in str(InvalidCriterionError(42, "not callable"))
    assert str(InvalidCriterionError(42, "not callable")).endswith("- not callable")


def test_cache_store_error_message():
    error = CacheStoreError("flush", "tag:Orders_0", "timeout")
    assert str(error) == "Cache flush failed for 'tag:Orders_0': timeout"
    assert error.operation == "flush"


def test_field_not_found_message():
    error = FieldNotFoundError("stauts", "Order", ["id", "status", "total"])
    message = str(error)
    assert message.startswith("Invalid field 'stauts' on 'Order'.")
    assert "  • status" in message
    assert message.endswith("Available fields: id, status, total")


def test_field_not_found_truncates_long_field_lists():
    fields = [f"f{i:02d}" for i in range(20)]
    assert str(FieldNotFoundError("x", "Wide", fields)).endswith(", ...")


def test_entity_resolution_error_names_the_class():
    class Plain:
        pass

    assert "Plain" in str(EntityResolutionError(Plain))
