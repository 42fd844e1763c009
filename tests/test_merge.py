from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from finance_core.exceptions import ValidationError
from finance_core.merge import apply_patch
from finance_core.models import Expense, Goal
from finance_core.services import GOAL_FIELDS, TRANSACTION_FIELDS

EXPENSE = Expense(
    id=10,
    user_id=1,
    category="food",
    amount=Decimal("12.50"),
    date=date(2024, 1, 1),
    description="lunch",
)


def test_only_present_non_null_fields_are_applied():
    merged = apply_patch(EXPENSE, {"amount": "15", "description": None}, TRANSACTION_FIELDS)
    assert merged == Expense(
        id=10, user_id=1, category="food", amount=Decimal("15.00"), date=date(2024, 1, 1), description="lunch"
    )


def test_empty_patch_returns_same_entity():
    assert apply_patch(EXPENSE, {}, TRANSACTION_FIELDS) is EXPENSE


def test_identity_and_owner_are_not_patchable():
    merged = apply_patch(EXPENSE, {"id": 99, "userId": 2, "user_id": 2}, TRANSACTION_FIELDS)
    assert merged.id == 10
    assert merged.user_id == 1


def test_patch_values_are_validated():
    with pytest.raises(ValidationError):
        apply_patch(EXPENSE, {"category": "  "}, TRANSACTION_FIELDS)


def test_field_sets_cover_every_mutable_field():
    assert set(TRANSACTION_FIELDS) == {"category", "amount", "date", "description"}
    assert set(GOAL_FIELDS) == {"category", "amount", "startDate", "endDate", "description", "type"}


def test_goal_fields_map_wire_names_to_attributes():
    goal = Goal(
        id=1,
        user_id=1,
        category="car",
        amount=Decimal("100.00"),
        start_date=date(2024, 1, 1),
        end_date=date(2024, 6, 1),
    )
    merged = apply_patch(goal, {"startDate": "2024-02-01", "type": "Savings"}, GOAL_FIELDS)
    assert merged.start_date == date(2024, 2, 1)
    assert merged.type == "Savings"
