from __future__ import annotations

from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from finance_core.exceptions import PersistenceError
from finance_core.gateways import ExpenseGateway, GoalGateway, UserGateway
from finance_core.models import Expense, Goal, User


@pytest.fixture
def expense_gateway(database):
    return ExpenseGateway(database)


def _expense(user_id=1, category="food", amount="9.99"):
    return Expense(user_id=user_id, category=category, amount=Decimal(amount), date=date(2024, 3, 1))


def test_save_assigns_id(expense_gateway):
    saved = expense_gateway.save(_expense())
    assert saved.id is not None
    assert expense_gateway.find_by_id(saved.id) == saved


def test_update_overwrites_row_in_place(expense_gateway):
    saved = expense_gateway.save(_expense())
    updated = expense_gateway.update(replace(saved, category="rent", amount=Decimal("10.00")))

    assert updated == expense_gateway.find_by_id(saved.id)
    assert updated.category == "rent"
    assert len(expense_gateway.find_all()) == 1


def test_update_of_a_deleted_row_writes_nothing(expense_gateway):
    saved = expense_gateway.save(_expense())
    expense_gateway.delete_by_id(saved.id)

    assert expense_gateway.update(replace(saved, category="rent")) is None
    assert expense_gateway.find_all() == []


def test_save_all_keeps_order(expense_gateway):
    saved = expense_gateway.save_all([_expense(category=c) for c in ("x", "y", "z")])
    assert [e.category for e in saved] == ["x", "y", "z"]
    assert [e.id for e in expense_gateway.find_all()] == [e.id for e in saved]


def test_find_all_by_owner(expense_gateway):
    expense_gateway.save_all([_expense(1), _expense(2), _expense(1)])
    assert [e.user_id for e in expense_gateway.find_all_by_owner(1)] == [1, 1]


def test_find_missing_returns_none(expense_gateway):
    assert expense_gateway.find_by_id(42) is None


def test_deletes_ignore_absent_ids(expense_gateway):
    kept, dropped = expense_gateway.save_all([_expense(), _expense()])

    expense_gateway.delete_by_id(1000)
    expense_gateway.delete_all_by_id([dropped.id, 1001])
    expense_gateway.delete_all_by_id([])

    assert expense_gateway.find_all() == [kept]


def test_goal_round_trip(database):
    gateway = GoalGateway(database)
    goal = gateway.save(Goal(
        user_id=3,
        category="house",
        amount=Decimal("20000.00"),
        start_date=date(2024, 1, 1),
        end_date=date(2026, 1, 1),
        type="Savings",
    ))
    assert gateway.find_all_by_owner(3) == [goal]


def test_find_by_email(database):
    gateway = UserGateway(database)
    user = gateway.save(User(name="Carol", email="carol@example.com", password_hash="x"))

    assert gateway.find_by_email("carol@example.com") == user
    assert gateway.find_by_email("CAROL@example.com") is None


def test_storage_failures_surface_as_persistence_error(database):
    gateway = UserGateway(database)
    gateway.save(User(name="Carol", email="carol@example.com", password_hash="x"))

    with pytest.raises(PersistenceError):
        gateway.save(User(name="Clone", email="carol@example.com", password_hash="y"))
    assert len(gateway.find_all()) == 1
