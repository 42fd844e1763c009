from __future__ import annotations

import pytest

from finance_core.services import build_services
from finance_core.storage import Database
from finance_dashboard.cli import main


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'cli.db'}"


@pytest.fixture
def seeded(db_url):
    with Database(db_url) as database:
        database.create_schema()
        services = build_services(database)
        user = services.users.save({"name": "Frank", "email": "frank@example.com", "password": "letmein"})
        expenses = services.expenses.save_batch([
            {"userId": user.id, "category": "food", "amount": "4.20", "date": "2024-02-01"},
            {"userId": user.id, "category": "fuel", "amount": "60", "date": "2024-02-03"},
        ])
    return user, expenses


def test_init_db(db_url, capsys):
    assert main(["--database-url", db_url, "init-db"]) == 0
    assert "Schema ready" in capsys.readouterr().out


def test_users_list_and_show(db_url, seeded, capsys):
    user, _ = seeded
    assert main(["--database-url", db_url, "users", "list"]) == 0
    assert "frank@example.com" in capsys.readouterr().out

    assert main(["--database-url", db_url, "users", "show", "--id", str(user.id)]) == 0
    assert "Frank" in capsys.readouterr().out


def test_users_show_missing_email_fails(db_url, capsys):
    assert main(["--database-url", db_url, "users", "show", "--email", "ghost@example.com"]) == 1
    assert "not found" in capsys.readouterr().err


def test_expense_list_and_delete(db_url, seeded, capsys):
    user, (food, fuel) = seeded
    assert main(["--database-url", db_url, "expense", "list", "--user", str(user.id)]) == 0
    out = capsys.readouterr().out
    assert "Found 2 expense record(s)" in out
    assert "Category: fuel" in out

    assert main(["--database-url", db_url, "expense", "delete", str(food.id), "999"]) == 0
    capsys.readouterr()

    assert main(["--database-url", db_url, "expense", "list"]) == 0
    out = capsys.readouterr().out
    assert "Found 1 expense record(s)" in out
    assert "Category: food" not in out


def test_goal_list_empty(db_url, capsys):
    assert main(["--database-url", db_url, "goal", "list"]) == 0
    assert "No goal records found." in capsys.readouterr().out


def test_unrecognised_log_level_does_not_break_startup(db_url, monkeypatch, capsys):
    monkeypatch.setenv("FINANCE_DASHBOARD_LOG_LEVEL", "verbose")
    assert main(["--database-url", db_url, "init-db"]) == 0
    assert "Schema ready" in capsys.readouterr().out
