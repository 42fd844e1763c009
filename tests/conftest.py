from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from api.app import create_app
from finance_core.config import Settings
from finance_core.services import build_services
from finance_core.storage import Database


@pytest.fixture
def database():
    db = Database("sqlite://")
    db.create_schema()
    yield db
    db.close()


@pytest.fixture
def services(database):
    return build_services(database)


@pytest.fixture
def unchecked_services(database):
    return build_services(database, check_owners=False)


@pytest.fixture
def alice(services):
    return services.users.save({"name": "Alice", "email": "alice@example.com", "password": "s3cret!"})


@pytest.fixture
def bob(services):
    return services.users.save({"name": "Bob", "email": "bob@example.com", "password": "hunter22"})


@pytest.fixture
def app(database):
    settings = Settings(database_url="sqlite://", env="dev")
    flask_app = create_app(settings, database)
    flask_app.config.update(TESTING=True)
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()


def expense_payload(user_id, category="food", amount="12.50", day=date(2024, 1, 1), **extra):
    payload = {"userId": user_id, "category": category, "amount": amount, "date": day.isoformat()}
    payload.update(extra)
    return payload


def goal_payload(user_id, **extra):
    payload = {
        "userId": user_id,
        "category": "travel",
        "amount": Decimal("1500.00"),
        "startDate": "2024-01-01",
        "endDate": "2024-12-31",
        "description": "Trip to Lisbon",
        "type": "Savings",
    }
    payload.update(extra)
    return payload
