"""Flask REST API exposing the finance dashboard resource services."""

from __future__ import annotations

import atexit
from typing import Any, Iterable, List, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from finance_core.config import Settings
from finance_core.exceptions import PersistenceError, RecordNotFoundError, ValidationError
from finance_core.services import build_services
from finance_core.storage import Database
from finance_core.validators import validate_id_list


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> Flask:
    """Build the API. A database passed in stays owned (and closed) by the caller."""
    app = Flask(__name__)
    settings = settings or Settings.from_env()

    if settings.is_development:
        CORS(app, resources={r"/*": {"origins": "*"}}, supports_credentials=True)
    elif settings.allowed_origins:
        CORS(app, resources={r"/*": {"origins": settings.allowed_origins}}, supports_credentials=True)
    else:
        CORS(app)

    if database is None:
        database = Database(settings.database_url, echo=settings.sql_echo)
        database.create_schema()
        atexit.register(database.close)

    services = build_services(database, check_owners=settings.check_owners)
    users, expenses, incomes, goals = services

    def _success(payload: Any, status: int = 200):
        if status == 204:
            return ("", status)
        return jsonify(payload), status

    def _items(records: Iterable[Any]) -> List[Any]:
        return [record.to_dict() for record in records]

    def _handle_error(exc: Exception, status: int, message: str):
        app.logger.error("%s: %s", message, exc)
        return jsonify({"error": message, "details": str(exc)}), status

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        return _handle_error(exc, 400, "Validation error")

    @app.errorhandler(RecordNotFoundError)
    def handle_not_found(exc: RecordNotFoundError):
        return _handle_error(exc, 404, "Record not found")

    @app.errorhandler(PersistenceError)
    def handle_persistence_error(exc: PersistenceError):
        return _handle_error(exc, 500, "Persistence error")

    def _json_body() -> Any:
        if not request.is_json:
            raise ValidationError("Request content must be application/json")
        data = request.get_json(silent=True)
        if data is None:
            raise ValidationError("Malformed JSON body")
        return data

    def _json_list() -> List[Any]:
        # The dashboard posts arrays, but a lone object is accepted as a batch of one.
        data = _json_body()
        return data if isinstance(data, list) else [data]

    def _found(record: Any, kind: str, record_id: int):
        if record is None:
            raise RecordNotFoundError(f"{kind} {record_id} not found")
        return _success(record.to_dict())

    @app.get("/health")
    def health():
        database.ping()
        return _success({"status": "ok"})

    # Users ----------------------------------------------------------------
    @app.get("/api/users")
    def list_users():
        return _success(_items(users.list_all()))

    @app.get("/api/users/<int:user_id>")
    def get_user(user_id: int):
        return _success(users.get_by_id(user_id).to_dict())

    @app.get("/api/users/email/<email>")
    def get_user_by_email(email: str):
        return _success(users.get_by_email(email).to_dict())

    @app.post("/api/users")
    def create_user():
        user = users.save(_json_body())
        return _success(user.to_dict(), 201)

    @app.put("/api/users/<int:user_id>")
    def update_user(user_id: int):
        return _found(users.update(user_id, _json_body()), "User", user_id)

    @app.delete("/api/users/<int:user_id>")
    def delete_user(user_id: int):
        users.delete(user_id)
        return _success({}, 204)

    # Expenses -------------------------------------------------------------
    @app.get("/api/expense")
    def list_expenses():
        return _success(_items(expenses.list_all()))

    @app.get("/api/expense/<int:user_id>")
    def list_user_expenses(user_id: int):
        return _success(_items(expenses.list_by_owner(user_id)))

    @app.post("/api/expense")
    def create_expenses():
        return _success(_items(expenses.save_batch(_json_list())), 201)

    @app.put("/api/expense/<int:expense_id>")
    def update_expense(expense_id: int):
        return _found(expenses.update(expense_id, _json_body()), "Expense", expense_id)

    @app.delete("/api/expense/<int:expense_id>")
    def delete_expense(expense_id: int):
        expenses.delete(expense_id)
        return _success({}, 204)

    @app.delete("/api/expense")
    def delete_expenses():
        expenses.delete_batch(validate_id_list(_json_body()))
        return _success({}, 204)

    # Incomes --------------------------------------------------------------
    @app.get("/api/income")
    def list_incomes():
        return _success(_items(incomes.list_all()))

    @app.get("/api/income/<int:user_id>")
    def list_user_incomes(user_id: int):
        return _success(_items(incomes.list_by_owner(user_id)))

    @app.post("/api/income")
    def create_incomes():
        return _success(_items(incomes.save_batch(_json_list())), 201)

    @app.put("/api/income/<int:income_id>")
    def update_income(income_id: int):
        return _found(incomes.update(income_id, _json_body()), "Income", income_id)

    @app.delete("/api/income/<int:income_id>")
    def delete_income(income_id: int):
        incomes.delete(income_id)
        return _success({}, 204)

    @app.delete("/api/income")
    def delete_incomes():
        incomes.delete_batch(validate_id_list(_json_body()))
        return _success({}, 204)

    # Goals ----------------------------------------------------------------
    @app.get("/api/goal")
    def list_goals():
        return _success(_items(goals.list_all()))

    @app.get("/api/goal/<int:user_id>")
    def list_user_goals(user_id: int):
        return _success(_items(goals.list_by_owner(user_id)))

    @app.post("/api/goal")
    def create_goal():
        goal = goals.save(_json_body())
        return _success(goal.to_dict(), 201)

    @app.put("/api/goal/<int:goal_id>")
    def update_goal(goal_id: int):
        return _found(goals.update(goal_id, _json_body()), "Goal", goal_id)

    @app.delete("/api/goal/<int:goal_id>")
    def delete_goal(goal_id: int):
        goals.delete(goal_id)
        return _success({}, 204)

    @app.delete("/api/goal")
    def delete_goals():
        goals.delete_batch(validate_id_list(_json_body()))
        return _success({}, 204)

    return app
