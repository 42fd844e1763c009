"""Framework-agnostic resource services for the finance dashboard."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from functools import partial
from typing import Dict, Generic, Iterable, List, Mapping, NamedTuple, Optional, Sequence, Type, TypeVar

from werkzeug.security import generate_password_hash

from .exceptions import RecordNotFoundError, ValidationError
from .gateways import ExpenseGateway, GoalGateway, IncomeGateway, OwnedGateway, UserGateway
from .merge import FieldSet, apply_patch
from .models import Expense, Goal, Income, User
from .storage import Database
from .validators import (
    ensure_date_order,
    parse_amount,
    require_fields,
    validate_date,
    validate_email,
    validate_goal_type,
    validate_id,
    validate_optional_str,
    validate_password,
    validate_required_str,
)

logger = logging.getLogger(__name__)

T = TypeVar("T", Expense, Income, Goal)


def _hash_password(value: object, field: str) -> str:
    return generate_password_hash(validate_password(value, field))


_category = ("category", partial(validate_required_str, max_length=50))
_amount = ("amount", parse_amount)
_description = ("description", partial(validate_required_str, max_length=200))

# Mutable fields a patch may overwrite, keyed by their wire names.
TRANSACTION_FIELDS: FieldSet = {
    "category": _category,
    "amount": _amount,
    "date": ("date", validate_date),
    "description": _description,
}

GOAL_FIELDS: FieldSet = {
    "category": _category,
    "amount": _amount,
    "startDate": ("start_date", validate_date),
    "endDate": ("end_date", validate_date),
    "description": _description,
    "type": ("type", validate_goal_type),
}

USER_FIELDS: FieldSet = {
    "name": ("name", partial(validate_required_str, max_length=100)),
    "email": ("email", validate_email),
    "password": ("password_hash", _hash_password),
}


def _ensure_mapping(changes: object) -> Mapping[str, object]:
    if not isinstance(changes, Mapping):
        raise ValidationError("changes must be a JSON object")
    return changes


class UserResourceService:
    """Manages user accounts. Deleting a user leaves their records in place."""

    def __init__(self, gateway: UserGateway) -> None:
        self._gateway = gateway

    def list_all(self) -> List[User]:
        return self._gateway.find_all()

    def get_by_id(self, user_id: int) -> User:
        user = self._gateway.find_by_id(user_id)
        if user is None:
            raise RecordNotFoundError(f"User {user_id} not found")
        return user

    def get_by_email(self, email: str) -> User:
        user = self._gateway.find_by_email(email)
        if user is None:
            raise RecordNotFoundError(f"User with email {email} not found")
        return user

    def save(self, payload: Dict[str, object]) -> User:
        require_fields(payload, ("name", "email", "password"))
        email = validate_email(payload["email"])
        self._ensure_email_available(email)
        user = User(
            name=validate_required_str(payload["name"], "name", 100),
            email=email,
            password_hash=_hash_password(payload["password"], "password"),
        )
        saved = self._gateway.save(user)
        logger.info("Created user %s", saved.id)
        return saved

    def update(self, user_id: int, changes: Mapping[str, object]) -> Optional[User]:
        """Merge ``changes`` into the stored user; ``None`` when it does not exist."""
        existing = self._gateway.find_by_id(user_id)
        if existing is None:
            logger.info("User %s not found; nothing updated", user_id)
            return None
        merged = apply_patch(existing, _ensure_mapping(changes), USER_FIELDS)
        if merged.email != existing.email:
            self._ensure_email_available(merged.email)
        updated = self._gateway.update(merged)
        if updated is None:
            logger.info("User %s was deleted during update; nothing written", user_id)
            return None
        logger.info("Updated user %s", user_id)
        return updated

    def delete(self, user_id: int) -> None:
        self._gateway.delete_by_id(user_id)
        logger.info("Deleted user %s", user_id)

    def _ensure_email_available(self, email: str) -> None:
        if self._gateway.find_by_email(email) is not None:
            raise ValidationError("email is already registered")


class OwnedResourceService(ABC, Generic[T]):
    """Shared list, merge-update and delete behaviour for user-owned records.

    When a user gateway is supplied, new records must name an existing owner.
    """

    model_type: Type[T]
    merge_fields: FieldSet

    def __init__(self, gateway: OwnedGateway[T], users: Optional[UserGateway] = None) -> None:
        self._gateway = gateway
        self._users = users

    @property
    def resource_name(self) -> str:
        return self.model_type.__name__

    def list_all(self) -> List[T]:
        return self._gateway.find_all()

    def list_by_owner(self, user_id: int) -> List[T]:
        return self._gateway.find_all_by_owner(user_id)

    def update(self, record_id: int, changes: Mapping[str, object]) -> Optional[T]:
        """Merge ``changes`` into the stored record; ``None`` when it does not exist."""
        existing = self._gateway.find_by_id(record_id)
        if existing is None:
            logger.info("%s %s not found; nothing updated", self.resource_name, record_id)
            return None
        changes = _ensure_mapping(changes)
        self._ensure_same_owner(existing, changes)
        merged = apply_patch(existing, changes, self.merge_fields)
        self._check_record(merged)
        updated = self._gateway.update(merged)
        if updated is None:
            logger.info("%s %s was deleted during update; nothing written", self.resource_name, record_id)
            return None
        logger.info("Updated %s %s", self.resource_name, record_id)
        return updated

    def delete(self, record_id: int) -> None:
        self._gateway.delete_by_id(record_id)
        logger.info("Deleted %s %s", self.resource_name, record_id)

    def delete_batch(self, record_ids: Iterable[int]) -> None:
        ids = list(record_ids)
        self._gateway.delete_all_by_id(ids)
        logger.info("Deleted %d %s record(s)", len(ids), self.resource_name)

    # Internal helpers -----------------------------------------------------
    @abstractmethod
    def _build(self, payload: Dict[str, object]) -> T:
        """Validate a create payload into an unsaved record."""

    def _check_record(self, record: T) -> None:
        """Cross-field checks applied after building or merging a record."""

    def _prepare(self, payloads: Sequence[Dict[str, object]]) -> List[T]:
        # Every item is validated before the first write.
        items = [self._build(payload) for payload in payloads]
        for item in items:
            self._check_record(item)
        self._ensure_owners_exist(items)
        return items

    def _ensure_owners_exist(self, items: Sequence[T]) -> None:
        if self._users is None:
            return
        for owner in sorted({item.user_id for item in items}):
            if self._users.find_by_id(owner) is None:
                raise ValidationError(f"userId {owner} does not match an existing user")

    @staticmethod
    def _ensure_same_owner(existing: T, changes: Mapping[str, object]) -> None:
        raw_owner = changes.get("userId")
        if raw_owner is None:
            return
        if validate_id(raw_owner, "userId") != existing.user_id:
            raise ValidationError("userId cannot be changed once a record is created")


class TransactionResourceService(OwnedResourceService[T]):
    """Expense and income records: dated amounts created in batches."""

    merge_fields = TRANSACTION_FIELDS

    def save_batch(self, payloads: Sequence[Dict[str, object]]) -> List[T]:
        """Insert every payload in one call, returning records in submission order."""
        items = self._prepare(payloads)
        if not items:
            return []
        saved = self._gateway.save_all(items)
        logger.info("Created %d %s record(s)", len(saved), self.resource_name)
        return saved

    def _build(self, payload: Dict[str, object]) -> T:
        require_fields(payload, ("userId", "category", "amount", "date"))
        return self.model_type(
            user_id=validate_id(payload["userId"], "userId"),
            category=validate_required_str(payload["category"], "category", 50),
            amount=parse_amount(payload["amount"], "amount"),
            date=validate_date(payload["date"], "date"),
            description=validate_optional_str(payload.get("description"), "description", 200),
        )


class ExpenseResourceService(TransactionResourceService[Expense]):
    model_type = Expense

    def __init__(self, gateway: ExpenseGateway, users: Optional[UserGateway] = None) -> None:
        super().__init__(gateway, users)


class IncomeResourceService(TransactionResourceService[Income]):
    model_type = Income

    def __init__(self, gateway: IncomeGateway, users: Optional[UserGateway] = None) -> None:
        super().__init__(gateway, users)


class GoalResourceService(OwnedResourceService[Goal]):
    """Budget and savings goals, created one at a time."""

    model_type = Goal
    merge_fields = GOAL_FIELDS

    def __init__(self, gateway: GoalGateway, users: Optional[UserGateway] = None) -> None:
        super().__init__(gateway, users)

    def save(self, payload: Dict[str, object]) -> Goal:
        (goal,) = self._prepare([payload])
        saved = self._gateway.save(goal)
        logger.info("Created Goal %s", saved.id)
        return saved

    def _build(self, payload: Dict[str, object]) -> Goal:
        require_fields(payload, ("userId", "category", "amount", "startDate", "endDate"))
        return Goal(
            user_id=validate_id(payload["userId"], "userId"),
            category=validate_required_str(payload["category"], "category", 50),
            amount=parse_amount(payload["amount"], "amount"),
            start_date=validate_date(payload["startDate"], "startDate"),
            end_date=validate_date(payload["endDate"], "endDate"),
            type=validate_goal_type(payload.get("type") or "Budget"),
            description=validate_optional_str(payload.get("description"), "description", 200),
        )

    def _check_record(self, record: Goal) -> None:
        ensure_date_order(record.start_date, record.end_date, "startDate", "endDate")


class ResourceServices(NamedTuple):
    users: UserResourceService
    expenses: ExpenseResourceService
    incomes: IncomeResourceService
    goals: GoalResourceService


def build_services(database: Database, *, check_owners: bool = True) -> ResourceServices:
    """Wire one service per resource kind over a shared database handle."""
    user_gateway = UserGateway(database)
    owners = user_gateway if check_owners else None
    return ResourceServices(
        users=UserResourceService(user_gateway),
        expenses=ExpenseResourceService(ExpenseGateway(database), owners),
        incomes=IncomeResourceService(IncomeGateway(database), owners),
        goals=GoalResourceService(GoalGateway(database), owners),
    )
