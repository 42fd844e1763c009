"""Store gateways: per-resource access to the relational store."""

from __future__ import annotations

from dataclasses import asdict, fields
from typing import Any, Generic, Iterable, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import delete, select, update

from .models import Expense, Goal, Income, User
from .storage import Database, ExpenseRecord, GoalRecord, IncomeRecord, UserRecord

T = TypeVar("T")


class SQLAlchemyGateway(Generic[T]):
    """Lookup, save and delete operations for one resource kind.

    Every call runs in its own transaction; deleting an absent id is a no-op.
    """

    model_type: Type[Any]
    record_type: Type[Any]

    def __init__(self, database: Database) -> None:
        self._database = database

    def find_by_id(self, record_id: int) -> Optional[T]:
        with self._database.session() as session:
            record = session.get(self.record_type, record_id)
            return self._to_model(record) if record is not None else None

    def find_all(self) -> List[T]:
        with self._database.session() as session:
            records = session.scalars(select(self.record_type).order_by(self.record_type.id))
            return [self._to_model(record) for record in records]

    def save(self, model: T) -> T:
        return self.save_all([model])[0]

    def save_all(self, models: Sequence[T]) -> List[T]:
        """Insert new rows. Rewriting an existing row goes through :meth:`update`."""
        with self._database.session() as session:
            records = [self._to_record(model) for model in models]
            session.add_all(records)
            # Flush so the store assigns ids before the models are rebuilt.
            session.flush()
            return [self._to_model(record) for record in records]

    def update(self, model: T) -> Optional[T]:
        """Overwrite the stored row in place; ``None`` when it no longer exists."""
        values = asdict(model)
        record_id = values.pop("id")
        with self._database.session() as session:
            result = session.execute(
                update(self.record_type)
                .where(self.record_type.id == record_id)
                .values(**values)
            )
            if result.rowcount == 0:
                return None
        return model

    def delete_by_id(self, record_id: int) -> None:
        self.delete_all_by_id([record_id])

    def delete_all_by_id(self, record_ids: Iterable[int]) -> None:
        ids = list(record_ids)
        if not ids:
            return
        with self._database.session() as session:
            session.execute(delete(self.record_type).where(self.record_type.id.in_(ids)))

    def _to_record(self, model: T) -> Any:
        return self.record_type(**asdict(model))  # type: ignore[call-overload]

    def _to_model(self, record: Any) -> T:
        return self.model_type(
            **{field.name: getattr(record, field.name) for field in fields(self.model_type)}
        )


class OwnedGateway(SQLAlchemyGateway[T]):
    """Gateway for records that carry a ``user_id`` owner value."""

    def find_all_by_owner(self, user_id: int) -> List[T]:
        with self._database.session() as session:
            statement = (
                select(self.record_type)
                .where(self.record_type.user_id == user_id)
                .order_by(self.record_type.id)
            )
            return [self._to_model(record) for record in session.scalars(statement)]


class UserGateway(SQLAlchemyGateway[User]):
    model_type = User
    record_type = UserRecord

    def find_by_email(self, email: str) -> Optional[User]:
        with self._database.session() as session:
            record = session.scalars(
                select(UserRecord).where(UserRecord.email == email)
            ).first()
            return self._to_model(record) if record is not None else None


class ExpenseGateway(OwnedGateway[Expense]):
    model_type = Expense
    record_type = ExpenseRecord


class IncomeGateway(OwnedGateway[Income]):
    model_type = Income
    record_type = IncomeRecord


class GoalGateway(OwnedGateway[Goal]):
    model_type = Goal
    record_type = GoalRecord
