"""Data models for the finance dashboard domain."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Optional

__all__ = ["User", "Expense", "Income", "Goal", "GOAL_TYPES", "format_amount", "parse_date"]

GOAL_TYPES = ("Budget", "Savings")


def format_amount(amount: Decimal) -> str:
    """Render an amount with exactly two fraction digits."""
    return f"{amount:.2f}"


def parse_date(value: str) -> date:
    """Parse an ISO 8601 calendar date, accepting a full timestamp as well."""
    value = value.strip()
    if "T" in value:
        # The dashboard frontend sometimes posts full timestamps; keep the day part.
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    return date.fromisoformat(value)


@dataclass(frozen=True)
class User:
    name: str
    email: str
    password_hash: str
    id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the user without its password hash."""
        return {"id": self.id, "name": self.name, "email": self.email}


@dataclass(frozen=True)
class Expense:
    user_id: int
    category: str
    amount: Decimal
    date: date
    description: Optional[str] = None
    id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the expense to JSON-friendly natives."""
        return {
            "id": self.id,
            "userId": self.user_id,
            "category": self.category,
            "amount": format_amount(self.amount),
            "date": self.date.isoformat(),
            "description": self.description,
        }


@dataclass(frozen=True)
class Income:
    user_id: int
    category: str
    amount: Decimal
    date: date
    description: Optional[str] = None
    id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the income to JSON-friendly natives."""
        return {
            "id": self.id,
            "userId": self.user_id,
            "category": self.category,
            "amount": format_amount(self.amount),
            "date": self.date.isoformat(),
            "description": self.description,
        }


@dataclass(frozen=True)
class Goal:
    user_id: int
    category: str
    amount: Decimal
    start_date: date
    end_date: date
    type: str = "Budget"
    description: Optional[str] = None
    id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "category": self.category,
            "amount": format_amount(self.amount),
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "description": self.description,
            "type": self.type,
        }
