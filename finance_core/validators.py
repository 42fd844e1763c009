"""Validation helpers shared across the resource services."""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, List, Optional

from .exceptions import ValidationError
from .models import GOAL_TYPES, parse_date

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[A-Za-z]{2,}$")

MIN_PASSWORD_LENGTH = 6

# Amount columns are NUMERIC(12, 2): ten digits before the decimal point.
MAX_AMOUNT_INTEGER_DIGITS = 10
MAX_AMOUNT = Decimal(10) ** MAX_AMOUNT_INTEGER_DIGITS - Decimal("0.01")


def _quantize_two_decimals(amount: Decimal) -> Decimal:
    """Round the amount to two decimal places using HALF_UP rounding."""
    return amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def parse_amount(raw: object, field: str) -> Decimal:
    """Convert raw input to a non-negative Decimal with exactly two fraction digits."""
    if isinstance(raw, bool):
        raise ValidationError(f"{field} must be a numeric value")
    try:
        amount = Decimal(str(raw))
    except (InvalidOperation, TypeError) as exc:  # type: ignore[arg-type]
        raise ValidationError(f"{field} must be a numeric value") from exc

    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    if amount < 0:
        raise ValidationError(f"{field} must not be negative")

    too_large = ValidationError(f"{field} must not exceed {MAX_AMOUNT}")
    # Checked before quantizing, which fails outright on very large exponents.
    if amount.adjusted() >= MAX_AMOUNT_INTEGER_DIGITS:
        raise too_large
    amount = _quantize_two_decimals(amount)
    if amount > MAX_AMOUNT:
        raise too_large
    return amount


def validate_required_str(value: object, field: str, max_length: int) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    trimmed = value.strip()
    if not trimmed:
        raise ValidationError(f"{field} cannot be empty")
    if len(trimmed) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters")
    return trimmed


def validate_optional_str(value: object, field: str, max_length: int) -> Optional[str]:
    if value is None:
        return None
    return validate_required_str(value, field, max_length)


def validate_date(value: object, field: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return parse_date(value)
        except ValueError as exc:
            raise ValidationError(f"{field} must be an ISO 8601 date (YYYY-MM-DD)") from exc
    raise ValidationError(f"{field} must be a date or ISO 8601 string")


def validate_id(value: object, field: str) -> int:
    """Accept positive integers, or strings holding one, as record ids."""
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer id")
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    if not isinstance(value, int):
        raise ValidationError(f"{field} must be an integer id")
    if value <= 0:
        raise ValidationError(f"{field} must be a positive integer")
    return value


def validate_id_list(raw: object, field: str = "ids") -> List[int]:
    if not isinstance(raw, list):
        raise ValidationError(f"{field} must be a list of integer ids")
    return [validate_id(item, field) for item in raw]


def validate_goal_type(value: object, field: str = "type") -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    canonical = value.strip().lower()
    for goal_type in GOAL_TYPES:
        if goal_type.lower() == canonical:
            return goal_type
    raise ValidationError(f"{field} must be one of: {', '.join(GOAL_TYPES)}")


def validate_email(value: object, field: str = "email") -> str:
    email = validate_required_str(value, field, 255)
    if not EMAIL_PATTERN.fullmatch(email):
        raise ValidationError(f"{field} must be a valid email address")
    return email


def validate_password(value: object, field: str = "password") -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    if len(value) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"{field} must be at least {MIN_PASSWORD_LENGTH} characters")
    return value


def ensure_date_order(start: date, end: date, start_field: str, end_field: str) -> None:
    if end < start:
        raise ValidationError(f"{end_field} must not be earlier than {start_field}")


def require_fields(payload: object, fields: Iterable[str]) -> None:
    if not isinstance(payload, dict):
        raise ValidationError("payload must be a JSON object")
    missing = [name for name in fields if payload.get(name) is None]
    if missing:
        raise ValidationError(f"missing required field(s): {', '.join(missing)}")
