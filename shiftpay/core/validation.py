from __future__ import annotations

from datetime import date
from decimal import Decimal


class ValidationError(Exception):
    """Raised when a caller passes arguments the engine cannot work with."""


class ConfigError(ValidationError):
    """Raised when the financial settings cannot be loaded."""


def negative_amount_reason(assigned: Decimal | None, base: Decimal | None) -> str | None:
    """Return why a row must be excluded from sums, or ``None`` when it is usable."""

    if assigned is not None and assigned < 0:
        return "assigned_value negativo"
    if base is not None and base < 0:
        return "base_value negativo"
    return None


def parse_period_date(value: str | date, field: str) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError as exc:
        raise ValidationError(f"{field} must be an ISO date (YYYY-MM-DD), got {value!r}") from exc


def validate_period(start_date: str | date, end_date: str | date) -> tuple[date, date]:
    start = parse_period_date(start_date, "start_date")
    end = parse_period_date(end_date, "end_date")
    if start > end:
        raise ValidationError("start_date must not be after end_date")
    return start, end
