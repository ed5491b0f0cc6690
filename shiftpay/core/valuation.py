"""Shift value resolution.

Every amount shown for a shift (calendar card, assignee totals, financial
reports, exports) is produced by :func:`resolve_value`. Under the
``cascade`` policy the first usable tier wins:

1. ``assigned_value``: manual override on the assignment, used as-is since it
   already reflects the shift duration.
2. individual rate (``user_sector_values``): 12h base, pro-rated.
3. ``shifts.base_value``: final amount for that shift, used as-is.
4. sector default (day/night): 12h base, used only when greater than zero,
   pro-rated.
5. nothing: ``none``.

The ``assigned_or_base`` policy only consults tiers 1 and 3.

A negative ``assigned_value`` or ``base_value`` invalidates the row whatever
the tier that would have won.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from shiftpay.core.money import ZERO, parse_money, quantize
from shiftpay.core.schema import ValueResult, ValueSource
from shiftpay.core.settings import FinancialSettings, ResolverPolicy, get_settings
from shiftpay.core.validation import negative_amount_reason

MINUTES_PER_DAY = 24 * 60
HOUR_STEP = Decimal("0.0001")

SOURCE_LABELS: dict[str, str] = {
    "assigned": "Editado",
    "individual": "Individual",
    "base": "Base do plantão",
    "sector_default": "Padrão",
    "none": "Sem valor",
    "invalid": "Inválido",
}


def _parse_clock(value: str | None) -> tuple[int, int] | None:
    if not value:
        return None
    parts = str(value).strip().split(":")
    if len(parts) < 2:
        return None
    try:
        hour, minute = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        return None
    return hour, minute


def shift_duration_minutes(start_time: str | None, end_time: str | None) -> int:
    """Minutes between two ``HH:MM`` clocks; an earlier end wraps past midnight.

    Unreadable clocks give a zero duration.
    """

    start = _parse_clock(start_time)
    end = _parse_clock(end_time)
    if start is None or end is None:
        return 0
    minutes = (end[0] * 60 + end[1]) - (start[0] * 60 + start[1])
    if minutes < 0:
        minutes += MINUTES_PER_DAY
    return minutes


def shift_duration_hours(start_time: str | None, end_time: str | None) -> Decimal:
    """Display duration in hours, rounded to four places. Never used for pricing."""

    minutes = shift_duration_minutes(start_time, end_time)
    return (Decimal(minutes) / Decimal(60)).quantize(HOUR_STEP)


def is_night_shift(start_time: str | None, settings: FinancialSettings | None = None) -> bool:
    settings = settings or get_settings()
    clock = _parse_clock(start_time)
    if clock is None:
        return False
    hour = clock[0]
    return hour >= settings.night_start_hour or hour < settings.night_end_hour


def pro_rate(
    base: Decimal | None,
    duration_hours: Decimal,
    settings: FinancialSettings | None = None,
    *,
    duration_minutes: int | None = None,
) -> Decimal | None:
    """Scale a 12h base to the shift length.

    ``duration_minutes``, when given, takes precedence over ``duration_hours``
    so that lengths such as 20 minutes are priced without an intermediate
    rounding. Zero stays zero, a standard-length shift keeps the base
    untouched and a shift without a duration yields no value.
    """

    if base is None:
        return None
    if base == 0:
        return base
    standard = Decimal((settings or get_settings()).standard_shift_hours)
    if duration_minutes is not None:
        if duration_minutes <= 0:
            return None
        if duration_minutes == standard * 60:
            return base
        return quantize(base * Decimal(duration_minutes) / (standard * 60))
    if duration_hours <= 0:
        return None
    if duration_hours == standard:
        return base
    return quantize(base * duration_hours / standard)


def _result(
    final_value: Decimal | None,
    source: ValueSource,
    duration_hours: Decimal,
    base_value_used: Decimal | None = None,
    invalid_reason: str | None = None,
) -> ValueResult:
    return ValueResult(
        final_value=final_value,
        source=source,
        duration_hours=duration_hours,
        base_value_used=base_value_used,
        invalid_reason=invalid_reason,
    )


def resolve_value(
    *,
    assigned_value: Any = None,
    base_value: Any = None,
    individual_value: Any = None,
    sector_default_value: Any = None,
    duration_hours: Decimal,
    duration_minutes: int | None = None,
    policy: ResolverPolicy | None = None,
    settings: FinancialSettings | None = None,
) -> ValueResult:
    settings = settings or get_settings()
    policy = policy or settings.resolver_policy

    assigned = parse_money(assigned_value)
    base = parse_money(base_value)

    reason = negative_amount_reason(assigned, base)
    if reason:
        return _result(None, "invalid", duration_hours, invalid_reason=reason)

    if assigned is not None:
        return _result(assigned, "assigned", duration_hours)

    if policy == "cascade":
        individual = parse_money(individual_value)
        if individual is not None and individual >= 0:
            prorated = pro_rate(individual, duration_hours, settings, duration_minutes=duration_minutes)
            if prorated is not None:
                return _result(prorated, "individual", duration_hours, base_value_used=individual)

    if base is not None:
        return _result(base, "base", duration_hours)

    if policy == "cascade":
        sector_default = parse_money(sector_default_value)
        if sector_default is not None and sector_default > 0:
            prorated = pro_rate(sector_default, duration_hours, settings, duration_minutes=duration_minutes)
            if prorated is not None:
                return _result(prorated, "sector_default", duration_hours, base_value_used=sector_default)

    return _result(None, "none", duration_hours)


def source_label(source: str) -> str:
    return SOURCE_LABELS.get(source, source)
