from __future__ import annotations

import logging
from typing import Any, Iterable

from shiftpay.core.money import parse_money
from shiftpay.core.name_normalize import contains_any, sort_key
from shiftpay.core.schema import (
    FinancialEntry,
    ScheduleAssignment,
    ScheduleShift,
    SectorLookup,
    UserSectorValueLookup,
    ValueResult,
)
from shiftpay.core.settings import FinancialSettings, ResolverPolicy, get_settings
from shiftpay.core.valuation import is_night_shift, resolve_value, shift_duration_hours, shift_duration_minutes

logger = logging.getLogger(__name__)


def entry_sort_key(entry: FinancialEntry) -> tuple:
    return entry.shift_date, entry.start_time, sort_key(entry.assignee_name)


def placeholder_entry_id(shift_id: str, settings: FinancialSettings) -> str:
    """Entry id of an empty slot; prefixed so it never collides with an assignment id."""

    return f"{settings.unassigned_id}:{shift_id}"


def map_schedule_to_entries(
    shifts: Iterable[ScheduleShift],
    assignments: Iterable[ScheduleAssignment],
    sectors: Iterable[SectorLookup] = (),
    user_sector_values: Iterable[UserSectorValueLookup] = (),
    *,
    policy: ResolverPolicy | None = None,
    settings: FinancialSettings | None = None,
) -> list[FinancialEntry]:
    """Flatten shifts and assignments into one priced row per (shift, assignee).

    A shift without assignments still yields a single row under the
    unassigned identity, with no value, so totals cover every shift.
    """

    settings = settings or get_settings()
    policy = policy or settings.resolver_policy

    sector_by_id: dict[str, SectorLookup] = {sector.id: sector for sector in sectors}
    individual_by_key: dict[tuple[str, str], UserSectorValueLookup] = {
        (item.sector_id, item.user_id): item for item in user_sector_values
    }

    assignments_by_shift: dict[str, list[ScheduleAssignment]] = {}
    for assignment in assignments:
        assignments_by_shift.setdefault(assignment.shift_id, []).append(assignment)

    entries: list[FinancialEntry] = []
    for shift in shifts:
        duration_minutes = shift_duration_minutes(shift.start_time, shift.end_time)
        duration_hours = shift_duration_hours(shift.start_time, shift.end_time)
        sector = sector_by_id.get(shift.sector_id) if shift.sector_id else None
        sector_name = sector.name if sector else settings.no_sector_name
        night = is_night_shift(shift.start_time, settings)
        sector_default: Any = None
        if sector is not None:
            sector_default = sector.default_night_value if night else sector.default_day_value
        unpaid_sector = contains_any(sector_name, settings.unpaid_sector_keywords)

        common = {
            "shift_id": shift.id,
            "shift_date": shift.shift_date,
            "start_time": shift.start_time or "",
            "end_time": shift.end_time or "",
            "duration_hours": duration_hours,
            "sector_id": shift.sector_id,
            "sector_name": sector_name,
            "title": shift.title,
            "hospital": shift.hospital,
        }

        shift_assignments = assignments_by_shift.get(shift.id, [])
        if not shift_assignments:
            # The shift base value is never used as money for an empty slot.
            entries.append(
                FinancialEntry(
                    id=placeholder_entry_id(shift.id, settings),
                    assignee_id=settings.unassigned_id,
                    assignee_name=settings.unassigned_name,
                    assigned_value=None,
                    base_value=None if unpaid_sector else parse_money(shift.base_value),
                    final_value=None,
                    value_source="none",
                    **common,
                )
            )
            continue

        for assignment in shift_assignments:
            if unpaid_sector:
                result = ValueResult(duration_hours=duration_hours)
            else:
                individual = individual_by_key.get((shift.sector_id, assignment.user_id)) if shift.sector_id else None
                individual_value: Any = None
                if individual is not None:
                    individual_value = individual.night_value if night else individual.day_value
                result = resolve_value(
                    assigned_value=assignment.assigned_value,
                    base_value=shift.base_value,
                    individual_value=individual_value,
                    sector_default_value=sector_default,
                    duration_hours=duration_hours,
                    duration_minutes=duration_minutes,
                    policy=policy,
                    settings=settings,
                )
            if result.source == "invalid":
                logger.warning("Assignment %s excluded from totals: %s", assignment.id, result.invalid_reason)

            entries.append(
                FinancialEntry(
                    id=assignment.id,
                    assignee_id=assignment.user_id,
                    assignee_name=assignment.profile_name or settings.unnamed_assignee,
                    assigned_value=None if unpaid_sector else parse_money(assignment.assigned_value),
                    base_value=None if unpaid_sector else parse_money(shift.base_value),
                    final_value=result.final_value,
                    value_source=result.source,
                    value_invalid_reason=result.invalid_reason,
                    **common,
                )
            )

    entries.sort(key=entry_sort_key)
    logger.debug("Mapped %d entries under policy %s", len(entries), policy)
    return entries


def filter_entries(
    entries: Iterable[FinancialEntry],
    *,
    sector_id: str | None = None,
    assignee_id: str | None = None,
    settings: FinancialSettings | None = None,
) -> list[FinancialEntry]:
    """Keep entries matching the given sector and/or assignee; ``None`` means any.

    Entries without a sector match the ``no_sector_key`` sentinel.
    """

    settings = settings or get_settings()
    selected: list[FinancialEntry] = []
    for entry in entries:
        if sector_id is not None and (entry.sector_id or settings.no_sector_key) != sector_id:
            continue
        if assignee_id is not None and entry.assignee_id != assignee_id:
            continue
        selected.append(entry)
    return selected
