"""Infrastructure layer for schedule data access."""
from __future__ import annotations

from datetime import date
from typing import Iterable, Protocol

from shiftpay.core.schema import ScheduleAssignment, ScheduleShift, SectorLookup, UserSectorValueLookup
from shiftpay.domain import ScheduleSnapshot, TenantSchedule


class ScheduleRepository(Protocol):
    """Read contract for the data-access layer that feeds the engine."""

    def replace_schedule(
        self,
        tenant_id: str,
        *,
        shifts: Iterable[ScheduleShift],
        assignments: Iterable[ScheduleAssignment],
        sectors: Iterable[SectorLookup],
        user_sector_values: Iterable[UserSectorValueLookup] = (),
    ) -> None: ...

    def snapshot(self, tenant_id: str, start: date, end: date) -> ScheduleSnapshot: ...

    def reset(self) -> None: ...


class InMemoryScheduleRepository:
    """Simple in-memory repository for fast iteration and tests."""

    def __init__(self) -> None:
        self._tenants: dict[str, TenantSchedule] = {}

    def replace_schedule(
        self,
        tenant_id: str,
        *,
        shifts: Iterable[ScheduleShift],
        assignments: Iterable[ScheduleAssignment],
        sectors: Iterable[SectorLookup],
        user_sector_values: Iterable[UserSectorValueLookup] = (),
    ) -> None:
        self._tenants[tenant_id] = TenantSchedule(
            tenant_id=tenant_id,
            shifts=list(shifts),
            assignments=list(assignments),
            sectors=list(sectors),
            user_sector_values=list(user_sector_values),
        )

    def snapshot(self, tenant_id: str, start: date, end: date) -> ScheduleSnapshot:
        schedule = self._tenants.get(tenant_id)
        if schedule is None:
            return ScheduleSnapshot(tenant_id=tenant_id)

        lower, upper = start.isoformat(), end.isoformat()
        shifts = tuple(shift for shift in schedule.shifts if lower <= shift.shift_date <= upper)
        shift_ids = {shift.id for shift in shifts}
        assignments = tuple(item for item in schedule.assignments if item.shift_id in shift_ids)
        return ScheduleSnapshot(
            tenant_id=tenant_id,
            shifts=shifts,
            assignments=assignments,
            sectors=tuple(schedule.sectors),
            user_sector_values=tuple(schedule.user_sector_values),
        )

    def reset(self) -> None:
        self._tenants.clear()
