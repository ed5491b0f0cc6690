"""Domain entities for tenant schedule data held in memory."""
from __future__ import annotations

from dataclasses import dataclass, field

from shiftpay.core.schema import ScheduleAssignment, ScheduleShift, SectorLookup, UserSectorValueLookup


@dataclass(slots=True)
class TenantSchedule:
    """Everything stored for one tenant."""

    tenant_id: str
    shifts: list[ScheduleShift] = field(default_factory=list)
    assignments: list[ScheduleAssignment] = field(default_factory=list)
    sectors: list[SectorLookup] = field(default_factory=list)
    user_sector_values: list[UserSectorValueLookup] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ScheduleSnapshot:
    """One consistent read of a tenant's schedule for a period."""

    tenant_id: str
    shifts: tuple[ScheduleShift, ...] = ()
    assignments: tuple[ScheduleAssignment, ...] = ()
    sectors: tuple[SectorLookup, ...] = ()
    user_sector_values: tuple[UserSectorValueLookup, ...] = ()
