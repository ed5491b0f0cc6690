from __future__ import annotations

from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, Field

ValueSource = Literal["assigned", "individual", "base", "sector_default", "none", "invalid"]


class ScheduleShift(BaseModel):
    id: str
    shift_date: str
    start_time: str | None = None
    end_time: str | None = None
    sector_id: str | None = None
    # Final amount for this shift, not a 12h base. Raw: may be text.
    base_value: Any = None
    title: str | None = None
    hospital: str | None = None


class ScheduleAssignment(BaseModel):
    id: str
    shift_id: str
    user_id: str
    # Manual override, already scoped to the shift duration. Raw: may be text.
    assigned_value: Any = None
    profile_name: str | None = None


class SectorLookup(BaseModel):
    id: str
    name: str
    default_day_value: Any = None
    default_night_value: Any = None


class UserSectorValueLookup(BaseModel):
    sector_id: str
    user_id: str
    day_value: Any = None
    night_value: Any = None


class ValueResult(BaseModel):
    final_value: Decimal | None = None
    source: ValueSource = "none"
    duration_hours: Decimal = Decimal("0")
    base_value_used: Decimal | None = None
    invalid_reason: str | None = None


class FinancialEntry(BaseModel):
    id: str
    shift_id: str
    shift_date: str
    start_time: str
    end_time: str
    duration_hours: Decimal
    sector_id: str | None = None
    sector_name: str
    assignee_id: str
    assignee_name: str
    title: str | None = None
    hospital: str | None = None
    assigned_value: Decimal | None = None
    base_value: Decimal | None = None
    final_value: Decimal | None = None
    value_source: ValueSource = "none"
    value_invalid_reason: str | None = None

    @property
    def is_paid(self) -> bool:
        return self.value_source != "invalid" and self.final_value is not None


class SectorSubtotal(BaseModel):
    sector_id: str | None = None
    sector_name: str
    sector_shifts: int = 0
    sector_hours: Decimal = Decimal("0")
    sector_paid: int = 0
    sector_unpriced: int = 0
    sector_total: Decimal = Decimal("0")


class PlantonistaReport(BaseModel):
    assignee_id: str
    assignee_name: str
    total_shifts: int = 0
    total_hours: Decimal = Decimal("0")
    paid_shifts: int = 0
    unpriced_shifts: int = 0
    total_to_receive: Decimal = Decimal("0")
    sectors: list[SectorSubtotal] = Field(default_factory=list)
    entries: list[FinancialEntry] = Field(default_factory=list)


class AssigneeSubtotal(BaseModel):
    assignee_id: str
    assignee_name: str
    shifts: int = 0
    hours: Decimal = Decimal("0")
    paid: int = 0
    unpriced: int = 0
    value: Decimal = Decimal("0")


class SectorReport(BaseModel):
    sector_id: str | None = None
    sector_name: str
    total_shifts: int = 0
    total_hours: Decimal = Decimal("0")
    paid_shifts: int = 0
    unpriced_shifts: int = 0
    total_value: Decimal = Decimal("0")
    plantonistas: list[AssigneeSubtotal] = Field(default_factory=list)


class GrandTotals(BaseModel):
    total_shifts: int = 0
    total_hours: Decimal = Decimal("0")
    paid_shifts: int = 0
    unpriced_shifts: int = 0
    total_value: Decimal = Decimal("0")
    total_plantonistas: int = 0


class FinancialSummary(BaseModel):
    grand_totals: GrandTotals
    plantonista_reports: list[PlantonistaReport] = Field(default_factory=list)
    sector_reports: list[SectorReport] = Field(default_factory=list)


class AuditLine(BaseModel):
    id: str
    assignee_name: str
    final_value: Decimal


class AuditInfo(BaseModel):
    total_loaded: int = 0
    with_value: int = 0
    without_value: int = 0
    invalid_value: int = 0
    included_ids: list[str] = Field(default_factory=list)
    sum_details: list[AuditLine] = Field(default_factory=list)
    final_sum: Decimal = Decimal("0")


class DailyTotal(BaseModel):
    day: str
    total_shifts: int = 0
    paid_shifts: int = 0
    total_value: Decimal = Decimal("0")
    entries: list[FinancialEntry] = Field(default_factory=list)


class FinancialReport(BaseModel):
    tenant_id: str
    period_start: str
    period_end: str
    policy: str
    summary: FinancialSummary
    audit: AuditInfo
    daily: list[DailyTotal] = Field(default_factory=list)
    reconciled: bool = True
    discrepancies: list[str] = Field(default_factory=list)


class SelfTestResult(BaseModel):
    ok: bool
    errors: list[str] = Field(default_factory=list)
