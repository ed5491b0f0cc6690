from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from typing import Callable, Iterable, Sequence

from shiftpay.core.money import ZERO
from shiftpay.core.name_normalize import sort_key
from shiftpay.core.schema import (
    AssigneeSubtotal,
    AuditInfo,
    AuditLine,
    DailyTotal,
    FinancialEntry,
    FinancialSummary,
    GrandTotals,
    PlantonistaReport,
    SectorReport,
    SectorSubtotal,
)
from shiftpay.core.settings import FinancialSettings, get_settings
from shiftpay.core.validation import validate_period

logger = logging.getLogger(__name__)


@dataclass
class _Tally:
    shifts: int = 0
    hours: Decimal = ZERO
    paid: int = 0
    unpriced: int = 0
    value: Decimal = ZERO

    def add(self, entry: FinancialEntry) -> None:
        self.shifts += 1
        self.hours += entry.duration_hours
        if entry.is_paid:
            self.paid += 1
            self.value += entry.final_value
        else:
            self.unpriced += 1


@dataclass
class _Group:
    key: str
    ident: str | None
    name: str
    tally: _Tally = field(default_factory=_Tally)
    entries: list[FinancialEntry] = field(default_factory=list)


# (grouping key, identity reported to callers, display name)
Dimension = Callable[[FinancialEntry, FinancialSettings], tuple]


def by_assignee(entry: FinancialEntry, settings: FinancialSettings) -> tuple[str, str | None, str]:
    return entry.assignee_id, entry.assignee_id, entry.assignee_name


def by_sector(entry: FinancialEntry, settings: FinancialSettings) -> tuple[str, str | None, str]:
    return entry.sector_id or settings.no_sector_key, entry.sector_id, entry.sector_name


def _group_entries(
    entries: Iterable[FinancialEntry],
    dimension: Dimension,
    settings: FinancialSettings,
) -> list[_Group]:
    groups: dict[str, _Group] = {}
    for entry in entries:
        key, ident, name = dimension(entry, settings)
        group = groups.get(key)
        if group is None:
            group = groups[key] = _Group(key=key, ident=ident, name=name)
        group.tally.add(entry)
        group.entries.append(entry)
    return sorted(groups.values(), key=lambda group: sort_key(group.name))


def _plantonista_report(group: _Group, settings: FinancialSettings) -> PlantonistaReport:
    sectors = [
        SectorSubtotal(
            sector_id=sub.ident,
            sector_name=sub.name,
            sector_shifts=sub.tally.shifts,
            sector_hours=sub.tally.hours,
            sector_paid=sub.tally.paid,
            sector_unpriced=sub.tally.unpriced,
            sector_total=sub.tally.value,
        )
        for sub in _group_entries(group.entries, by_sector, settings)
    ]
    return PlantonistaReport(
        assignee_id=group.key,
        assignee_name=group.name,
        total_shifts=group.tally.shifts,
        total_hours=group.tally.hours,
        paid_shifts=group.tally.paid,
        unpriced_shifts=group.tally.unpriced,
        total_to_receive=group.tally.value,
        sectors=sectors,
        entries=list(group.entries),
    )


def _sector_report(group: _Group, settings: FinancialSettings) -> SectorReport:
    plantonistas = [
        AssigneeSubtotal(
            assignee_id=sub.key,
            assignee_name=sub.name,
            shifts=sub.tally.shifts,
            hours=sub.tally.hours,
            paid=sub.tally.paid,
            unpriced=sub.tally.unpriced,
            value=sub.tally.value,
        )
        for sub in _group_entries(group.entries, by_assignee, settings)
    ]
    return SectorReport(
        sector_id=group.ident,
        sector_name=group.name,
        total_shifts=group.tally.shifts,
        total_hours=group.tally.hours,
        paid_shifts=group.tally.paid,
        unpriced_shifts=group.tally.unpriced,
        total_value=group.tally.value,
        plantonistas=plantonistas,
    )


def aggregate_financial(
    entries: Sequence[FinancialEntry],
    settings: FinancialSettings | None = None,
) -> FinancialSummary:
    """Grand totals plus the per-assignee and per-sector reports.

    Invalid entries and entries without a value count as unpriced; every
    entry contributes to exactly one group of each report.
    """

    settings = settings or get_settings()

    totals = _Tally()
    for entry in entries:
        totals.add(entry)

    plantonista_reports = [_plantonista_report(group, settings) for group in _group_entries(entries, by_assignee, settings)]
    sector_reports = [_sector_report(group, settings) for group in _group_entries(entries, by_sector, settings)]

    grand_totals = GrandTotals(
        total_shifts=totals.shifts,
        total_hours=totals.hours,
        paid_shifts=totals.paid,
        unpriced_shifts=totals.unpriced,
        total_value=totals.value,
        total_plantonistas=len(plantonista_reports),
    )
    return FinancialSummary(
        grand_totals=grand_totals,
        plantonista_reports=plantonista_reports,
        sector_reports=sector_reports,
    )


def build_audit_info(entries: Sequence[FinancialEntry]) -> AuditInfo:
    """Re-derive the payable sum straight from the entry list."""

    audit = AuditInfo(total_loaded=len(entries))
    for entry in entries:
        if entry.value_source == "invalid":
            audit.invalid_value += 1
            continue
        if entry.final_value is None:
            audit.without_value += 1
            continue
        audit.with_value += 1
        audit.included_ids.append(entry.id)
        audit.sum_details.append(AuditLine(id=entry.id, assignee_name=entry.assignee_name, final_value=entry.final_value))
        audit.final_sum += entry.final_value
    return audit


def reconcile(
    entries: Sequence[FinancialEntry],
    summary: FinancialSummary,
    audit: AuditInfo | None = None,
) -> list[str]:
    """List every way ``summary`` disagrees with ``entries``; empty means consistent."""

    audit = audit or build_audit_info(entries)
    totals = summary.grand_totals
    problems: list[str] = []

    def check(label: str, expected: object, actual: object) -> None:
        if expected != actual:
            problems.append(f"{label}: expected {expected}, got {actual}")

    check("total_shifts vs entries", len(entries), totals.total_shifts)
    check("paid + unpriced vs total_shifts", totals.total_shifts, totals.paid_shifts + totals.unpriced_shifts)
    check("audit.final_sum vs total_value", audit.final_sum, totals.total_value)
    check("audit.total_loaded vs entries", len(entries), audit.total_loaded)
    check("audit.with_value vs paid_shifts", totals.paid_shifts, audit.with_value)
    check(
        "audit without+invalid vs unpriced_shifts",
        totals.unpriced_shifts,
        audit.without_value + audit.invalid_value,
    )

    check(
        "plantonista total_to_receive vs total_value",
        totals.total_value,
        sum((report.total_to_receive for report in summary.plantonista_reports), ZERO),
    )
    check(
        "plantonista total_shifts vs total_shifts",
        totals.total_shifts,
        sum(report.total_shifts for report in summary.plantonista_reports),
    )
    check(
        "sector total_value vs total_value",
        totals.total_value,
        sum((report.total_value for report in summary.sector_reports), ZERO),
    )
    check(
        "sector total_shifts vs total_shifts",
        totals.total_shifts,
        sum(report.total_shifts for report in summary.sector_reports),
    )

    reported_ids = [entry.id for report in summary.plantonista_reports for entry in report.entries]
    check("distinct entries across plantonista reports", len(reported_ids), len(set(reported_ids)))

    for report in summary.plantonista_reports:
        check(
            f"sector subtotals of {report.assignee_name}",
            report.total_to_receive,
            sum((sector.sector_total for sector in report.sectors), ZERO),
        )
    for report in summary.sector_reports:
        check(
            f"plantonista subtotals of {report.sector_name}",
            report.total_value,
            sum((item.value for item in report.plantonistas), ZERO),
        )

    if problems:
        logger.error("Financial summary does not reconcile: %s", "; ".join(problems))
    return problems


def daily_breakdown(
    entries: Iterable[FinancialEntry],
    start_date: str | date,
    end_date: str | date,
) -> list[DailyTotal]:
    """One row per calendar day of the period, days without shifts included."""

    start, end = validate_period(start_date, end_date)
    by_day: dict[str, list[FinancialEntry]] = {}
    for entry in entries:
        by_day.setdefault(entry.shift_date, []).append(entry)

    days: list[DailyTotal] = []
    current = start
    while current <= end:
        key = current.isoformat()
        day_entries = sorted(by_day.get(key, []), key=lambda entry: entry.start_time)
        tally = _Tally()
        for entry in day_entries:
            tally.add(entry)
        days.append(
            DailyTotal(
                day=key,
                total_shifts=tally.shifts,
                paid_shifts=tally.paid,
                total_value=tally.value,
                entries=day_entries,
            )
        )
        current += timedelta(days=1)
    return days
