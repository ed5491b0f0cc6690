"""Deterministic acceptance run of the valuation, mapping and aggregation rules.

Uses a fixed in-memory dataset; nothing is read from storage. Any change to
the resolver must keep :func:`run_financial_self_test` green.
"""

from __future__ import annotations

from decimal import Decimal

from shiftpay.core.aggregate import aggregate_financial, build_audit_info, reconcile
from shiftpay.core.entries import map_schedule_to_entries
from shiftpay.core.schema import ScheduleAssignment, ScheduleShift, SectorLookup, SelfTestResult
from shiftpay.core.settings import FinancialSettings
from shiftpay.core.valuation import pro_rate, resolve_value

SECTORS = [
    SectorLookup(id="sector-x", name="Centro Cirúrgico"),
    SectorLookup(id="sector-y", name="Pronto Socorro", default_day_value=250, default_night_value=300),
    SectorLookup(id="sector-z", name="UTI"),
]

SHIFTS = [
    ScheduleShift(id="s1", shift_date="2025-01-10", start_time="07:00", end_time="19:00", sector_id="sector-x"),
    ScheduleShift(
        id="s2", shift_date="2025-01-11", start_time="07:00", end_time="19:00", sector_id="sector-x", base_value=400
    ),
    ScheduleShift(id="s3", shift_date="2025-01-11", start_time="19:00", end_time="07:00", sector_id="sector-y"),
    ScheduleShift(id="s4", shift_date="2025-01-12", start_time="07:00", end_time="19:00", sector_id="sector-z"),
]

ASSIGNMENTS = [
    ScheduleAssignment(id="a1", shift_id="s1", user_id="ana", assigned_value=500, profile_name="Ana"),
    ScheduleAssignment(id="a2", shift_id="s2", user_id="ana", profile_name="Ana"),
    ScheduleAssignment(id="a3", shift_id="s3", user_id="bruno", profile_name="Bruno"),
    ScheduleAssignment(id="a4", shift_id="s4", user_id="carla", profile_name="Carla"),
]

EXPECTED_SOURCES = {
    "a1": (Decimal("500"), "assigned"),
    "a2": (Decimal("400"), "base"),
    "a3": (Decimal("300"), "sector_default"),
    "a4": (None, "none"),
}
EXPECTED_BY_ASSIGNEE = {"ana": Decimal("900"), "bruno": Decimal("300"), "carla": Decimal("0")}
EXPECTED_BY_SECTOR = {"sector-x": Decimal("900"), "sector-y": Decimal("300"), "sector-z": Decimal("0")}


def _expect(errors: list[str], label: str, expected: object, actual: object) -> None:
    if expected != actual:
        errors.append(f"{label} expected {expected}, got {actual}")


def _check_resolver(errors: list[str], settings: FinancialSettings) -> None:
    base = Decimal("1200")
    _expect(errors, "pro_rate(1200, 6h)", Decimal("600.00"), pro_rate(base, Decimal("6"), settings))
    _expect(errors, "pro_rate(1200, 24h)", Decimal("2400.00"), pro_rate(base, Decimal("24"), settings))
    _expect(errors, "pro_rate(1200, 12h)", base, pro_rate(base, Decimal("12"), settings))

    overridden = resolve_value(
        assigned_value="800,00",
        base_value=400,
        individual_value=1000,
        sector_default_value=900,
        duration_hours=Decimal("12"),
        settings=settings,
    )
    _expect(errors, "assigned override source", "assigned", overridden.source)
    _expect(errors, "assigned override value", Decimal("800.00"), overridden.final_value)

    for field in ("assigned_value", "base_value"):
        invalid = resolve_value(duration_hours=Decimal("12"), settings=settings, **{field: -10})
        _expect(errors, f"negative {field} source", "invalid", invalid.source)
        _expect(errors, f"negative {field} value", None, invalid.final_value)


def run_financial_self_test(settings: FinancialSettings | None = None) -> SelfTestResult:
    # Fixed settings so a deployment's YAML cannot change the outcome.
    settings = settings or FinancialSettings()
    errors: list[str] = []

    _check_resolver(errors, settings)

    entries = map_schedule_to_entries(SHIFTS, ASSIGNMENTS, SECTORS, settings=settings)
    _expect(errors, "entry count", len(ASSIGNMENTS), len(entries))
    for entry in entries:
        expected = EXPECTED_SOURCES.get(entry.id)
        if expected is None:
            errors.append(f"unexpected entry {entry.id}")
            continue
        _expect(errors, f"{entry.id}.final_value", expected[0], entry.final_value)
        _expect(errors, f"{entry.id}.value_source", expected[1], entry.value_source)

    summary = aggregate_financial(entries, settings)
    totals = summary.grand_totals
    _expect(errors, "total_value", Decimal("1200"), totals.total_value)
    _expect(errors, "paid_shifts", 3, totals.paid_shifts)
    _expect(errors, "unpriced_shifts", 1, totals.unpriced_shifts)
    _expect(errors, "total_shifts", 4, totals.total_shifts)

    by_assignee = {report.assignee_id: report.total_to_receive for report in summary.plantonista_reports}
    _expect(errors, "per-assignee totals", EXPECTED_BY_ASSIGNEE, by_assignee)
    by_sector = {report.sector_id: report.total_value for report in summary.sector_reports}
    _expect(errors, "per-sector totals", EXPECTED_BY_SECTOR, by_sector)

    audit = build_audit_info(entries)
    _expect(errors, "audit.with_value", 3, audit.with_value)
    _expect(errors, "audit.without_value", 1, audit.without_value)
    errors.extend(reconcile(entries, summary, audit))

    return SelfTestResult(ok=not errors, errors=errors)
