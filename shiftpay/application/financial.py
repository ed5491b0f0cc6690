"""Application service layer for financial reporting."""
from __future__ import annotations

import logging
from datetime import date
from typing import Iterable

from shiftpay.core.aggregate import aggregate_financial, build_audit_info, daily_breakdown, reconcile
from shiftpay.core.entries import filter_entries, map_schedule_to_entries
from shiftpay.core.schema import (
    FinancialEntry,
    FinancialReport,
    ScheduleAssignment,
    ScheduleShift,
    SectorLookup,
    UserSectorValueLookup,
)
from shiftpay.core.settings import FinancialSettings, get_settings
from shiftpay.core.validation import validate_period
from shiftpay.infrastructure import InMemoryScheduleRepository, ScheduleRepository

logger = logging.getLogger(__name__)


class FinancialService:
    """Coordinates schedule snapshots and the valuation engine."""

    def __init__(self, repository: ScheduleRepository, settings: FinancialSettings | None = None) -> None:
        self._repository = repository
        self._settings = settings

    @property
    def settings(self) -> FinancialSettings:
        return self._settings or get_settings()

    # ------------------------------------------------------------------
    # schedule data
    # ------------------------------------------------------------------
    def load_schedule(
        self,
        tenant_id: str,
        *,
        shifts: Iterable[ScheduleShift],
        assignments: Iterable[ScheduleAssignment],
        sectors: Iterable[SectorLookup] = (),
        user_sector_values: Iterable[UserSectorValueLookup] = (),
    ) -> None:
        self._repository.replace_schedule(
            tenant_id,
            shifts=shifts,
            assignments=assignments,
            sectors=sectors,
            user_sector_values=user_sector_values,
        )

    # ------------------------------------------------------------------
    # reporting
    # ------------------------------------------------------------------
    def build_entries(
        self,
        tenant_id: str,
        start_date: str | date,
        end_date: str | date,
        *,
        sector_id: str | None = None,
        assignee_id: str | None = None,
    ) -> list[FinancialEntry]:
        start, end = validate_period(start_date, end_date)
        snapshot = self._repository.snapshot(tenant_id, start, end)
        entries = map_schedule_to_entries(
            snapshot.shifts,
            snapshot.assignments,
            snapshot.sectors,
            snapshot.user_sector_values,
            settings=self.settings,
        )
        return filter_entries(entries, sector_id=sector_id, assignee_id=assignee_id, settings=self.settings)

    def build_report(
        self,
        tenant_id: str,
        start_date: str | date,
        end_date: str | date,
        *,
        sector_id: str | None = None,
        assignee_id: str | None = None,
    ) -> FinancialReport:
        start, end = validate_period(start_date, end_date)
        entries = self.build_entries(tenant_id, start, end, sector_id=sector_id, assignee_id=assignee_id)
        summary = aggregate_financial(entries, self.settings)
        audit = build_audit_info(entries)
        discrepancies = reconcile(entries, summary, audit)

        totals = summary.grand_totals
        logger.info(
            "Financial report for %s %s..%s: %d shifts, %d paid, total %s",
            tenant_id,
            start,
            end,
            totals.total_shifts,
            totals.paid_shifts,
            totals.total_value,
        )
        return FinancialReport(
            tenant_id=tenant_id,
            period_start=start.isoformat(),
            period_end=end.isoformat(),
            policy=self.settings.resolver_policy,
            summary=summary,
            audit=audit,
            daily=daily_breakdown(entries, start, end),
            reconciled=not discrepancies,
            discrepancies=discrepancies,
        )

    # ------------------------------------------------------------------
    # testing helpers
    # ------------------------------------------------------------------
    def reset(self) -> None:
        self._repository.reset()


_repository = InMemoryScheduleRepository()
_service = FinancialService(_repository)


def get_financial_service() -> FinancialService:
    """Return the singleton financial service for the process."""

    return _service


def reset_financial_state() -> None:
    """Reset the in-memory store (used in tests)."""

    _service.reset()
