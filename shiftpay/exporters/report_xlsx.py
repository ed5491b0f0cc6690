from __future__ import annotations

from pathlib import Path

import pandas as pd

from shiftpay.core.entries import entry_sort_key
from shiftpay.core.schema import FinancialSummary
from shiftpay.core.valuation import source_label


def _plantonista_rows(summary: FinancialSummary) -> list[dict]:
    rows = []
    for report in summary.plantonista_reports:
        for sector in report.sectors:
            rows.append(
                {
                    "plantonista": report.assignee_name,
                    "setor": sector.sector_name,
                    "plantoes": sector.sector_shifts,
                    "horas": float(sector.sector_hours),
                    "com_valor": sector.sector_paid,
                    "sem_valor": sector.sector_unpriced,
                    "total": float(sector.sector_total),
                }
            )
        rows.append(
            {
                "plantonista": report.assignee_name,
                "setor": "TOTAL",
                "plantoes": report.total_shifts,
                "horas": float(report.total_hours),
                "com_valor": report.paid_shifts,
                "sem_valor": report.unpriced_shifts,
                "total": float(report.total_to_receive),
            }
        )
    return rows


def _sector_rows(summary: FinancialSummary) -> list[dict]:
    rows = []
    for report in summary.sector_reports:
        for item in report.plantonistas:
            rows.append(
                {
                    "setor": report.sector_name,
                    "plantonista": item.assignee_name,
                    "plantoes": item.shifts,
                    "horas": float(item.hours),
                    "com_valor": item.paid,
                    "sem_valor": item.unpriced,
                    "total": float(item.value),
                }
            )
        rows.append(
            {
                "setor": report.sector_name,
                "plantonista": "TOTAL",
                "plantoes": report.total_shifts,
                "horas": float(report.total_hours),
                "com_valor": report.paid_shifts,
                "sem_valor": report.unpriced_shifts,
                "total": float(report.total_value),
            }
        )
    return rows


def _entry_rows(summary: FinancialSummary) -> list[dict]:
    entries = [entry for report in summary.plantonista_reports for entry in report.entries]
    rows = []
    for entry in sorted(entries, key=entry_sort_key):
        rows.append(
            {
                "id": entry.id,
                "data": entry.shift_date,
                "inicio": entry.start_time,
                "fim": entry.end_time,
                "horas": float(entry.duration_hours),
                "setor": entry.sector_name,
                "plantonista": entry.assignee_name,
                "valor": float(entry.final_value) if entry.is_paid else None,
                "origem": source_label(entry.value_source),
                "motivo": entry.value_invalid_reason,
            }
        )
    return rows


def export_report_xlsx(path: Path, summary: FinancialSummary) -> Path:
    """Write the per-assignee, per-sector and entry sheets to one workbook."""

    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame(_plantonista_rows(summary)).to_excel(writer, sheet_name="Plantonistas", index=False)
        pd.DataFrame(_sector_rows(summary)).to_excel(writer, sheet_name="Setores", index=False)
        pd.DataFrame(_entry_rows(summary)).to_excel(writer, sheet_name="Lançamentos", index=False)
    return path
