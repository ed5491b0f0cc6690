from __future__ import annotations

from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Iterable

import pandas as pd

from shiftpay.core.schema import FinancialEntry
from shiftpay.core.valuation import source_label

COLUMNS = ["Data", "Horário", "Duração (h)", "Setor", "Plantonista", "Valor", "Origem"]
NO_VALUE = "Sem valor"


def _display_date(value: str) -> str:
    try:
        return date.fromisoformat(value).strftime("%d/%m/%Y")
    except ValueError:
        return value


def entries_frame(entries: Iterable[FinancialEntry], total_value: Decimal) -> pd.DataFrame:
    records = []
    for entry in entries:
        value = None if entry.value_source == "invalid" else entry.final_value
        records.append(
            {
                "Data": _display_date(entry.shift_date),
                "Horário": f"{entry.start_time[:5]} - {entry.end_time[:5]}",
                "Duração (h)": f"{entry.duration_hours:.1f}",
                "Setor": entry.sector_name,
                "Plantonista": entry.assignee_name,
                "Valor": f"{value:.2f}" if value is not None else NO_VALUE,
                "Origem": source_label(entry.value_source),
            }
        )
    records.append({**{column: "" for column in COLUMNS}, "Plantonista": "TOTAL", "Valor": f"{total_value:.2f}"})
    return pd.DataFrame(records, columns=COLUMNS)


def render_entries_csv(entries: Iterable[FinancialEntry], total_value: Decimal) -> str:
    return entries_frame(entries, total_value).to_csv(sep=";", index=False)


def export_entries_csv(path: Path, entries: Iterable[FinancialEntry], total_value: Decimal) -> Path:
    df = entries_frame(entries, total_value)
    path.parent.mkdir(parents=True, exist_ok=True)
    # utf-8-sig so spreadsheet apps detect the accents.
    df.to_csv(path, sep=";", index=False, encoding="utf-8-sig")
    return path
