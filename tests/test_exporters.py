import sys
from decimal import Decimal
from pathlib import Path

import pandas as pd
from openpyxl import load_workbook

sys.path.append(str(Path(__file__).resolve().parents[1]))

from shiftpay.core.aggregate import aggregate_financial
from shiftpay.core.entries import map_schedule_to_entries
from shiftpay.core.schema import ScheduleAssignment, ScheduleShift, SectorLookup
from shiftpay.core.settings import FinancialSettings
from shiftpay.exporters.entries_csv import export_entries_csv, render_entries_csv
from shiftpay.exporters.report_xlsx import export_report_xlsx

SETTINGS = FinancialSettings()


def _entries():
    sectors = [SectorLookup(id="ps", name="Pronto Socorro", default_day_value=1200)]
    shifts = [
        ScheduleShift(id="s1", shift_date="2025-05-02", start_time="07:00", end_time="13:00", sector_id="ps"),
        ScheduleShift(id="s2", shift_date="2025-05-01", start_time="07:00", end_time="19:00", base_value="-1"),
        ScheduleShift(id="s3", shift_date="2025-05-03", start_time="19:00", end_time="07:00", sector_id="ps"),
    ]
    assignments = [
        ScheduleAssignment(id="a1", shift_id="s1", user_id="ana", profile_name="Ana"),
        ScheduleAssignment(id="a2", shift_id="s2", user_id="bruno", profile_name="Bruno"),
    ]
    return map_schedule_to_entries(shifts, assignments, sectors, settings=SETTINGS)


def test_entries_csv_layout(tmp_path):
    entries = _entries()
    total = aggregate_financial(entries, SETTINGS).grand_totals.total_value
    path = export_entries_csv(tmp_path / "out" / "financeiro.csv", entries, total)

    assert path.read_bytes().startswith(b"\xef\xbb\xbf")
    df = pd.read_csv(path, sep=";", dtype=str, encoding="utf-8-sig", keep_default_na=False)

    assert list(df.columns) == ["Data", "Horário", "Duração (h)", "Setor", "Plantonista", "Valor", "Origem"]
    assert df["Data"].tolist()[:3] == ["01/05/2025", "02/05/2025", "03/05/2025"]
    assert df.loc[0, "Valor"] == "Sem valor"
    assert df.loc[0, "Origem"] == "Inválido"
    assert df.loc[1, "Horário"] == "07:00 - 13:00"
    assert df.loc[1, "Duração (h)"] == "6.0"
    assert df.loc[1, "Valor"] == "600.00"
    assert df.loc[1, "Origem"] == "Padrão"
    assert df.loc[2, "Plantonista"] == "Vago"
    assert df.iloc[-1]["Plantonista"] == "TOTAL"
    assert df.iloc[-1]["Valor"] == "600.00"


def test_render_entries_csv_without_rows():
    text = render_entries_csv([], Decimal("0"))
    lines = text.strip().splitlines()
    assert lines[0].startswith("Data;Horário")
    assert lines[-1].endswith("TOTAL;0.00;")


def test_report_workbook(tmp_path):
    entries = _entries()
    summary = aggregate_financial(entries, SETTINGS)
    path = export_report_xlsx(tmp_path / "relatorio.xlsx", summary)

    workbook = load_workbook(path)
    assert workbook.sheetnames == ["Plantonistas", "Setores", "Lançamentos"]

    sectors = pd.read_excel(path, sheet_name="Setores")
    totals = sectors[sectors["plantonista"] == "TOTAL"].set_index("setor")["total"].to_dict()
    assert totals == {"Pronto Socorro": 600.0, "Sem Setor": 0.0}

    launches = pd.read_excel(path, sheet_name="Lançamentos")
    assert launches["id"].tolist() == ["a2", "a1", "unassigned:s3"]
    assert launches.loc[0, "motivo"] == "base_value negativo"
