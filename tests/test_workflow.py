import json
import sys
from decimal import Decimal
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

sys.path.append(str(Path(__file__).resolve().parents[1]))

from shiftpay.application import FinancialService, get_financial_service, reset_financial_state
from shiftpay.core.schema import ScheduleAssignment, ScheduleShift, SectorLookup
from shiftpay.core.settings import FinancialSettings, reset_settings
from shiftpay.core.validation import ValidationError
from shiftpay.infrastructure import InMemoryScheduleRepository

SCHEDULE = {
    "sectors": [
        {"id": "cc", "name": "Centro Cirúrgico", "default_day_value": "1.200,00", "default_night_value": 1500},
        {"id": "uti", "name": "UTI"},
    ],
    "shifts": [
        {"id": "s1", "shift_date": "2025-06-01", "start_time": "07:00:00", "end_time": "19:00:00", "sector_id": "cc"},
        {"id": "s2", "shift_date": "2025-06-01", "start_time": "19:00", "end_time": "07:00", "sector_id": "cc"},
        {"id": "s3", "shift_date": "2025-06-02", "start_time": "07:00", "end_time": "13:00", "sector_id": "uti", "base_value": 450},
        {"id": "s4", "shift_date": "2025-06-03", "start_time": "07:00", "end_time": "19:00", "sector_id": "uti", "base_value": 900},
        {"id": "s5", "shift_date": "2025-07-01", "start_time": "07:00", "end_time": "19:00", "sector_id": "cc"},
    ],
    "assignments": [
        {"id": "a1", "shift_id": "s1", "user_id": "ana", "profile_name": "Ana"},
        {"id": "a2", "shift_id": "s2", "user_id": "bruno", "assigned_value": "1.100,50", "profile_name": "Bruno"},
        {"id": "a3", "shift_id": "s3", "user_id": "ana", "profile_name": "Ana"},
        {"id": "a5", "shift_id": "s5", "user_id": "ana", "profile_name": "Ana"},
    ],
    "user_sector_values": [{"sector_id": "uti", "user_id": "ana", "day_value": 1000}],
}


@pytest.fixture(autouse=True)
def reset_state(monkeypatch):
    monkeypatch.delenv("FINANCIAL_CONFIG", raising=False)
    monkeypatch.delenv("FINANCIAL_RESOLVER_POLICY", raising=False)
    reset_settings()
    reset_financial_state()
    yield
    reset_financial_state()
    reset_settings()


@pytest.fixture()
def client():
    from shiftpay.app import create_app

    app = create_app()
    with TestClient(app) as test_client:
        yield test_client


def test_end_to_end_workflow(client):
    # 1. load schedule
    response = client.put("/api/tenants/hosp-1/schedule", json=SCHEDULE)
    assert response.status_code == 200
    assert response.json() == {
        "tenant_id": "hosp-1",
        "shifts": 5,
        "assignments": 4,
        "sectors": 2,
        "user_sector_values": 1,
    }

    # 2. June report
    response = client.get("/api/tenants/hosp-1/financial", params={"start": "2025-06-01", "end": "2025-06-30"})
    assert response.status_code == 200
    report = response.json()

    assert report["policy"] == "cascade"
    assert report["reconciled"] is True
    assert report["discrepancies"] == []

    totals = report["summary"]["grand_totals"]
    assert totals["total_shifts"] == 4
    assert totals["paid_shifts"] == 3
    assert totals["unpriced_shifts"] == 1
    # 1200 (sector day default) + 1100.50 (override) + 500.00 (individual, 6h)
    assert Decimal(totals["total_value"]) == Decimal("2800.50")
    assert Decimal(report["audit"]["final_sum"]) == Decimal("2800.50")
    assert report["audit"]["included_ids"] == ["a1", "a2", "a3"]
    assert len(report["daily"]) == 30

    names = [item["assignee_name"] for item in report["summary"]["plantonista_reports"]]
    assert names == ["Ana", "Bruno", "Vago"]
    ana = report["summary"]["plantonista_reports"][0]
    assert Decimal(ana["total_to_receive"]) == Decimal("1700.00")
    assert [item["sector_name"] for item in ana["sectors"]] == ["Centro Cirúrgico", "UTI"]

    # 3. filtered by sector
    response = client.get(
        "/api/tenants/hosp-1/financial",
        params={"start": "2025-06-01", "end": "2025-06-30", "sector": "uti"},
    )
    sector_only = response.json()["summary"]
    assert sector_only["grand_totals"]["total_shifts"] == 2
    assert Decimal(sector_only["grand_totals"]["total_value"]) == Decimal("500.00")

    # 4. csv export
    response = client.get(
        "/api/tenants/hosp-1/financial/export.csv",
        params={"start": "2025-06-01", "end": "2025-06-30"},
    )
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "financeiro-2025-06-01-a-2025-06-30.csv" in response.headers["content-disposition"]
    lines = response.content.decode("utf-8-sig").strip().splitlines()
    assert lines[0].startswith("Data;")
    assert lines[-1].endswith("TOTAL;2800.50;")
    assert len(lines) == 6


def test_report_rejects_bad_period(client):
    response = client.get("/api/tenants/hosp-1/financial", params={"start": "2025-06-30", "end": "2025-06-01"})
    assert response.status_code == 400

    response = client.get("/api/tenants/hosp-1/financial", params={"start": "junho", "end": "2025-06-01"})
    assert response.status_code == 400


def test_unknown_tenant_yields_empty_report(client):
    response = client.get("/api/tenants/nobody/financial", params={"start": "2025-06-01", "end": "2025-06-02"})
    assert response.status_code == 200
    report = response.json()
    assert report["summary"]["grand_totals"]["total_shifts"] == 0
    assert [day["day"] for day in report["daily"]] == ["2025-06-01", "2025-06-02"]


def test_schedule_payload_validation(client):
    response = client.put("/api/tenants/hosp-1/schedule", json={"shifts": [{"shift_date": "2025-06-01"}]})
    assert response.status_code == 422

    response = client.put("/api/tenants/hosp-1/schedule", json={"shifts": ["not-an-object"]})
    assert response.status_code == 422


def test_stateless_evaluation_with_policy(client):
    payload = json.loads(json.dumps(SCHEDULE))
    response = client.post("/api/financial/evaluate", json={**payload, "policy": "assigned_or_base"})
    assert response.status_code == 200
    body = response.json()

    sources = {entry["id"]: entry["value_source"] for entry in body["entries"]}
    assert sources["a1"] == "none"
    assert sources["a2"] == "assigned"
    assert sources["a3"] == "base"
    assert sources["unassigned:s4"] == "none"
    assert body["discrepancies"] == []

    response = client.post("/api/financial/evaluate", json={**payload, "policy": "whatever"})
    assert response.status_code == 400


def test_bad_configured_policy_is_a_client_error(client, monkeypatch):
    monkeypatch.setenv("FINANCIAL_RESOLVER_POLICY", "guess")
    reset_settings()

    response = client.post("/api/financial/evaluate", json=SCHEDULE)
    assert response.status_code == 400
    assert "resolver_policy" in response.json()["detail"]

    response = client.get("/api/tenants/hosp-1/financial", params={"start": "2025-06-01", "end": "2025-06-30"})
    assert response.status_code == 400

    # the acceptance run carries its own settings
    response = client.get("/api/financial/self-test")
    assert response.status_code == 200
    assert response.json()["ok"] is True


def test_self_test_endpoint(client):
    response = client.get("/api/financial/self-test")
    assert response.status_code == 200
    assert response.json() == {"ok": True, "errors": []}


def test_service_takes_period_snapshot():
    service = FinancialService(InMemoryScheduleRepository(), settings=FinancialSettings())
    service.load_schedule(
        "t1",
        shifts=[
            ScheduleShift(id="s1", shift_date="2025-06-01", start_time="07:00", end_time="19:00", sector_id="x"),
            ScheduleShift(id="s2", shift_date="2025-06-15", start_time="07:00", end_time="19:00", sector_id="x"),
        ],
        assignments=[
            ScheduleAssignment(id="a1", shift_id="s1", user_id="u1", assigned_value=100, profile_name="U1"),
            ScheduleAssignment(id="a2", shift_id="s2", user_id="u2", assigned_value=200, profile_name="U2"),
        ],
        sectors=[SectorLookup(id="x", name="X")],
    )

    entries = service.build_entries("t1", "2025-06-01", "2025-06-10")
    assert [entry.id for entry in entries] == ["a1"]

    report = service.build_report("t1", "2025-06-01", "2025-06-30", assignee_id="u2")
    assert report.summary.grand_totals.total_value == Decimal("200")
    assert report.reconciled

    with pytest.raises(ValidationError):
        service.build_report("t1", "2025-06-30", "2025-06-01")


def test_singleton_service_is_shared():
    assert get_financial_service() is get_financial_service()
