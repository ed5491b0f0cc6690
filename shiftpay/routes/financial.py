from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import Response
from pydantic import ValidationError

from shiftpay.application import get_financial_service
from shiftpay.core.aggregate import aggregate_financial, build_audit_info, reconcile
from shiftpay.core.entries import map_schedule_to_entries
from shiftpay.core.schema import ScheduleAssignment, ScheduleShift, SectorLookup, UserSectorValueLookup
from shiftpay.core.selftest import run_financial_self_test
from shiftpay.core.settings import get_settings
from shiftpay.core.validation import ValidationError as PeriodError
from shiftpay.exporters.entries_csv import render_entries_csv

router = APIRouter(tags=["financial"])


def _parse_collections(payload: dict) -> dict:
    try:
        return {
            "shifts": [ScheduleShift(**row) for row in payload.get("shifts") or []],
            "assignments": [ScheduleAssignment(**row) for row in payload.get("assignments") or []],
            "sectors": [SectorLookup(**row) for row in payload.get("sectors") or []],
            "user_sector_values": [UserSectorValueLookup(**row) for row in payload.get("user_sector_values") or []],
        }
    except ValidationError as exc:
        detail = exc.errors(include_url=False, include_context=False, include_input=False)
        raise HTTPException(status_code=422, detail=detail) from exc
    except TypeError as exc:
        raise HTTPException(status_code=422, detail="collections must contain objects") from exc


@router.put("/tenants/{tenant_id}/schedule")
async def load_schedule(tenant_id: str, payload: dict) -> dict:
    collections = _parse_collections(payload)
    service = get_financial_service()
    service.load_schedule(tenant_id, **collections)
    return {"tenant_id": tenant_id, **{name: len(rows) for name, rows in collections.items()}}


@router.get("/tenants/{tenant_id}/financial")
async def get_financial_report(
    tenant_id: str,
    start: str = Query(...),
    end: str = Query(...),
    sector: str | None = Query(default=None),
    assignee: str | None = Query(default=None),
) -> dict:
    service = get_financial_service()
    try:
        report = service.build_report(tenant_id, start, end, sector_id=sector, assignee_id=assignee)
    except PeriodError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return report.model_dump(mode="json")


@router.get("/tenants/{tenant_id}/financial/export.csv")
async def export_financial_csv(
    tenant_id: str,
    start: str = Query(...),
    end: str = Query(...),
    sector: str | None = Query(default=None),
    assignee: str | None = Query(default=None),
) -> Response:
    service = get_financial_service()
    try:
        entries = service.build_entries(tenant_id, start, end, sector_id=sector, assignee_id=assignee)
    except PeriodError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    total = aggregate_financial(entries, service.settings).grand_totals.total_value
    content = "\ufeff" + render_entries_csv(entries, total)
    filename = f"financeiro-{start}-a-{end}.csv"
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/financial/evaluate")
async def evaluate(payload: dict) -> dict:
    collections = _parse_collections(payload)
    policy = payload.get("policy")
    if policy is not None and policy not in {"cascade", "assigned_or_base"}:
        raise HTTPException(status_code=400, detail="policy must be cascade or assigned_or_base")

    try:
        settings = get_settings()
    except PeriodError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    entries = map_schedule_to_entries(
        collections["shifts"],
        collections["assignments"],
        collections["sectors"],
        collections["user_sector_values"],
        policy=policy,
        settings=settings,
    )
    summary = aggregate_financial(entries, settings)
    audit = build_audit_info(entries)
    return {
        "entries": [entry.model_dump(mode="json") for entry in entries],
        "summary": summary.model_dump(mode="json"),
        "audit": audit.model_dump(mode="json"),
        "discrepancies": reconcile(entries, summary, audit),
    }


@router.get("/financial/self-test")
async def self_test() -> dict:
    return run_financial_self_test().model_dump()
