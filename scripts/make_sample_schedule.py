#!/usr/bin/env python
from __future__ import annotations

import argparse
import json
from calendar import monthrange
from pathlib import Path

SECTORS = [
    {"id": "cc", "name": "Centro Cirúrgico", "default_day_value": 1200, "default_night_value": 1500},
    {"id": "ps", "name": "Pronto Socorro", "default_day_value": 1000, "default_night_value": 1300},
    {"id": "uti", "name": "UTI"},
]

SLOTS = [("07:00", "19:00"), ("19:00", "07:00"), ("07:00", "13:00")]


def build_schedule(month: str, people: list[str]) -> dict:
    year, mon = (int(part) for part in month.split("-"))
    days = monthrange(year, mon)[1]

    shifts: list[dict] = []
    assignments: list[dict] = []
    for day in range(1, days + 1):
        for index, (start, end) in enumerate(SLOTS):
            sector = SECTORS[(day + index) % len(SECTORS)]
            shift_id = f"{month}-{day:02d}-{index}"
            shifts.append(
                {
                    "id": shift_id,
                    "shift_date": f"{month}-{day:02d}",
                    "start_time": start,
                    "end_time": end,
                    "sector_id": sector["id"],
                    "base_value": None,
                }
            )
            # Leave every fifth slot open.
            if (day + index) % 5 == 0:
                continue
            person = people[(day + index) % len(people)]
            assignments.append(
                {
                    "id": f"{shift_id}-{person.lower()}",
                    "shift_id": shift_id,
                    "user_id": person.lower(),
                    "assigned_value": None,
                    "profile_name": person,
                }
            )
    return {"shifts": shifts, "assignments": assignments, "sectors": SECTORS, "user_sector_values": []}


def main() -> None:
    parser = argparse.ArgumentParser(description="Gera uma escala de exemplo para PUT /api/tenants/{id}/schedule")
    parser.add_argument("--month", required=True, help="Mês da escala, formato YYYY-MM")
    parser.add_argument("--output", required=True, help="Arquivo de saída (.json)")
    parser.add_argument("--people", default="Ana,Bruno,Carla", help="Plantonistas separados por vírgula")
    args = parser.parse_args()

    people = [name.strip() for name in args.people.split(",") if name.strip()]
    payload = build_schedule(args.month, people)

    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
    print(f"Escala de exemplo gerada: {output}")


if __name__ == "__main__":
    main()
