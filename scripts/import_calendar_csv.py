#!/usr/bin/env python3
"""Upload a school calendar CSV (date,is_school_day,kind,note) to /calendar/import.

Dates may be ISO (2026-08-15) or day-first (15/08/2026).
"""
from __future__ import annotations

import csv
import os
import sys
from datetime import date, datetime

import requests
from dotenv import load_dotenv


def parse_bool(value: str) -> bool:
    return value.strip().lower() in ["yes", "true", "1", "y"]


def parse_day(value: str) -> date:
    value = value.strip()
    for fmt in ("%Y-%m-%d", "%d/%m/%Y"):
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    raise SystemExit(f"unrecognised date: {value!r}")


def read_rows(csv_path: str) -> list[dict]:
    data = []
    with open(csv_path, newline="", encoding="utf-8-sig") as csvfile:
        for row in csv.DictReader(csvfile):
            data.append(
                {
                    "day": parse_day(row["date"]).isoformat(),
                    "is_school_day": parse_bool(row.get("is_school_day") or "yes"),
                    "kind": (row.get("kind") or "regular").strip().lower(),
                    "note": (row.get("note") or "").strip() or None,
                }
            )
    return data


def main() -> None:
    load_dotenv()

    token = os.getenv("ACCESS_TOKEN")
    if not token:
        raise SystemExit("ACCESS_TOKEN not set. Run: ACCESS_TOKEN=... python3 scripts/import_calendar_csv.py calendar.csv")
    if len(sys.argv) != 2:
        raise SystemExit("usage: import_calendar_csv.py <calendar.csv>")

    api_url = os.getenv("API_BASE", "http://127.0.0.1:8000").rstrip("/") + "/calendar/import"
    data = read_rows(sys.argv[1])

    response = requests.post(
        api_url,
        json=data,
        headers={"Authorization": f"Bearer {token}", "Content-Type": "application/json"},
        timeout=60,
    )

    print("Status:", response.status_code)
    print(f"{len(data)} days sent")
    if response.status_code != 200:
        print(response.text)
        raise SystemExit(2)


if __name__ == "__main__":
    main()
