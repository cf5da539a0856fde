#!/usr/bin/env python3
"""Preview a school day's periods and optionally save them into a version.

    SCHOOL_START_TIME=08:00 SCHOOL_END_TIME=15:30 LECTURE_DURATION_MINUTES=45 \
    BREAKS="0:15:Morning Assembly,2:15,4:30:Lunch" TARGET_VERSION_ID=3 \
    python3 scripts/generate_periods.py
"""
from __future__ import annotations

import json
import os
from typing import Any, Dict, List, Tuple

import requests
from dotenv import load_dotenv


# ----------------------------
# Helpers
# ----------------------------

def die(msg: str, code: int = 1) -> None:
    print(f"[ERROR] {msg}")
    raise SystemExit(code)


def env_required(name: str) -> str:
    v = os.getenv(name)
    if not v:
        die(f"required environment variable not set: {name}")
    return v


def as_time(value: str) -> str:
    # the API wants HH:MM:SS
    return value if value.count(":") == 2 else f"{value}:00"


def parse_breaks(raw: str) -> List[Dict[str, Any]]:
    """``after:minutes[:name]`` entries separated by commas; 0 = before the first lecture."""
    out: List[Dict[str, Any]] = []
    for chunk in filter(None, (c.strip() for c in raw.split(","))):
        parts = chunk.split(":", 2)
        if len(parts) < 2:
            die(f"bad break entry '{chunk}', expected after:minutes[:name]")
        item: Dict[str, Any] = {"afterLecture": int(parts[0]), "durationMinutes": int(parts[1])}
        if len(parts) == 3 and parts[2].strip():
            item["name"] = parts[2].strip()
        out.append(item)
    return out


# ----------------------------
# API
# ----------------------------

def api_call(method: str, url: str, token: str, payload: Any) -> Tuple[int, Any]:
    headers = {
        "Authorization": f"Bearer {token}",
        "Content-Type": "application/json",
        "accept": "application/json",
    }
    resp = requests.request(method, url, json=payload, headers=headers, timeout=60)
    try:
        body = resp.json()
    except ValueError:
        body = resp.text
    return resp.status_code, body


def print_plan(plan: Dict[str, Any]) -> None:
    for p in plan["periods"]:
        kind = "break" if p["isBreak"] else "lecture"
        print(f"  {p['periodNumber']:>2}  {p['startTime'][:5]}-{p['endTime'][:5]}  {kind:<7}  {p['periodName']}")
    print(
        f"lectures={plan['totalPeriods']} breaks={plan['totalBreaks']} "
        f"day={plan['schoolDayDuration']}min utilization={plan['utilizationPercentage']}%"
    )


# ----------------------------
# Main
# ----------------------------

def main() -> None:
    load_dotenv()

    api_base = env_required("API_BASE").rstrip("/")
    token = env_required("ACCESS_TOKEN")

    request_body = {
        "schoolStartTime": as_time(os.getenv("SCHOOL_START_TIME", "08:00")),
        "schoolEndTime": as_time(os.getenv("SCHOOL_END_TIME", "17:00")),
        "lectureDurationMinutes": int(os.getenv("LECTURE_DURATION_MINUTES", "45")),
        "breakConfigurations": parse_breaks(os.getenv("BREAKS", "")),
    }

    status, plan = api_call("POST", f"{api_base}/timetable/config/generate-periods", token, request_body)
    if status != 200:
        die(f"generate-periods failed ({status}): {plan}")
    print_plan(plan)

    version_id = os.getenv("TARGET_VERSION_ID")
    if not version_id:
        print("TARGET_VERSION_ID not set; nothing saved.")
        return

    status, body = api_call(
        "PUT", f"{api_base}/timetable/versions/{version_id}/periods", token, {"periods": plan["periods"]}
    )
    print("API status:", status)
    print(json.dumps(body, ensure_ascii=False, indent=2) if isinstance(body, (dict, list)) else body)

    if status != 200:
        die(f"could not save periods into version {version_id}", 2)

    print(f"Saved {len(plan['periods'])} periods into version {version_id}.")


if __name__ == "__main__":
    main()
