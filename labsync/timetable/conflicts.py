"""Advisory clash detection between dated sessions."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Iterable, List, Optional, Tuple


@dataclass(frozen=True)
class SessionSlot:
    """The parts of a session that matter for clash detection."""

    schedule_date: date
    start_time: time
    end_time: time
    schedule_id: Optional[int] = None
    title: Optional[str] = None
    lab_id: Optional[int] = None
    room_name: Optional[str] = None
    instructor_id: Optional[int] = None
    class_id: Optional[int] = None
    group_id: Optional[int] = None
    status: str = "scheduled"

    @classmethod
    def from_schedule(cls, schedule) -> "SessionSlot":
        return cls(
            schedule_date=schedule.schedule_date,
            start_time=schedule.period.start_time,
            end_time=schedule.period.end_time,
            schedule_id=schedule.id,
            title=schedule.session_title,
            lab_id=schedule.lab_id,
            room_name=schedule.room_name,
            instructor_id=schedule.instructor_id,
            class_id=schedule.class_id,
            group_id=schedule.group_id,
            status=schedule.status,
        )


@dataclass(frozen=True)
class Conflict:
    schedule_id: Optional[int]
    conflict_types: Tuple[str, ...]
    description: str


def times_overlap(start_a: time, end_a: time, start_b: time, end_b: time) -> bool:
    # half-open: back-to-back periods do not overlap
    return start_a < end_b and start_b < end_a


def _same_room(a: SessionSlot, b: SessionSlot) -> bool:
    if a.lab_id is not None and b.lab_id is not None:
        return a.lab_id == b.lab_id
    if a.room_name and b.room_name:
        return a.room_name.strip().lower() == b.room_name.strip().lower()
    return False


def _same_class(a: SessionSlot, b: SessionSlot) -> bool:
    if a.class_id is None or b.class_id is None or a.class_id != b.class_id:
        return False
    # no group means the whole class
    if a.group_id is None or b.group_id is None:
        return True
    return a.group_id == b.group_id


def shared_resources(a: SessionSlot, b: SessionSlot) -> Tuple[str, ...]:
    shared = []
    if _same_room(a, b):
        shared.append("lab")
    if a.instructor_id is not None and a.instructor_id == b.instructor_id:
        shared.append("instructor")
    if _same_class(a, b):
        shared.append("class")
    return tuple(shared)


def find_conflicts(candidate: SessionSlot, existing: Iterable[SessionSlot]) -> List[Conflict]:
    conflicts: List[Conflict] = []
    for other in existing:
        if other.status == "cancelled":
            continue
        if candidate.schedule_id is not None and other.schedule_id == candidate.schedule_id:
            continue
        if other.schedule_date != candidate.schedule_date:
            continue
        if not times_overlap(other.start_time, other.end_time, candidate.start_time, candidate.end_time):
            continue

        shared = shared_resources(candidate, other)
        if not shared:
            continue

        conflicts.append(
            Conflict(
                schedule_id=other.schedule_id,
                conflict_types=shared,
                description=(
                    f"{' and '.join(shared)} already booked for '{other.title or 'session'}' "
                    f"on {other.schedule_date.isoformat()} "
                    f"{other.start_time.strftime('%H:%M')}-{other.end_time.strftime('%H:%M')}"
                ),
            )
        )
    return conflicts
