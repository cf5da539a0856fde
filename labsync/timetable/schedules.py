from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from labsync.core.errors import ConflictError, NotFoundError, ValidationError
from labsync.models.period import Period
from labsync.models.schedule import SESSION_TYPES, Schedule
from labsync.models.timetable_version import TimetableVersion
from labsync.timetable.conflicts import Conflict, SessionSlot, find_conflicts
from labsync.timetable.versions import VersionManager

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "session_title",
    "session_type",
    "session_description",
    "schedule_date",
    "period_id",
    "lab_id",
    "room_name",
    "instructor_id",
    "instructor_name",
    "class_id",
    "group_id",
    "student_count",
    "max_capacity",
    "status",
    "notes",
)

REQUIRED_FIELDS = ("session_title", "session_type", "schedule_date", "period_id", "student_count", "status")


@dataclass
class ScheduleResult:
    schedule: Schedule
    conflicts: List[Conflict] = field(default_factory=list)


def conflicts_payload(conflicts: List[Conflict]) -> List[Dict[str, Any]]:
    return [
        {"schedule_id": c.schedule_id, "conflict_types": list(c.conflict_types), "description": c.description}
        for c in conflicts
    ]


class ScheduleService:
    """Dated sessions. Conflicts are advisory unless ``enforce_conflicts`` is on."""

    def __init__(self, db: Session, enforce_conflicts: bool = False):
        self.db = db
        self.enforce_conflicts = enforce_conflicts
        self.versions = VersionManager(db)

    def _require(self, schedule_id: int) -> Schedule:
        schedule = self.db.get(Schedule, schedule_id)
        if schedule is None:
            raise NotFoundError("schedule", schedule_id)
        return schedule

    def get_schedule(self, schedule_id: int) -> Schedule:
        return self._require(schedule_id)

    def resolve_period(self, schedule_date: date, period_id: int) -> tuple[TimetableVersion, Period]:
        """The version in force on ``schedule_date`` and its period ``period_id``."""
        version = self.versions.get_effective_version(schedule_date)
        if version is None:
            raise ValidationError(
                "no timetable version is effective on the schedule date",
                details={"schedule_date": schedule_date.isoformat()},
            )

        period = self.db.get(Period, period_id)
        if period is None:
            raise NotFoundError("period", period_id)
        if period.timetable_version_id != version.id:
            raise ValidationError(
                f"period does not belong to timetable version {version.version_number}, "
                f"which is effective on {schedule_date.isoformat()}",
                details={"period_id": period_id, "version_id": version.id},
            )
        if period.is_break:
            raise ValidationError(
                f"'{period.period_name}' is a break", details={"period_id": period_id}
            )
        return version, period

    def sessions_on(self, schedule_date: date) -> List[Schedule]:
        return list(
            self.db.execute(
                select(Schedule)
                .options(joinedload(Schedule.period))
                .where(Schedule.schedule_date == schedule_date)
                .where(Schedule.status != "cancelled")
            ).scalars().all()
        )

    def check_conflicts(self, slot: SessionSlot) -> List[Conflict]:
        existing = [SessionSlot.from_schedule(s) for s in self.sessions_on(slot.schedule_date)]
        return find_conflicts(slot, existing)

    def _guard(self, conflicts: List[Conflict], enforce: Optional[bool]) -> None:
        hard = self.enforce_conflicts if enforce is None else enforce
        if conflicts and hard:
            raise ConflictError(
                "schedule conflict detected",
                details={"conflicts": conflicts_payload(conflicts)},
            )

    def create_schedule(
        self, data: Dict[str, Any], enforce: Optional[bool] = None, created_by: Optional[str] = None
    ) -> ScheduleResult:
        if data.get("session_type", "lecture") not in SESSION_TYPES:
            raise ValidationError("unknown session type", details={"session_type": data.get("session_type")})

        version, period = self.resolve_period(data["schedule_date"], data["period_id"])

        schedule = Schedule(
            timetable_version_id=version.id,
            period=period,
            created_by=created_by,
            **{k: v for k, v in data.items() if k in UPDATABLE_FIELDS and k != "period_id"},
        )
        conflicts = self.check_conflicts(
            SessionSlot(
                schedule_date=schedule.schedule_date,
                start_time=period.start_time,
                end_time=period.end_time,
                title=schedule.session_title,
                lab_id=schedule.lab_id,
                room_name=schedule.room_name,
                instructor_id=schedule.instructor_id,
                class_id=schedule.class_id,
                group_id=schedule.group_id,
            )
        )
        self._guard(conflicts, enforce)

        self.db.add(schedule)
        self.db.commit()
        if conflicts:
            logger.warning(
                "schedule %s saved on %s with %d conflict(s)", schedule.id, schedule.schedule_date, len(conflicts)
            )
        else:
            logger.info("schedule %s created on %s period %s", schedule.id, schedule.schedule_date, period.period_number)
        return ScheduleResult(schedule=schedule, conflicts=conflicts)

    def update_schedule(
        self, schedule_id: int, changes: Dict[str, Any], enforce: Optional[bool] = None
    ) -> ScheduleResult:
        schedule = self._require(schedule_id)
        changes = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS}
        if not changes:
            raise ValidationError("no valid fields to update")
        nulled = sorted(k for k in REQUIRED_FIELDS if k in changes and changes[k] is None)
        if nulled:
            raise ValidationError("fields cannot be null", details={"fields": nulled})

        if "session_type" in changes and changes["session_type"] not in SESSION_TYPES:
            raise ValidationError("unknown session type", details={"session_type": changes["session_type"]})

        if "schedule_date" in changes or "period_id" in changes:
            version, period = self.resolve_period(
                changes.get("schedule_date", schedule.schedule_date),
                changes.get("period_id", schedule.period_id),
            )
            schedule.timetable_version_id = version.id
            schedule.period = period
            changes.pop("period_id", None)

        for key, value in changes.items():
            setattr(schedule, key, value)

        conflicts: List[Conflict] = []
        if schedule.status != "cancelled":
            conflicts = self.check_conflicts(SessionSlot.from_schedule(schedule))
            if conflicts and (self.enforce_conflicts if enforce is None else enforce):
                self.db.rollback()
                self._guard(conflicts, True)

        self.db.commit()
        logger.info("schedule %s updated (%s)", schedule.id, ", ".join(sorted(changes)) or "period")
        return ScheduleResult(schedule=schedule, conflicts=conflicts)

    def delete_schedule(self, schedule_id: int) -> None:
        schedule = self._require(schedule_id)
        self.db.delete(schedule)
        self.db.commit()
        logger.info("schedule %s deleted", schedule_id)

    def get_conflicts(self, schedule_id: int) -> List[Conflict]:
        return self.check_conflicts(SessionSlot.from_schedule(self._require(schedule_id)))

    def list_schedules(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        version_id: Optional[int] = None,
        lab_id: Optional[int] = None,
        instructor_id: Optional[int] = None,
        class_id: Optional[int] = None,
        group_id: Optional[int] = None,
        status: Optional[str] = None,
    ) -> List[Schedule]:
        q = select(Schedule).join(Period, Schedule.period_id == Period.id).options(joinedload(Schedule.period))

        if start_date:
            q = q.where(Schedule.schedule_date >= start_date)
        if end_date:
            q = q.where(Schedule.schedule_date <= end_date)
        if version_id is not None:
            q = q.where(Schedule.timetable_version_id == version_id)
        if lab_id is not None:
            q = q.where(Schedule.lab_id == lab_id)
        if instructor_id is not None:
            q = q.where(Schedule.instructor_id == instructor_id)
        if class_id is not None:
            q = q.where(Schedule.class_id == class_id)
        if group_id is not None:
            q = q.where(Schedule.group_id == group_id)
        if status:
            q = q.where(Schedule.status == status)

        q = q.order_by(Schedule.schedule_date, Period.display_order, Schedule.id)
        return list(self.db.execute(q).scalars().unique().all())

    def get_stats(self, start_date: Optional[date] = None, end_date: Optional[date] = None) -> Dict[str, Any]:
        filters = []
        if start_date:
            filters.append(Schedule.schedule_date >= start_date)
        if end_date:
            filters.append(Schedule.schedule_date <= end_date)

        by_status = dict(
            self.db.execute(
                select(Schedule.status, func.count(Schedule.id)).where(*filters).group_by(Schedule.status)
            ).all()
        )
        by_type = dict(
            self.db.execute(
                select(Schedule.session_type, func.count(Schedule.id)).where(*filters).group_by(Schedule.session_type)
            ).all()
        )

        def distinct(column) -> int:
            return self.db.scalar(
                select(func.count(func.distinct(column))).where(*filters).where(column.is_not(None))
            ) or 0

        return {
            "total_schedules": sum(by_status.values()),
            "scheduled_sessions": by_status.get("scheduled", 0),
            "completed_sessions": by_status.get("completed", 0),
            "cancelled_sessions": by_status.get("cancelled", 0),
            "rescheduled_sessions": by_status.get("rescheduled", 0),
            "unique_instructors": distinct(Schedule.instructor_id),
            "unique_labs": distinct(Schedule.lab_id),
            "unique_classes": distinct(Schedule.class_id),
            "session_types": {t: by_type.get(t, 0) for t in SESSION_TYPES},
        }
