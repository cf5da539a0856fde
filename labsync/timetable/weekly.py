"""Weekly class templates and their expansion into dated sessions."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, Iterator, List, Optional, Set

from sqlalchemy import false, select
from sqlalchemy.orm import Session

from labsync.core.errors import NotFoundError, ValidationError
from labsync.models.calendar_day import CalendarDay
from labsync.models.period import Period
from labsync.models.schedule import Schedule
from labsync.models.weekly_class_schedule import WeeklyClassSchedule
from labsync.timetable.bulk import BulkSummary
from labsync.timetable.conflicts import SessionSlot
from labsync.timetable.schedules import ScheduleService, conflicts_payload
from labsync.timetable.versions import get_effective_version

logger = logging.getLogger(__name__)

TEMPLATE_FIELDS = (
    "period_id",
    "class_id",
    "group_id",
    "subject_name",
    "session_type",
    "instructor_id",
    "instructor_name",
    "lab_id",
    "room_name",
    "day_of_week",
    "start_date",
    "end_date",
    "exclude_second_saturdays",
    "exclude_sundays",
    "custom_holiday_dates",
    "is_active",
)

NULLABLE_FIELDS = ("class_id", "group_id", "instructor_id", "instructor_name", "lab_id", "room_name")


@dataclass
class GenerationSummary(BulkSummary):
    conflicts: List[Dict[str, Any]] = field(default_factory=list)


def is_second_saturday(day: date) -> bool:
    return day.isoweekday() == 6 and 8 <= day.day <= 14


def weekday_dates(template: Any) -> Iterator[date]:
    """Every date on the template's weekday between its start and end dates."""
    offset = (template.day_of_week - template.start_date.isoweekday()) % 7
    day = template.start_date + timedelta(days=offset)
    while day <= template.end_date:
        yield day
        day += timedelta(weeks=1)


def exclusion_reason(template: Any, day: date, closed_days: Set[date]) -> Optional[str]:
    if template.exclude_sundays and day.isoweekday() == 7:
        return "sunday"
    if template.exclude_second_saturdays and is_second_saturday(day):
        return "second saturday"
    holidays = {str(d) for d in template.custom_holiday_dates or []}
    if day.isoformat() in holidays:
        return "holiday"
    if day in closed_days:
        return "calendar"
    return None


class WeeklyScheduleService:
    def __init__(self, db: Session, enforce_conflicts: bool = False):
        self.db = db
        self.sessions = ScheduleService(db, enforce_conflicts=enforce_conflicts)

    def _require(self, weekly_schedule_id: int) -> WeeklyClassSchedule:
        template = self.db.get(WeeklyClassSchedule, weekly_schedule_id)
        if template is None:
            raise NotFoundError("weekly schedule", weekly_schedule_id)
        return template

    def _check(self, template: WeeklyClassSchedule) -> None:
        if not 1 <= template.day_of_week <= 7:
            raise ValidationError("day_of_week must be between 1 (Monday) and 7 (Sunday)")
        if template.end_date < template.start_date:
            raise ValidationError("end_date must not be before start_date")

        period = self.db.get(Period, template.period_id)
        if period is None:
            raise NotFoundError("period", template.period_id)
        if period.timetable_version_id != template.timetable_version_id:
            raise ValidationError(
                "period does not belong to the template's timetable version",
                details={"period_id": template.period_id},
            )

    def list_for_version(self, version_id: int) -> List[WeeklyClassSchedule]:
        self.sessions.versions.get_version(version_id)
        return list(
            self.db.execute(
                select(WeeklyClassSchedule)
                .where(WeeklyClassSchedule.timetable_version_id == version_id)
                .order_by(WeeklyClassSchedule.day_of_week, WeeklyClassSchedule.id)
            ).scalars().all()
        )

    def create(self, version_id: int, data: Dict[str, Any]) -> WeeklyClassSchedule:
        self.sessions.versions.get_version(version_id)
        template = WeeklyClassSchedule(
            timetable_version_id=version_id,
            **{k: v for k, v in data.items() if k in TEMPLATE_FIELDS},
        )
        if template.custom_holiday_dates:
            template.custom_holiday_dates = [str(d) for d in template.custom_holiday_dates]
        self._check(template)
        self.db.add(template)
        self.db.commit()
        logger.info("weekly schedule %s created for version %s", template.id, version_id)
        return template

    def update(self, weekly_schedule_id: int, changes: Dict[str, Any]) -> WeeklyClassSchedule:
        template = self._require(weekly_schedule_id)
        nulled = sorted(k for k, v in changes.items() if v is None and k in TEMPLATE_FIELDS and k not in NULLABLE_FIELDS)
        if nulled:
            raise ValidationError("fields cannot be null", details={"fields": nulled})
        for key, value in changes.items():
            if key in TEMPLATE_FIELDS:
                setattr(template, key, value)
        if "custom_holiday_dates" in changes:
            template.custom_holiday_dates = [str(d) for d in template.custom_holiday_dates or []]
        try:
            self._check(template)
        except (ValidationError, NotFoundError):
            self.db.rollback()
            raise
        self.db.commit()
        return template

    def delete(self, weekly_schedule_id: int) -> None:
        template = self._require(weekly_schedule_id)
        self.db.delete(template)
        self.db.commit()

    def _closed_days(self, start: date, end: date) -> Set[date]:
        return set(
            self.db.execute(
                select(CalendarDay.day)
                .where(CalendarDay.day >= start)
                .where(CalendarDay.day <= end)
                .where(CalendarDay.is_school_day == false())
            ).scalars().all()
        )

    def generate_from_weekly(
        self,
        version_id: int,
        weekly_schedule_id: Optional[int] = None,
        enforce: Optional[bool] = None,
        created_by: Optional[str] = None,
    ) -> GenerationSummary:
        """Expand templates of a version into sessions, one date at a time.

        A date that cannot be scheduled is recorded in ``errors`` and the run
        continues. Excluded dates (Sundays, second Saturdays, holidays, closed
        calendar days) and dates already holding a session generated from the
        same template count as skipped.
        """
        version = self.sessions.versions.get_version(version_id)
        versions = self.sessions.versions.repository.list_all()

        if weekly_schedule_id is not None:
            template = self._require(weekly_schedule_id)
            if template.timetable_version_id != version_id:
                raise ValidationError("weekly schedule belongs to another version")
            templates = [template]
        else:
            templates = [t for t in self.list_for_version(version_id) if t.is_active]

        hard = self.sessions.enforce_conflicts if enforce is None else enforce
        summary = GenerationSummary()

        for template in templates:
            period = template.period
            closed = self._closed_days(template.start_date, template.end_date)
            for day in weekday_dates(template):
                ref = f"{template.id}:{day.isoformat()}"
                if exclusion_reason(template, day, closed):
                    summary.skip()
                    continue

                effective = get_effective_version(versions, day)
                if effective is None or effective.id != version.id:
                    summary.fail(ref, f"version {version.version_number} is not effective on {day.isoformat()}")
                    continue

                duplicate = self.db.scalar(
                    select(Schedule.id)
                    .where(Schedule.weekly_schedule_id == template.id)
                    .where(Schedule.schedule_date == day)
                    .limit(1)
                )
                if duplicate is not None:
                    summary.skip()
                    continue

                slot = SessionSlot(
                    schedule_date=day,
                    start_time=period.start_time,
                    end_time=period.end_time,
                    title=template.subject_name,
                    lab_id=template.lab_id,
                    room_name=template.room_name,
                    instructor_id=template.instructor_id,
                    class_id=template.class_id,
                    group_id=template.group_id,
                )
                conflicts = self.sessions.check_conflicts(slot)
                if conflicts:
                    summary.conflicts.append({"ref": ref, "conflicts": conflicts_payload(conflicts)})
                    if hard:
                        summary.fail(ref, "schedule conflict detected")
                        continue

                self.db.add(
                    Schedule(
                        timetable_version_id=version.id,
                        period=period,
                        weekly_schedule_id=template.id,
                        schedule_date=day,
                        session_title=template.subject_name,
                        session_type=template.session_type,
                        lab_id=template.lab_id,
                        room_name=template.room_name,
                        instructor_id=template.instructor_id,
                        instructor_name=template.instructor_name,
                        class_id=template.class_id,
                        group_id=template.group_id,
                        created_by=created_by,
                    )
                )
                # later dates of this run must see the new session
                self.db.flush()
                summary.succeed()

        self.db.commit()
        logger.info(
            "version %s weekly expansion: processed=%d created=%d skipped=%d failed=%d",
            version.version_number,
            summary.processed,
            summary.successful,
            summary.skipped,
            summary.failed,
        )
        if summary.failed:
            logger.warning("weekly expansion errors: %s", summary.errors[:5])
        return summary
