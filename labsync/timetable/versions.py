"""Effective-dated timetable versions.

A version covers ``[effective_from, effective_until)``. Versions are never
toggled by a background job: which one is in force is computed from the
stored ranges whenever it is asked for (``get_effective_version``), and the
draft / active / superseded status is derived the same way.

Whenever effective dates change, ranges are re-chained so that each
version ends where the next one starts and the newest one is open-ended.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from labsync.core.errors import ConflictError, NotFoundError, ValidationError
from labsync.models.period import Period
from labsync.models.schedule import Schedule
from labsync.models.timetable_version import TimetableVersion
from labsync.timetable.bulk import BulkSummary
from labsync.timetable.repository import SqlVersionRepository, VersionRepository

logger = logging.getLogger(__name__)

DRAFT = "draft"
ACTIVE = "active"
SUPERSEDED = "superseded"


# ----------------------------
# Pure helpers
# ----------------------------
def get_effective_version(versions: Iterable[Any], on: date) -> Optional[Any]:
    """The version in force on ``on``: latest ``effective_from <= on``, or None."""
    candidates = [v for v in versions if v.effective_from <= on]
    if not candidates:
        return None
    current = max(candidates, key=lambda v: v.effective_from)
    if current.effective_until is not None and on >= current.effective_until:
        return None
    return current


def version_status(version: Any, versions: Iterable[Any], today: date) -> str:
    if version.effective_from > today:
        return DRAFT
    current = get_effective_version(versions, today)
    if current is not None and current.id == version.id:
        return ACTIVE
    return SUPERSEDED


def rechain(versions: Sequence[Any]) -> List[Any]:
    """Make ranges contiguous; return the versions whose ``effective_until`` changed."""
    ordered = sorted(versions, key=lambda v: v.effective_from)
    changed = []
    for current, following in zip(ordered, ordered[1:] + [None]):
        until = following.effective_from if following is not None else None
        if current.effective_until != until:
            current.effective_until = until
            changed.append(current)
    return changed


def overlapping_pairs(periods: Sequence[Any]) -> List[Tuple[Any, Any]]:
    ordered = sorted(periods, key=lambda p: (p.start_time, p.end_time))
    pairs = []
    for i, first in enumerate(ordered):
        for second in ordered[i + 1:]:
            if second.start_time >= first.end_time:
                break
            pairs.append((first, second))
    return pairs


def check_period_layout(periods: Sequence[Any]) -> None:
    """Reject a period list that breaks the per-version ordering invariants."""
    numbers = [p.period_number for p in periods]
    duplicates = sorted({n for n in numbers if numbers.count(n) > 1})
    if duplicates:
        raise ValidationError("duplicate period numbers", details={"period_numbers": duplicates})

    for p in periods:
        if p.start_time >= p.end_time:
            raise ValidationError(
                f"period '{p.period_name}' ends before it starts",
                details={"period_number": p.period_number},
            )

    ordered = sorted(periods, key=lambda p: (p.display_order, p.period_number))
    for previous, current in zip(ordered, ordered[1:]):
        if current.start_time < previous.end_time:
            raise ValidationError(
                f"period '{current.period_name}' overlaps or precedes '{previous.period_name}'",
                details={"period_numbers": [previous.period_number, current.period_number]},
            )


# ----------------------------
# Results
# ----------------------------
@dataclass
class MigrationSummary(BulkSummary):
    periods_created: int = 0


@dataclass
class VersionCreation:
    version: TimetableVersion
    migration: MigrationSummary


@dataclass
class Activation:
    version: TimetableVersion
    previous_version: Optional[TimetableVersion]
    effective_from: date


@dataclass
class PeriodChange:
    period_number: int
    change_type: str
    version1_name: Optional[str] = None
    version2_name: Optional[str] = None
    version1_start: Optional[time] = None
    version2_start: Optional[time] = None
    version1_end: Optional[time] = None
    version2_end: Optional[time] = None


@dataclass
class VersionComparison:
    periods: List[PeriodChange]
    schedules: Dict[str, int]
    summary: Dict[str, int]


@dataclass
class VersionReport:
    is_valid: bool
    issues: List[Dict[str, Any]] = field(default_factory=list)
    validated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class VersionSummary:
    version: TimetableVersion
    status: str
    period_count: int = 0
    schedule_count: int = 0
    active_schedule_count: int = 0


# ----------------------------
# Manager
# ----------------------------
class VersionManager:
    def __init__(self, db: Session, repository: Optional[VersionRepository] = None):
        self.db = db
        self.repository = repository or SqlVersionRepository(db)

    def _require(self, version_id: int) -> TimetableVersion:
        version = self.repository.get(version_id)
        if version is None:
            raise NotFoundError("timetable version", version_id)
        return version

    def get_version(self, version_id: int) -> TimetableVersion:
        return self._require(version_id)

    def get_effective_version(self, on: date) -> Optional[TimetableVersion]:
        return get_effective_version(self.repository.list_by_effective_range(on, on), on)

    def status_of(self, version: TimetableVersion, today: Optional[date] = None) -> str:
        return version_status(version, self.repository.list_all(), today or date.today())

    def list_versions(self, today: Optional[date] = None) -> List[VersionSummary]:
        today = today or date.today()
        versions = self.repository.list_all()

        period_counts = dict(
            self.db.execute(
                select(Period.timetable_version_id, func.count(Period.id)).group_by(Period.timetable_version_id)
            ).all()
        )
        schedule_counts = dict(
            self.db.execute(
                select(Schedule.timetable_version_id, func.count(Schedule.id)).group_by(
                    Schedule.timetable_version_id
                )
            ).all()
        )
        active_counts = dict(
            self.db.execute(
                select(Schedule.timetable_version_id, func.count(Schedule.id))
                .where(Schedule.status == "scheduled")
                .group_by(Schedule.timetable_version_id)
            ).all()
        )

        summaries = [
            VersionSummary(
                version=v,
                status=version_status(v, versions, today),
                period_count=period_counts.get(v.id, 0),
                schedule_count=schedule_counts.get(v.id, 0),
                active_schedule_count=active_counts.get(v.id, 0),
            )
            for v in versions
        ]
        summaries.sort(key=lambda s: s.version.effective_from, reverse=True)
        return summaries

    def create_version(
        self,
        version_name: str,
        effective_from: date,
        description: Optional[str] = None,
        copy_from_version_id: Optional[int] = None,
        copy_schedules: bool = False,
        created_by: Optional[str] = None,
    ) -> VersionCreation:
        versions = self.repository.list_all()
        latest = max(versions, key=lambda v: v.effective_from, default=None)
        if latest is not None and effective_from <= latest.effective_from:
            raise ConflictError(
                "effective date must be after every existing version's effective date",
                details={"latest_effective_from": latest.effective_from.isoformat()},
            )

        source = self._require(copy_from_version_id) if copy_from_version_id is not None else None
        if copy_schedules and source is None:
            raise ValidationError("copySchedules requires copyFromVersionId")

        version = TimetableVersion(
            version_number=str(len(versions) + 1),
            version_name=version_name,
            description=description,
            effective_from=effective_from,
            created_by=created_by,
        )
        if source is not None:
            for p in source.periods:
                version.periods.append(
                    Period(
                        period_number=p.period_number,
                        period_name=p.period_name,
                        start_time=p.start_time,
                        end_time=p.end_time,
                        is_break=p.is_break,
                        break_duration_minutes=p.break_duration_minutes,
                        display_order=p.display_order,
                    )
                )
        if latest is not None:
            latest.effective_until = effective_from
            self.repository.save(latest)
        self.repository.save(version)

        migration = MigrationSummary(periods_created=len(version.periods))
        if copy_schedules and latest is not None:
            self._migrate_schedules(latest, version, migration)

        self.db.commit()
        logger.info(
            "created timetable version %s (%s) effective %s; periods=%d migrated=%d failed=%d",
            version.version_number,
            version.version_name,
            effective_from,
            migration.periods_created,
            migration.successful,
            migration.failed,
        )
        return VersionCreation(version=version, migration=migration)

    def _migrate_schedules(
        self, previous: TimetableVersion, target: TimetableVersion, summary: MigrationSummary
    ) -> None:
        """Move the superseded version's upcoming sessions onto the target's periods.

        Periods are matched on ``period_number``; the target's periods come from
        the copy source, which need not be the version being superseded.
        """
        by_number = {p.period_number: p for p in target.periods}
        rows = self.db.execute(
            select(Schedule)
            .where(Schedule.timetable_version_id == previous.id)
            .where(Schedule.schedule_date >= target.effective_from)
            .where(Schedule.status == "scheduled")
            .order_by(Schedule.schedule_date, Schedule.id)
        ).scalars().all()

        for schedule in rows:
            period = by_number.get(schedule.period.period_number)
            if period is None:
                summary.fail(
                    schedule.id,
                    f"no period {schedule.period.period_number} in version {target.version_number}",
                )
                continue
            schedule.timetable_version_id = target.id
            schedule.period = period
            summary.succeed()

        if summary.failed:
            logger.warning(
                "version %s: %d sessions could not be migrated", target.version_number, summary.failed
            )

    def activate_version(self, version_id: int, effective_from: date) -> Activation:
        version = self._require(version_id)
        versions = self.repository.list_all()

        clash = next(
            (v for v in versions if v.id != version.id and v.effective_from == effective_from), None
        )
        if clash is not None:
            raise ConflictError(
                f"version {clash.version_number} already takes effect on {effective_from.isoformat()}",
                details={"version_id": clash.id},
            )

        earliest = min(
            (v for v in versions if v.id != version.id), key=lambda v: v.effective_from, default=None
        )
        if earliest is not None and effective_from < earliest.effective_from:
            raise ValidationError(
                f"version {earliest.version_number} would take over again on "
                f"{earliest.effective_from.isoformat()}",
                details={"version_id": earliest.id, "earliest_effective_from": earliest.effective_from.isoformat()},
            )

        version.effective_from = effective_from
        for changed in rechain(versions) + [version]:
            self.repository.save(changed)

        previous = next(
            (v for v in versions if v.id != version.id and v.effective_until == effective_from), None
        )
        self.db.commit()
        logger.info(
            "activated timetable version %s from %s (previous: %s)",
            version.version_number,
            effective_from,
            previous.version_number if previous is not None else None,
        )
        return Activation(version=version, previous_version=previous, effective_from=effective_from)

    def get_periods(self, version_id: int) -> List[Period]:
        version = self._require(version_id)
        return sorted(version.periods, key=lambda p: (p.display_order, p.period_number))

    def replace_periods(self, version_id: int, periods: Sequence[Any]) -> List[Period]:
        """Upsert a version's periods by ``period_number``.

        Existing rows are updated in place so sessions keep their period.
        Dropping a period that sessions still use is a conflict.
        """
        version = self._require(version_id)
        check_period_layout(periods)

        existing = {p.period_number: p for p in version.periods}
        incoming = {p.period_number for p in periods}
        removed = [p for number, p in existing.items() if number not in incoming]

        if removed:
            in_use = self.db.scalar(
                select(func.count(Schedule.id)).where(Schedule.period_id.in_([p.id for p in removed]))
            )
            if in_use:
                raise ConflictError(
                    "periods still have sessions scheduled",
                    details={
                        "period_numbers": sorted(p.period_number for p in removed),
                        "schedule_count": in_use,
                    },
                )
            for p in removed:
                version.periods.remove(p)

        for item in periods:
            row = existing.get(item.period_number)
            if row is None:
                row = Period(period_number=item.period_number)
                version.periods.append(row)
            row.period_name = item.period_name
            row.start_time = item.start_time
            row.end_time = item.end_time
            row.is_break = item.is_break
            row.break_duration_minutes = item.break_duration_minutes if item.is_break else 0
            row.display_order = item.display_order

        self.db.commit()
        logger.info(
            "version %s periods replaced: %d saved, %d removed",
            version.version_number,
            len(periods),
            len(removed),
        )
        return self.get_periods(version_id)

    def _schedule_count(self, version_id: int) -> int:
        return self.db.scalar(
            select(func.count(Schedule.id)).where(Schedule.timetable_version_id == version_id)
        ) or 0

    def compare_versions(self, version1_id: int, version2_id: int) -> VersionComparison:
        first = self._require(version1_id)
        second = self._require(version2_id)

        left = {p.period_number: p for p in first.periods}
        right = {p.period_number: p for p in second.periods}

        changes = []
        for number in sorted(set(left) | set(right)):
            p1 = left.get(number)
            p2 = right.get(number)
            if p1 is None:
                change_type = "added"
            elif p2 is None:
                change_type = "removed"
            elif (p1.period_name, p1.start_time, p1.end_time) != (p2.period_name, p2.start_time, p2.end_time):
                change_type = "modified"
            else:
                change_type = "unchanged"

            changes.append(
                PeriodChange(
                    period_number=number,
                    change_type=change_type,
                    version1_name=p1.period_name if p1 else None,
                    version2_name=p2.period_name if p2 else None,
                    version1_start=p1.start_time if p1 else None,
                    version2_start=p2.start_time if p2 else None,
                    version1_end=p1.end_time if p1 else None,
                    version2_end=p2.end_time if p2 else None,
                )
            )

        return VersionComparison(
            periods=changes,
            schedules={"count_a": self._schedule_count(first.id), "count_b": self._schedule_count(second.id)},
            summary={
                "periods_changed": sum(1 for c in changes if c.change_type != "unchanged"),
                "total_periods": len(changes),
            },
        )

    def validate_version(self, version_id: int) -> VersionReport:
        version = self._require(version_id)
        periods = list(version.periods)
        issues: List[Dict[str, Any]] = []

        if not periods:
            issues.append({"type": "no_periods", "description": "Version has no periods"})

        inverted = [p.period_name for p in periods if p.start_time >= p.end_time]
        if inverted:
            issues.append(
                {
                    "type": "invalid_time_range",
                    "periods": inverted,
                    "description": "Periods that end before they start",
                }
            )

        numbers = sorted(p.period_number for p in periods)
        gaps = [
            f"Gap between period {prev} and {cur}"
            for prev, cur in zip(numbers, numbers[1:])
            if cur - prev > 1
        ]
        if gaps:
            issues.append(
                {"type": "period_gaps", "gaps": gaps, "description": "Missing period numbers in sequence"}
            )

        overlaps = [
            {"period1": a.period_name, "period2": b.period_name}
            for a, b in overlapping_pairs([p for p in periods if p.start_time < p.end_time])
        ]
        if overlaps:
            issues.append(
                {
                    "type": "overlapping_periods",
                    "overlaps": overlaps,
                    "description": "Periods with overlapping time ranges",
                }
            )

        orphaned = self.db.scalar(
            select(func.count(Schedule.id))
            .join(Period, Schedule.period_id == Period.id)
            .where(Schedule.timetable_version_id == version.id)
            .where(Period.timetable_version_id != version.id)
        ) or 0
        if orphaned:
            issues.append(
                {
                    "type": "orphaned_schedules",
                    "count": orphaned,
                    "description": "Schedules referencing periods of another version",
                }
            )

        return VersionReport(is_valid=not issues, issues=issues)
