from datetime import date

import pytest

from conftest import STANDARD_DAY, add_version
from labsync.core.errors import ConflictError, NotFoundError, ValidationError
from labsync.models.calendar_day import CalendarDay
from labsync.models.schedule import Schedule
from labsync.timetable.schedules import ScheduleService
from labsync.timetable.weekly import WeeklyScheduleService, is_second_saturday, weekday_dates


def period(version, number):
    return next(p for p in version.periods if p.period_number == number)


def session(version, day=date(2024, 3, 4), number=1, **extra):
    data = {"schedule_date": day, "period_id": period(version, number).id, "session_title": "Titration"}
    data.update(extra)
    return data


def test_clash_is_reported_but_saved_by_default(db, standard_version) -> None:
    service = ScheduleService(db)
    first = service.create_schedule(session(standard_version, lab_id=7))
    second = service.create_schedule(session(standard_version, lab_id=7, session_title="Distillation"))

    assert first.conflicts == []
    assert [c.schedule_id for c in second.conflicts] == [first.schedule.id]
    assert second.conflicts[0].conflict_types == ("lab",)
    assert db.query(Schedule).count() == 2


def test_clash_rejected_when_enforced(db, standard_version) -> None:
    service = ScheduleService(db, enforce_conflicts=True)
    service.create_schedule(session(standard_version, instructor_id=5))
    with pytest.raises(ConflictError) as excinfo:
        service.create_schedule(session(standard_version, instructor_id=5, lab_id=2))
    assert excinfo.value.details["conflicts"][0]["conflict_types"] == ["instructor"]
    assert db.query(Schedule).count() == 1


def test_request_flag_overrides_setting(db, standard_version) -> None:
    service = ScheduleService(db)
    service.create_schedule(session(standard_version, lab_id=7))
    with pytest.raises(ConflictError):
        service.create_schedule(session(standard_version, lab_id=7), enforce=True)


def test_adjacent_sessions_do_not_clash(db, standard_version) -> None:
    service = ScheduleService(db, enforce_conflicts=True)
    service.create_schedule(session(standard_version, number=1, lab_id=7))
    result = service.create_schedule(session(standard_version, number=2, lab_id=7))
    assert result.conflicts == []


def test_cancelled_sessions_free_the_slot(db, standard_version) -> None:
    service = ScheduleService(db, enforce_conflicts=True)
    first = service.create_schedule(session(standard_version, lab_id=7)).schedule
    service.update_schedule(first.id, {"status": "cancelled"})
    assert service.create_schedule(session(standard_version, lab_id=7)).conflicts == []


def test_break_periods_cannot_hold_sessions(db, standard_version) -> None:
    with pytest.raises(ValidationError):
        ScheduleService(db).create_schedule(session(standard_version, number=3))


def test_date_without_version_is_rejected(db, standard_version) -> None:
    with pytest.raises(ValidationError):
        ScheduleService(db).create_schedule(session(standard_version, day=date(2023, 12, 1)))


def test_period_must_belong_to_effective_version(db) -> None:
    old = add_version(db, "Term 1", date(2024, 1, 1), effective_until=date(2024, 6, 1), periods=STANDARD_DAY)
    add_version(db, "Term 2", date(2024, 6, 1), periods=STANDARD_DAY)
    with pytest.raises(ValidationError):
        ScheduleService(db).create_schedule(session(old, day=date(2024, 6, 3)))


def test_unknown_period(db, standard_version) -> None:
    data = session(standard_version)
    data["period_id"] = 9999
    with pytest.raises(NotFoundError):
        ScheduleService(db).create_schedule(data)


def test_enforced_update_leaves_row_untouched(db, standard_version) -> None:
    service = ScheduleService(db)
    service.create_schedule(session(standard_version, number=1, class_id=10))
    mover = service.create_schedule(session(standard_version, number=2, class_id=10)).schedule

    with pytest.raises(ConflictError):
        service.update_schedule(mover.id, {"period_id": period(standard_version, 1).id}, enforce=True)

    db.expire_all()
    assert db.get(Schedule, mover.id).period.period_number == 2


def test_update_rejects_nulling_required_fields(db, standard_version) -> None:
    service = ScheduleService(db)
    created = service.create_schedule(session(standard_version)).schedule
    with pytest.raises(ValidationError):
        service.update_schedule(created.id, {"session_title": None})


def test_stats(db, standard_version) -> None:
    service = ScheduleService(db)
    service.create_schedule(session(standard_version, number=1, lab_id=1, instructor_id=1, class_id=1))
    service.create_schedule(
        session(standard_version, number=2, lab_id=2, instructor_id=1, class_id=2, session_type="lab")
    )
    third = service.create_schedule(session(standard_version, number=4, lab_id=1, instructor_id=2)).schedule
    service.update_schedule(third.id, {"status": "completed"})

    stats = service.get_stats()
    assert stats["total_schedules"] == 3
    assert stats["scheduled_sessions"] == 2
    assert stats["completed_sessions"] == 1
    assert stats["unique_instructors"] == 2
    assert stats["unique_labs"] == 2
    assert stats["unique_classes"] == 2
    assert stats["session_types"]["lab"] == 1
    assert stats["session_types"]["lecture"] == 2


def test_list_schedules_filters(db, standard_version) -> None:
    service = ScheduleService(db)
    service.create_schedule(session(standard_version, day=date(2024, 3, 4), lab_id=1))
    service.create_schedule(session(standard_version, day=date(2024, 3, 5), lab_id=2))
    service.create_schedule(session(standard_version, day=date(2024, 3, 6), lab_id=1))

    rows = service.list_schedules(start_date=date(2024, 3, 5), lab_id=1)
    assert [r.schedule_date for r in rows] == [date(2024, 3, 6)]


def test_second_saturday() -> None:
    assert is_second_saturday(date(2024, 3, 9))
    assert not is_second_saturday(date(2024, 3, 2))
    assert not is_second_saturday(date(2024, 3, 16))


def weekly(version, **extra):
    data = {
        "period_id": period(version, 1).id,
        "subject_name": "Organic Chemistry",
        "session_type": "lab",
        "lab_id": 7,
        "class_id": 10,
        "day_of_week": 6,
        "start_date": date(2024, 3, 1),
        "end_date": date(2024, 3, 31),
    }
    data.update(extra)
    return data


def test_weekday_dates_start_on_first_matching_day(db, standard_version) -> None:
    template = WeeklyScheduleService(db).create(standard_version.id, weekly(standard_version))
    assert list(weekday_dates(template)) == [
        date(2024, 3, 2),
        date(2024, 3, 9),
        date(2024, 3, 16),
        date(2024, 3, 23),
        date(2024, 3, 30),
    ]


def test_generate_skips_excluded_days(db, standard_version) -> None:
    db.add(CalendarDay(day=date(2024, 3, 30), is_school_day=False, kind="holiday"))
    db.commit()
    service = WeeklyScheduleService(db)
    service.create(standard_version.id, weekly(standard_version, custom_holiday_dates=[date(2024, 3, 23)]))

    summary = service.generate_from_weekly(standard_version.id)

    assert (summary.processed, summary.successful, summary.skipped, summary.failed) == (5, 2, 3, 0)
    created = db.query(Schedule).order_by(Schedule.schedule_date).all()
    assert [s.schedule_date for s in created] == [date(2024, 3, 2), date(2024, 3, 16)]
    assert all(s.weekly_schedule_id is not None for s in created)

    again = service.generate_from_weekly(standard_version.id)
    assert (again.successful, again.skipped) == (0, 5)


def test_generate_keeps_parallel_groups_of_one_class(db, standard_version) -> None:
    service = WeeklyScheduleService(db)
    one_day = {"day_of_week": 1, "start_date": date(2024, 3, 4), "end_date": date(2024, 3, 4)}
    service.create(standard_version.id, weekly(standard_version, group_id=1, lab_id=1, **one_day))
    service.create(standard_version.id, weekly(standard_version, group_id=2, lab_id=2, **one_day))

    summary = service.generate_from_weekly(standard_version.id)

    assert (summary.successful, summary.skipped, summary.failed) == (2, 0, 0)
    assert summary.conflicts == []
    created = db.query(Schedule).order_by(Schedule.group_id).all()
    assert [(s.group_id, s.lab_id) for s in created] == [(1, 1), (2, 2)]


def test_generate_records_dates_outside_version(db) -> None:
    old = add_version(db, "Term 1", date(2024, 1, 1), effective_until=date(2024, 3, 15), periods=STANDARD_DAY)
    add_version(db, "Term 2", date(2024, 3, 15), periods=STANDARD_DAY)
    service = WeeklyScheduleService(db)
    service.create(old.id, weekly(old, day_of_week=1, start_date=date(2024, 3, 4), end_date=date(2024, 3, 25)))

    summary = service.generate_from_weekly(old.id)

    assert summary.successful == 2
    assert summary.failed == 2
    assert [e["ref"].split(":")[1] for e in summary.errors] == ["2024-03-18", "2024-03-25"]


def test_generate_reports_conflicts_and_enforces_on_request(db, standard_version) -> None:
    ScheduleService(db).create_schedule(session(standard_version, day=date(2024, 3, 2), lab_id=7, class_id=99))
    service = WeeklyScheduleService(db)
    template = service.create(
        standard_version.id,
        weekly(standard_version, start_date=date(2024, 3, 1), end_date=date(2024, 3, 8)),
    )

    enforced = service.generate_from_weekly(standard_version.id, template.id, enforce=True)
    assert (enforced.successful, enforced.failed) == (0, 1)
    assert enforced.conflicts[0]["conflicts"][0]["conflict_types"] == ["lab"]

    advisory = service.generate_from_weekly(standard_version.id, template.id)
    assert (advisory.successful, advisory.failed) == (1, 0)
    assert len(advisory.conflicts) == 1


def test_weekly_template_validation(db, standard_version) -> None:
    service = WeeklyScheduleService(db)
    with pytest.raises(ValidationError):
        service.create(standard_version.id, weekly(standard_version, end_date=date(2024, 2, 1)))
    with pytest.raises(ValidationError):
        service.create(standard_version.id, weekly(standard_version, day_of_week=8))

    other = add_version(db, "Term 2", date(2024, 9, 1), periods=STANDARD_DAY)
    with pytest.raises(ValidationError):
        service.create(standard_version.id, weekly(other))
