from datetime import date, time

from labsync.timetable.conflicts import SessionSlot, find_conflicts, times_overlap

DAY = date(2024, 3, 4)


def slot(schedule_id=None, start=time(9, 0), end=time(9, 45), **kwargs) -> SessionSlot:
    day = kwargs.pop("day", DAY)
    return SessionSlot(schedule_date=day, start_time=start, end_time=end, schedule_id=schedule_id, **kwargs)


def test_overlap_is_half_open() -> None:
    assert times_overlap(time(9, 0), time(9, 45), time(9, 30), time(10, 15))
    assert not times_overlap(time(9, 0), time(9, 45), time(9, 45), time(10, 30))


def test_same_lab_overlapping_sessions_conflict() -> None:
    existing = [slot(1, lab_id=7, title="Chemistry")]
    conflicts = find_conflicts(slot(start=time(9, 30), end=time(10, 15), lab_id=7), existing)
    assert len(conflicts) == 1
    assert conflicts[0].schedule_id == 1
    assert conflicts[0].conflict_types == ("lab",)
    assert "Chemistry" in conflicts[0].description


def test_adjacent_periods_do_not_conflict() -> None:
    existing = [slot(1, lab_id=7)]
    assert find_conflicts(slot(start=time(9, 45), end=time(10, 30), lab_id=7), existing) == []


def test_room_name_matches_without_lab_id() -> None:
    existing = [slot(1, room_name="Physics Lab ")]
    conflicts = find_conflicts(slot(room_name="physics lab"), existing)
    assert [c.conflict_types for c in conflicts] == [("lab",)]


def test_instructor_and_class_reported_together() -> None:
    existing = [slot(1, instructor_id=3, class_id=10, group_id=1)]
    conflicts = find_conflicts(slot(instructor_id=3, class_id=10, group_id=1), existing)
    assert conflicts[0].conflict_types == ("instructor", "class")


def test_different_groups_of_a_class_can_share_a_period() -> None:
    existing = [slot(1, class_id=10, group_id=1)]
    assert find_conflicts(slot(class_id=10, group_id=2), existing) == []


def test_whole_class_clashes_with_any_group() -> None:
    existing = [slot(1, class_id=10, group_id=2)]
    conflicts = find_conflicts(slot(class_id=10, group_id=None), existing)
    assert conflicts[0].conflict_types == ("class",)


def test_cancelled_other_days_and_self_are_ignored() -> None:
    existing = [
        slot(1, lab_id=7, status="cancelled"),
        slot(2, lab_id=7, day=date(2024, 3, 5)),
        slot(3, lab_id=7),
    ]
    assert find_conflicts(slot(3, lab_id=7), existing) == []


def test_no_shared_resource_no_conflict() -> None:
    existing = [slot(1, lab_id=7, instructor_id=1, class_id=10)]
    assert find_conflicts(slot(lab_id=8, instructor_id=2, class_id=11), existing) == []
