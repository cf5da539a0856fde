from datetime import time

import pytest

from labsync.core.errors import ValidationError
from labsync.timetable.periods import (
    BreakAfterAssembly,
    BreakAfterLecture,
    BreakConfig,
    classify_break,
    generate_periods,
    to_minutes,
)


def test_single_lecture_when_day_fits_one() -> None:
    plan = generate_periods(time(8, 0), time(8, 50), 45)
    assert len(plan.periods) == 1
    only = plan.periods[0]
    assert (only.start_time, only.end_time) == (time(8, 0), time(8, 45))
    assert only.period_name == "Lecture 1"
    assert not only.is_break
    assert plan.total_periods == 1
    assert plan.total_breaks == 0


def test_break_after_first_lecture() -> None:
    plan = generate_periods(time(8, 0), time(10, 0), 45, [BreakConfig(after_lecture=1, duration_minutes=15)])
    spans = [(p.start_time, p.end_time, p.is_break) for p in plan.periods]
    assert spans[:3] == [
        (time(8, 0), time(8, 45), False),
        (time(8, 45), time(9, 0), True),
        (time(9, 0), time(9, 45), False),
    ]
    assert plan.total_breaks == 1
    assert plan.periods[1].period_name == "Break after Lecture 1"
    assert plan.periods[1].break_duration_minutes == 15


WINDOWS = [
    (time(8, 0), time(8, 50)),
    (time(8, 0), time(12, 0)),
    (time(7, 30), time(15, 0)),
    (time(9, 0), time(17, 30)),
]

BREAK_LAYOUTS = [
    (),
    (BreakConfig(1, 10),),
    (BreakConfig(0, 20), BreakConfig(2, 15, "Short Break"), BreakConfig(4, 45, "Lunch")),
    (BreakConfig(2, 20, "Recess"),),
    (BreakConfig(3, 30), BreakConfig(6, 20), BreakConfig(9, 25)),
    (BreakConfig(1, 120),),
]


def layout_cases():
    for start, end in WINDOWS:
        window = to_minutes(end) - to_minutes(start)
        for minutes in (15, 45, 60, 180):
            for layout in BREAK_LAYOUTS:
                assembly = sum(b.duration_minutes for b in layout if b.after_lecture == 0)
                if window >= assembly + minutes:
                    yield start, end, minutes, layout


@pytest.mark.parametrize("start, end, minutes, layout", list(layout_cases()))
def test_periods_are_numbered_in_order_and_never_overlap(start, end, minutes, layout) -> None:
    plan = generate_periods(start, end, minutes, list(layout))
    periods = plan.periods
    after = {b.after_lecture: b for b in layout}

    assert periods
    assert [p.period_number for p in periods] == list(range(1, len(periods) + 1))
    assert [p.display_order for p in periods] == [p.period_number for p in periods]
    for p in periods:
        assert start <= p.start_time < p.end_time <= end
    for previous, current in zip(periods, periods[1:]):
        assert previous.end_time == current.start_time

    lectures = [p for p in periods if not p.is_break]
    assert plan.total_periods == len(lectures)
    assert all(to_minutes(p.end_time) - to_minutes(p.start_time) == minutes for p in lectures)

    for number, lecture in enumerate(lectures, start=1):
        index = periods.index(lecture)
        following = periods[index + 1] if index + 1 < len(periods) else None
        slot = after.get(number)
        if slot is not None and to_minutes(lecture.end_time) + slot.duration_minutes <= to_minutes(end):
            assert following is not None and following.is_break
            assert following.break_duration_minutes == slot.duration_minutes
        else:
            assert following is None or not following.is_break

    # the day stops only once another lecture no longer fits
    assert to_minutes(end) - to_minutes(periods[-1].end_time) < minutes


def test_assembly_break_comes_first() -> None:
    plan = generate_periods(time(8, 0), time(10, 0), 45, [BreakConfig(0, 15)])
    first = plan.periods[0]
    assert first.is_break
    assert first.period_name == "Morning Assembly"
    assert (first.start_time, first.end_time) == (time(8, 0), time(8, 15))
    assert plan.periods[1].start_time == time(8, 15)


def test_summary_figures() -> None:
    plan = generate_periods(time(8, 0), time(10, 0), 45, [BreakConfig(1, 15)])
    assert plan.total_periods == 2
    assert plan.total_duration == 90
    assert plan.total_break_time == 15
    assert plan.school_day_duration == 120
    assert plan.utilization_percentage == 75


def test_break_near_end_of_day_is_kept() -> None:
    plan = generate_periods(time(8, 0), time(11, 0), 60, [BreakConfig(2, 20, "Recess")])
    spans = [(p.period_name, p.start_time, p.end_time) for p in plan.periods]
    assert spans == [
        ("Lecture 1", time(8, 0), time(9, 0)),
        ("Lecture 2", time(9, 0), time(10, 0)),
        ("Recess", time(10, 0), time(10, 20)),
    ]
    assert plan.total_periods == 2
    assert plan.total_breaks == 1
    assert plan.total_break_time == 20


def test_break_that_closes_the_day_is_kept() -> None:
    plan = generate_periods(time(8, 0), time(9, 40), 45, [BreakConfig(2, 10)])
    last = plan.periods[-1]
    assert last.is_break
    assert (last.start_time, last.end_time) == (time(9, 30), time(9, 40))
    assert plan.total_breaks == 1


def test_break_running_past_end_of_day_is_dropped() -> None:
    plan = generate_periods(time(8, 0), time(9, 40), 45, [BreakConfig(2, 15)])
    assert plan.total_periods == 2
    assert plan.total_breaks == 0
    assert plan.periods[-1].end_time == time(9, 30)


def test_breaks_for_unreached_lectures_are_ignored() -> None:
    plan = generate_periods(time(8, 0), time(9, 30), 45, [BreakConfig(5, 10)])
    assert plan.total_periods == 2
    assert plan.total_breaks == 0


def test_break_variants() -> None:
    assert isinstance(classify_break(BreakConfig(0, 10)), BreakAfterAssembly)
    slot = classify_break(BreakConfig(3, 10))
    assert isinstance(slot, BreakAfterLecture)
    assert slot.lecture == 3
    assert slot.label == "Break after Lecture 3"


@pytest.mark.parametrize(
    "start, end, minutes, breaks",
    [
        (time(10, 0), time(9, 0), 45, []),
        (time(9, 0), time(9, 0), 45, []),
        (time(8, 0), time(8, 30), 45, []),
        (time(8, 0), time(12, 0), 10, []),
        (time(8, 0), time(12, 0), 200, []),
        (time(8, 0), time(12, 0), 45, [BreakConfig(1, 3)]),
        (time(8, 0), time(12, 0), 45, [BreakConfig(-1, 10)]),
        (time(8, 0), time(12, 0), 45, [BreakConfig(1, 10), BreakConfig(1, 15)]),
        (time(8, 0), time(9, 0), 45, [BreakConfig(0, 30)]),
    ],
)
def test_invalid_inputs_are_rejected(start, end, minutes, breaks) -> None:
    with pytest.raises(ValidationError):
        generate_periods(start, end, minutes, breaks)
