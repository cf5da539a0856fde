"""Period generation: turn a school-day window into lecture and break slots.

The generator is a pure function. It walks the day once, emitting a lecture
per ``lecture_duration_minutes`` and inserting configured breaks as it goes.
Saving the result into a timetable version is a separate step
(``VersionManager.replace_periods``).

Break positions are modelled as two variants so the "before the first lecture"
case never shares index arithmetic with "after lecture n":

* ``BreakAfterAssembly``: ``after_lecture == 0``, emitted before lecture 1.
* ``BreakAfterLecture(n)``: emitted right after the n-th lecture whenever it
  ends by the close of the day, even if no lecture fits after it.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Dict, Iterable, List, Optional, Tuple, Union

from labsync.core.errors import ValidationError

MIN_LECTURE_MINUTES = 15
MAX_LECTURE_MINUTES = 180
MIN_BREAK_MINUTES = 5
MAX_BREAK_MINUTES = 120


@dataclass(frozen=True)
class BreakConfig:
    """A break as configured by the operator (``after_lecture`` 0 = assembly)."""

    after_lecture: int
    duration_minutes: int
    name: Optional[str] = None


@dataclass(frozen=True)
class BreakAfterAssembly:
    duration_minutes: int
    name: Optional[str] = None

    @property
    def label(self) -> str:
        return self.name or "Morning Assembly"


@dataclass(frozen=True)
class BreakAfterLecture:
    lecture: int
    duration_minutes: int
    name: Optional[str] = None

    @property
    def label(self) -> str:
        return self.name or f"Break after Lecture {self.lecture}"


BreakSlot = Union[BreakAfterAssembly, BreakAfterLecture]


@dataclass(frozen=True)
class GeneratedPeriod:
    period_number: int
    period_name: str
    start_time: time
    end_time: time
    is_break: bool
    break_duration_minutes: int
    display_order: int


@dataclass(frozen=True)
class PeriodPlan:
    periods: List[GeneratedPeriod]
    total_periods: int
    total_breaks: int
    total_duration: int
    total_break_time: int
    school_day_duration: int
    utilization_percentage: int


def to_minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def from_minutes(minutes: int) -> time:
    return time(minutes // 60, minutes % 60)


def classify_break(config: BreakConfig) -> BreakSlot:
    if config.after_lecture < 0:
        raise ValidationError(
            "afterLecture must be 0 or greater",
            details={"after_lecture": config.after_lecture},
        )
    if not MIN_BREAK_MINUTES <= config.duration_minutes <= MAX_BREAK_MINUTES:
        raise ValidationError(
            f"break duration must be between {MIN_BREAK_MINUTES} and {MAX_BREAK_MINUTES} minutes",
            details={"after_lecture": config.after_lecture, "duration_minutes": config.duration_minutes},
        )
    if config.after_lecture == 0:
        return BreakAfterAssembly(config.duration_minutes, config.name)
    return BreakAfterLecture(config.after_lecture, config.duration_minutes, config.name)


def resolve_breaks(
    configs: Iterable[BreakConfig],
) -> Tuple[Optional[BreakAfterAssembly], Dict[int, BreakAfterLecture]]:
    """Split break configs into the assembly break and a by-lecture lookup.

    Two configs aiming at the same position are rejected rather than ordered
    arbitrarily.
    """
    assembly: Optional[BreakAfterAssembly] = None
    after_lecture: Dict[int, BreakAfterLecture] = {}
    seen = set()

    for config in configs:
        if config.after_lecture in seen:
            raise ValidationError(
                f"more than one break configured after lecture {config.after_lecture}",
                details={"after_lecture": config.after_lecture},
            )
        seen.add(config.after_lecture)

        slot = classify_break(config)
        if isinstance(slot, BreakAfterAssembly):
            assembly = slot
        else:
            after_lecture[slot.lecture] = slot

    return assembly, after_lecture


def generate_periods(
    school_start_time: time,
    school_end_time: time,
    lecture_duration_minutes: int,
    break_configurations: Iterable[BreakConfig] = (),
) -> PeriodPlan:
    if not MIN_LECTURE_MINUTES <= lecture_duration_minutes <= MAX_LECTURE_MINUTES:
        raise ValidationError(
            f"lecture duration must be between {MIN_LECTURE_MINUTES} and {MAX_LECTURE_MINUTES} minutes",
            details={"lecture_duration_minutes": lecture_duration_minutes},
        )

    day_start = to_minutes(school_start_time)
    day_end = to_minutes(school_end_time)
    if day_start >= day_end:
        raise ValidationError("school end time must be after start time")

    window = day_end - day_start
    if window < lecture_duration_minutes:
        raise ValidationError(
            "school day is shorter than one lecture",
            details={"school_day_duration": window, "lecture_duration_minutes": lecture_duration_minutes},
        )

    assembly, breaks = resolve_breaks(break_configurations)

    periods: List[GeneratedPeriod] = []

    def emit(name: str, start: int, end: int, is_break: bool) -> None:
        number = len(periods) + 1
        periods.append(
            GeneratedPeriod(
                period_number=number,
                period_name=name,
                start_time=from_minutes(start),
                end_time=from_minutes(end),
                is_break=is_break,
                break_duration_minutes=end - start if is_break else 0,
                display_order=number,
            )
        )

    cursor = day_start

    if assembly is not None:
        if cursor + assembly.duration_minutes + lecture_duration_minutes > day_end:
            raise ValidationError(
                f"'{assembly.label}' leaves no room for a lecture",
                details={"duration_minutes": assembly.duration_minutes},
            )
        emit(assembly.label, cursor, cursor + assembly.duration_minutes, True)
        cursor += assembly.duration_minutes

    lecture = 0
    while day_end - cursor >= lecture_duration_minutes:
        lecture += 1
        emit(f"Lecture {lecture}", cursor, cursor + lecture_duration_minutes, False)
        cursor += lecture_duration_minutes

        slot = breaks.get(lecture)
        if slot is not None and cursor + slot.duration_minutes <= day_end:
            emit(slot.label, cursor, cursor + slot.duration_minutes, True)
            cursor += slot.duration_minutes

    lectures = [p for p in periods if not p.is_break]
    break_periods = [p for p in periods if p.is_break]
    lecture_minutes = len(lectures) * lecture_duration_minutes

    return PeriodPlan(
        periods=periods,
        total_periods=len(lectures),
        total_breaks=len(break_periods),
        total_duration=lecture_minutes,
        total_break_time=sum(p.break_duration_minutes for p in break_periods),
        school_day_duration=window,
        utilization_percentage=round(lecture_minutes * 100 / window),
    )
