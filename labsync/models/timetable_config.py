from datetime import time

from sqlalchemy import JSON, Integer, SmallInteger, Time
from sqlalchemy.orm import Mapped, mapped_column

from labsync.db.base import Base

DEFAULT_WORKING_DAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday"]

CONFIG_DEFAULTS = {
    "max_lectures_per_day": 8,
    "lecture_duration_minutes": 45,
    "break_duration_minutes": 15,
    "start_time": time(8, 0),
    "end_time": time(17, 0),
}


class TimetableConfig(Base):
    """School-day defaults offered to the period generator. Single row."""

    __tablename__ = "timetable_config"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    max_lectures_per_day: Mapped[int] = mapped_column(
        SmallInteger, nullable=False, default=CONFIG_DEFAULTS["max_lectures_per_day"]
    )
    lecture_duration_minutes: Mapped[int] = mapped_column(
        SmallInteger, nullable=False, default=CONFIG_DEFAULTS["lecture_duration_minutes"]
    )
    break_duration_minutes: Mapped[int] = mapped_column(
        SmallInteger, nullable=False, default=CONFIG_DEFAULTS["break_duration_minutes"]
    )

    start_time: Mapped[time] = mapped_column(Time, nullable=False, default=CONFIG_DEFAULTS["start_time"])
    end_time: Mapped[time] = mapped_column(Time, nullable=False, default=CONFIG_DEFAULTS["end_time"])

    working_days: Mapped[list] = mapped_column(JSON, nullable=False, default=lambda: list(DEFAULT_WORKING_DAYS))
