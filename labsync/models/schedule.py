from datetime import date, datetime

from sqlalchemy import Date, DateTime, ForeignKey, Integer, SmallInteger, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from labsync.db.base import Base

SESSION_TYPES = ("lecture", "lab", "test", "practical")
SCHEDULE_STATUSES = ("scheduled", "completed", "cancelled", "rescheduled")


class Schedule(Base):
    """One dated class/lab session bound to a period of a timetable version."""

    __tablename__ = "schedules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    timetable_version_id: Mapped[int] = mapped_column(
        ForeignKey("timetable_versions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    period_id: Mapped[int] = mapped_column(
        ForeignKey("periods.id", ondelete="CASCADE"), nullable=False, index=True
    )
    schedule_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    session_title: Mapped[str] = mapped_column(String(200), nullable=False)
    session_type: Mapped[str] = mapped_column(String(20), nullable=False, default="lecture")
    session_description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # ids into labs / users / classes / groups, owned by other services
    lab_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    room_name: Mapped[str | None] = mapped_column(String(120), nullable=True)
    instructor_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    instructor_name: Mapped[str | None] = mapped_column(String(120), nullable=True)
    class_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    group_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)

    student_count: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=0)
    max_capacity: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)

    status: Mapped[str] = mapped_column(String(20), nullable=False, default="scheduled", index=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # set when generated from a weekly template
    weekly_schedule_id: Mapped[int | None] = mapped_column(
        ForeignKey("weekly_class_schedules.id", ondelete="SET NULL"), nullable=True, index=True
    )

    created_by: Mapped[str | None] = mapped_column(String(50), nullable=True)
    created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    timetable_version: Mapped["TimetableVersion"] = relationship()
    period: Mapped["Period"] = relationship()

    @property
    def period_number(self) -> int:
        return self.period.period_number

    @property
    def start_time(self):
        return self.period.start_time

    @property
    def end_time(self):
        return self.period.end_time
