from datetime import date

from sqlalchemy import JSON, Boolean, Date, ForeignKey, Integer, SmallInteger, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from labsync.db.base import Base


class WeeklyClassSchedule(Base):
    """Recurring weekly slot, expanded into dated sessions on demand."""

    __tablename__ = "weekly_class_schedules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    timetable_version_id: Mapped[int] = mapped_column(
        ForeignKey("timetable_versions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    period_id: Mapped[int] = mapped_column(
        ForeignKey("periods.id", ondelete="CASCADE"), nullable=False, index=True
    )

    class_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    group_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    subject_name: Mapped[str] = mapped_column(String(200), nullable=False)
    session_type: Mapped[str] = mapped_column(String(20), nullable=False, default="lecture")

    instructor_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    instructor_name: Mapped[str | None] = mapped_column(String(120), nullable=True)
    lab_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    room_name: Mapped[str | None] = mapped_column(String(120), nullable=True)

    # ISO weekday: 1 = Monday ... 7 = Sunday
    day_of_week: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)

    exclude_second_saturdays: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    exclude_sundays: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    # ISO date strings
    custom_holiday_dates: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    period: Mapped["Period"] = relationship()
