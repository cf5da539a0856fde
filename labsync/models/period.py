from datetime import time

from sqlalchemy import Boolean, ForeignKey, Integer, SmallInteger, String, Time, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from labsync.db.base import Base


class Period(Base):
    __tablename__ = "periods"
    __table_args__ = (
        UniqueConstraint("timetable_version_id", "period_number", name="uq_periods_version_number"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    timetable_version_id: Mapped[int] = mapped_column(
        ForeignKey("timetable_versions.id", ondelete="CASCADE"), nullable=False, index=True
    )

    period_number: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    period_name: Mapped[str] = mapped_column(String(60), nullable=False)

    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)

    is_break: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    break_duration_minutes: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=0)

    display_order: Mapped[int] = mapped_column(SmallInteger, nullable=False)

    timetable_version: Mapped["TimetableVersion"] = relationship(back_populates="periods")

    @property
    def duration_minutes(self) -> int:
        return (self.end_time.hour * 60 + self.end_time.minute) - (
            self.start_time.hour * 60 + self.start_time.minute
        )
