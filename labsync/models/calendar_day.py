from datetime import date

from sqlalchemy import Boolean, Date, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from labsync.db.base import Base

CALENDAR_DAY_KINDS = ("regular", "holiday", "exam", "event", "vacation")


class CalendarDay(Base):
    """School calendar override for one date; absent dates are ordinary days."""

    __tablename__ = "calendar_days"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    day: Mapped[date] = mapped_column(Date, unique=True, index=True, nullable=False)

    # weekly templates never generate sessions on days marked false
    is_school_day: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    kind: Mapped[str] = mapped_column(String(30), nullable=False, default="regular")

    note: Mapped[str | None] = mapped_column(String(255), nullable=True)
