from datetime import date, datetime
from typing import List

from sqlalchemy import Date, DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from labsync.db.base import Base


class TimetableVersion(Base):
    __tablename__ = "timetable_versions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    # "1", "2", ... in creation order
    version_number: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    version_name: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # coverage is [effective_from, effective_until); the newest version is open-ended
    effective_from: Mapped[date] = mapped_column(Date, nullable=False, unique=True, index=True)
    effective_until: Mapped[date | None] = mapped_column(Date, nullable=True, index=True)

    created_by: Mapped[str | None] = mapped_column(String(50), nullable=True)
    created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    periods: Mapped[List["Period"]] = relationship(
        back_populates="timetable_version",
        cascade="all, delete-orphan",
        order_by="Period.display_order",
    )

    def __repr__(self) -> str:
        return f"<TimetableVersion(number={self.version_number}, from={self.effective_from}, until={self.effective_until})>"
