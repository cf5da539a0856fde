from datetime import date
from typing import Literal

from pydantic import BaseModel, Field

CalendarKind = Literal["regular", "holiday", "exam", "event", "vacation"]


class CalendarDayIn(BaseModel):
    day: date
    is_school_day: bool
    kind: CalendarKind = "regular"
    note: str | None = Field(default=None, max_length=255)


class CalendarDayOut(BaseModel):
    id: int
    day: date
    is_school_day: bool
    kind: str
    note: str | None

    class Config:
        from_attributes = True
