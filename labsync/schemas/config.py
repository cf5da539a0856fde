from datetime import time
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


class TimetableConfigOut(BaseModel):
    max_lectures_per_day: int
    lecture_duration_minutes: int
    break_duration_minutes: int
    start_time: time
    end_time: time
    working_days: List[str]

    class Config:
        from_attributes = True


class TimetableConfigUpdate(BaseModel):
    max_lectures_per_day: Optional[int] = Field(default=None, ge=1, le=12)
    lecture_duration_minutes: Optional[int] = Field(default=None, ge=15, le=180)
    break_duration_minutes: Optional[int] = Field(default=None, ge=0, le=60)
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    working_days: Optional[List[str]] = None

    @field_validator("working_days")
    @classmethod
    def known_weekdays(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        if value is None:
            return value
        days = [d.strip().lower() for d in value]
        unknown = [d for d in days if d not in WEEKDAYS]
        if unknown:
            raise ValueError(f"unknown weekday(s): {', '.join(unknown)}")
        return days
