from datetime import time
from typing import List, Optional

from pydantic import BaseModel, Field

from labsync.schemas.common import CamelModel


class BreakConfigIn(CamelModel):
    after_lecture: int = Field(..., ge=0, le=20)
    duration_minutes: int
    name: Optional[str] = Field(default=None, max_length=60)


class GeneratePeriodsIn(CamelModel):
    school_start_time: time
    school_end_time: time
    lecture_duration_minutes: int
    break_configurations: List[BreakConfigIn] = []
    include_breaks: bool = True


class GeneratedPeriodOut(CamelModel):
    period_number: int
    period_name: str
    start_time: time
    end_time: time
    is_break: bool
    break_duration_minutes: int
    display_order: int


class PeriodPlanOut(CamelModel):
    periods: List[GeneratedPeriodOut]
    total_periods: int
    total_breaks: int
    total_duration: int
    total_break_time: int
    school_day_duration: int
    utilization_percentage: int


class PeriodIn(CamelModel):
    period_number: int = Field(..., ge=1)
    period_name: str = Field(..., min_length=1, max_length=60)
    start_time: time
    end_time: time
    is_break: bool = False
    break_duration_minutes: int = Field(default=0, ge=0)
    display_order: int = Field(..., ge=1)


class PeriodsReplaceIn(CamelModel):
    periods: List[PeriodIn] = Field(..., min_length=1)


class PeriodOut(BaseModel):
    id: int
    timetable_version_id: int
    period_number: int
    period_name: str
    start_time: time
    end_time: time
    is_break: bool
    break_duration_minutes: int
    display_order: int
    duration_minutes: int

    class Config:
        from_attributes = True
