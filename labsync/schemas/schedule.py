from datetime import date, datetime, time
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from labsync.schemas.common import BulkSummaryOut

SessionType = Literal["lecture", "lab", "test", "practical"]
ScheduleStatus = Literal["scheduled", "completed", "cancelled", "rescheduled"]


class ScheduleBase(BaseModel):
    session_title: str = Field(..., min_length=1, max_length=200)
    session_type: SessionType = "lecture"
    session_description: Optional[str] = None
    lab_id: Optional[int] = None
    room_name: Optional[str] = Field(default=None, max_length=120)
    instructor_id: Optional[int] = None
    instructor_name: Optional[str] = Field(default=None, max_length=120)
    class_id: Optional[int] = None
    group_id: Optional[int] = None
    student_count: int = Field(default=0, ge=0)
    max_capacity: Optional[int] = Field(default=None, ge=1)
    notes: Optional[str] = None


class ScheduleCreate(ScheduleBase):
    schedule_date: date
    period_id: int
    status: ScheduleStatus = "scheduled"
    enforce_conflicts: Optional[bool] = None


class ScheduleUpdate(BaseModel):
    session_title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    session_type: Optional[SessionType] = None
    session_description: Optional[str] = None
    schedule_date: Optional[date] = None
    period_id: Optional[int] = None
    lab_id: Optional[int] = None
    room_name: Optional[str] = Field(default=None, max_length=120)
    instructor_id: Optional[int] = None
    instructor_name: Optional[str] = Field(default=None, max_length=120)
    class_id: Optional[int] = None
    group_id: Optional[int] = None
    student_count: Optional[int] = Field(default=None, ge=0)
    max_capacity: Optional[int] = Field(default=None, ge=1)
    status: Optional[ScheduleStatus] = None
    notes: Optional[str] = None
    enforce_conflicts: Optional[bool] = None


class ScheduleOut(ScheduleBase):
    id: int
    timetable_version_id: int
    period_id: int
    period_number: int
    start_time: time
    end_time: time
    schedule_date: date
    status: str
    weekly_schedule_id: Optional[int]
    created_by: Optional[str]
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class ConflictOut(BaseModel):
    schedule_id: int
    conflict_types: List[str]
    description: str


class ScheduleResultOut(BaseModel):
    schedule: ScheduleOut
    conflicts: List[ConflictOut] = []


class StatsOut(BaseModel):
    total_schedules: int
    scheduled_sessions: int
    completed_sessions: int
    cancelled_sessions: int
    rescheduled_sessions: int
    unique_instructors: int
    unique_labs: int
    unique_classes: int
    session_types: Dict[str, int]


class WeeklyScheduleBase(BaseModel):
    period_id: int
    class_id: Optional[int] = None
    group_id: Optional[int] = None
    subject_name: str = Field(..., min_length=1, max_length=200)
    session_type: SessionType = "lecture"
    instructor_id: Optional[int] = None
    instructor_name: Optional[str] = Field(default=None, max_length=120)
    lab_id: Optional[int] = None
    room_name: Optional[str] = Field(default=None, max_length=120)
    day_of_week: int = Field(..., ge=1, le=7, description="1=Monday ... 7=Sunday")
    start_date: date
    end_date: date
    exclude_second_saturdays: bool = True
    exclude_sundays: bool = True
    custom_holiday_dates: List[date] = []
    is_active: bool = True


class WeeklyScheduleCreate(WeeklyScheduleBase):
    timetable_version_id: int


class WeeklyScheduleUpdate(BaseModel):
    period_id: Optional[int] = None
    class_id: Optional[int] = None
    group_id: Optional[int] = None
    subject_name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    session_type: Optional[SessionType] = None
    instructor_id: Optional[int] = None
    instructor_name: Optional[str] = Field(default=None, max_length=120)
    lab_id: Optional[int] = None
    room_name: Optional[str] = Field(default=None, max_length=120)
    day_of_week: Optional[int] = Field(default=None, ge=1, le=7)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    exclude_second_saturdays: Optional[bool] = None
    exclude_sundays: Optional[bool] = None
    custom_holiday_dates: Optional[List[date]] = None
    is_active: Optional[bool] = None


class WeeklyScheduleOut(WeeklyScheduleBase):
    id: int
    timetable_version_id: int

    class Config:
        from_attributes = True


class GenerateFromWeeklyIn(BaseModel):
    weekly_schedule_id: Optional[int] = None
    enforce_conflicts: Optional[bool] = None


class GenerationSummaryOut(BulkSummaryOut):
    conflicts: List[Dict[str, Any]] = []
