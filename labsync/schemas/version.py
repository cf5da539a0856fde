from datetime import date, datetime, time
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from labsync.schemas.common import BulkSummaryOut, CamelModel


class VersionCreate(CamelModel):
    version_name: str = Field(..., min_length=1, max_length=120)
    description: Optional[str] = None
    effective_from: date
    copy_from_version_id: Optional[int] = None
    copy_schedules: bool = False


class VersionOut(BaseModel):
    id: int
    version_number: str
    version_name: str
    description: Optional[str]
    effective_from: date
    effective_until: Optional[date]
    created_by: Optional[str]
    created_at: Optional[datetime]
    status: str
    is_active: bool
    period_count: int = 0
    schedule_count: int = 0
    active_schedule_count: int = 0


class MigrationOut(BulkSummaryOut):
    periods_created: int = 0


class VersionCreateOut(BaseModel):
    version: VersionOut
    migration: MigrationOut


class ActivateIn(CamelModel):
    effective_from: date


class ActivationOut(BaseModel):
    version: VersionOut
    previous_version: Optional[VersionOut]
    effective_from: date


class PeriodChangeOut(CamelModel):
    period_number: int
    change_type: str
    version1_name: Optional[str] = None
    version2_name: Optional[str] = None
    version1_start: Optional[time] = None
    version2_start: Optional[time] = None
    version1_end: Optional[time] = None
    version2_end: Optional[time] = None


class ScheduleCountsOut(CamelModel):
    count_a: int
    count_b: int


class ComparisonSummaryOut(CamelModel):
    periods_changed: int
    total_periods: int


class ComparisonOut(CamelModel):
    periods: List[PeriodChangeOut]
    schedules: ScheduleCountsOut
    summary: ComparisonSummaryOut


class ValidationReportOut(CamelModel):
    is_valid: bool
    issues: List[Dict[str, Any]]
    validated_at: datetime
