from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from labsync.api.deps import get_current_user, require_roles
from labsync.core.config import get_settings
from labsync.db.session import get_db
from labsync.schemas.config import TimetableConfigOut, TimetableConfigUpdate
from labsync.schemas.period import GeneratePeriodsIn, PeriodOut, PeriodPlanOut, PeriodsReplaceIn
from labsync.schemas.schedule import GenerateFromWeeklyIn, GenerationSummaryOut, WeeklyScheduleOut
from labsync.schemas.version import (
    ActivateIn,
    ActivationOut,
    ComparisonOut,
    ValidationReportOut,
    VersionCreate,
    VersionCreateOut,
    VersionOut,
)
from labsync.timetable import config as timetable_config
from labsync.timetable.periods import BreakConfig, generate_periods
from labsync.timetable.versions import ACTIVE, VersionManager, VersionSummary
from labsync.timetable.weekly import WeeklyScheduleService

router = APIRouter(prefix="/timetable", tags=["timetable"])


# ----------------------------
# Helpers
# ----------------------------
def version_payload(summary: VersionSummary) -> Dict[str, Any]:
    v = summary.version
    return {
        "id": v.id,
        "version_number": v.version_number,
        "version_name": v.version_name,
        "description": v.description,
        "effective_from": v.effective_from,
        "effective_until": v.effective_until,
        "created_by": v.created_by,
        "created_at": v.created_at,
        "status": summary.status,
        "is_active": summary.status == ACTIVE,
        "period_count": summary.period_count,
        "schedule_count": summary.schedule_count,
        "active_schedule_count": summary.active_schedule_count,
    }


def describe(manager: VersionManager, version_id: int) -> Dict[str, Any]:
    version = manager.get_version(version_id)
    summary = next(s for s in manager.list_versions() if s.version.id == version.id)
    return version_payload(summary)


# ----------------------------
# VERSIONS
# ----------------------------
@router.get("/versions", response_model=List[VersionOut], dependencies=[Depends(get_current_user)])
def list_versions(db: Session = Depends(get_db)):
    return [version_payload(s) for s in VersionManager(db).list_versions()]


@router.post("/versions", response_model=VersionCreateOut, status_code=201)
def create_version(
    payload: VersionCreate,
    db: Session = Depends(get_db),
    user: Dict[str, Any] = Depends(require_roles("admin")),
):
    manager = VersionManager(db)
    created = manager.create_version(
        version_name=payload.version_name,
        description=payload.description,
        effective_from=payload.effective_from,
        copy_from_version_id=payload.copy_from_version_id,
        copy_schedules=payload.copy_schedules,
        created_by=user.get("sub"),
    )
    m = created.migration
    return {
        "version": describe(manager, created.version.id),
        "migration": {
            "processed": m.processed,
            "successful": m.successful,
            "failed": m.failed,
            "skipped": m.skipped,
            "errors": m.errors,
            "periods_created": m.periods_created,
        },
    }


@router.get("/versions/active", response_model=Optional[VersionOut], dependencies=[Depends(get_current_user)])
def get_active_version(
    on: Optional[date] = Query(None, alias="date", description="Defaults to today"),
    db: Session = Depends(get_db),
):
    manager = VersionManager(db)
    version = manager.get_effective_version(on or date.today())
    if version is None:
        return None
    return describe(manager, version.id)


@router.get("/versions/compare", response_model=ComparisonOut, dependencies=[Depends(get_current_user)])
def compare_versions(
    version1: int = Query(...),
    version2: int = Query(...),
    db: Session = Depends(get_db),
):
    return VersionManager(db).compare_versions(version1, version2)


@router.get("/versions/{version_id}", response_model=VersionOut, dependencies=[Depends(get_current_user)])
def get_version(version_id: int, db: Session = Depends(get_db)):
    return describe(VersionManager(db), version_id)


@router.post(
    "/versions/{version_id}/activate",
    response_model=ActivationOut,
    dependencies=[Depends(require_roles("admin"))],
)
def activate_version(version_id: int, payload: ActivateIn, db: Session = Depends(get_db)):
    manager = VersionManager(db)
    activation = manager.activate_version(version_id, payload.effective_from)
    previous = activation.previous_version
    return {
        "version": describe(manager, activation.version.id),
        "previous_version": describe(manager, previous.id) if previous is not None else None,
        "effective_from": activation.effective_from,
    }


@router.get(
    "/versions/{version_id}/periods",
    response_model=List[PeriodOut],
    dependencies=[Depends(get_current_user)],
)
def get_periods(version_id: int, db: Session = Depends(get_db)):
    return VersionManager(db).get_periods(version_id)


@router.put(
    "/versions/{version_id}/periods",
    response_model=List[PeriodOut],
    dependencies=[Depends(require_roles("admin"))],
)
def replace_periods(version_id: int, payload: PeriodsReplaceIn, db: Session = Depends(get_db)):
    return VersionManager(db).replace_periods(version_id, payload.periods)


@router.get(
    "/versions/{version_id}/validate",
    response_model=ValidationReportOut,
    dependencies=[Depends(get_current_user)],
)
def validate_version(version_id: int, db: Session = Depends(get_db)):
    return VersionManager(db).validate_version(version_id)


@router.get(
    "/versions/{version_id}/weekly-schedules",
    response_model=List[WeeklyScheduleOut],
    dependencies=[Depends(get_current_user)],
)
def list_weekly_schedules(version_id: int, db: Session = Depends(get_db)):
    return WeeklyScheduleService(db).list_for_version(version_id)


@router.post("/versions/{version_id}/generate-from-weekly", response_model=GenerationSummaryOut)
def generate_from_weekly(
    version_id: int,
    payload: Optional[GenerateFromWeeklyIn] = None,
    db: Session = Depends(get_db),
    user: Dict[str, Any] = Depends(require_roles("admin", "instructor")),
):
    payload = payload or GenerateFromWeeklyIn()
    service = WeeklyScheduleService(db, enforce_conflicts=get_settings().ENFORCE_CONFLICTS)
    return service.generate_from_weekly(
        version_id,
        weekly_schedule_id=payload.weekly_schedule_id,
        enforce=payload.enforce_conflicts,
        created_by=user.get("sub"),
    )


# ----------------------------
# CONFIG + PERIOD GENERATOR
# ----------------------------
@router.get("/config", response_model=TimetableConfigOut, dependencies=[Depends(get_current_user)])
def get_config(db: Session = Depends(get_db)):
    return timetable_config.get_config(db)


@router.put("/config", response_model=TimetableConfigOut, dependencies=[Depends(require_roles("admin"))])
def update_config(payload: TimetableConfigUpdate, db: Session = Depends(get_db)):
    return timetable_config.update_config(db, payload.model_dump(exclude_unset=True))


@router.post(
    "/config/generate-periods",
    response_model=PeriodPlanOut,
    dependencies=[Depends(require_roles("admin"))],
)
def generate_periods_from_config(payload: GeneratePeriodsIn):
    """Preview a day's periods; nothing is saved (see PUT /versions/{id}/periods)."""
    breaks = (
        [BreakConfig(b.after_lecture, b.duration_minutes, b.name) for b in payload.break_configurations]
        if payload.include_breaks
        else []
    )
    return generate_periods(
        payload.school_start_time,
        payload.school_end_time,
        payload.lecture_duration_minutes,
        breaks,
    )
