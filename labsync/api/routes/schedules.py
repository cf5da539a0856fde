from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from labsync.api.deps import get_current_user, require_roles
from labsync.core.config import get_settings
from labsync.db.session import get_db
from labsync.schemas.schedule import (
    ConflictOut,
    ScheduleCreate,
    ScheduleOut,
    ScheduleResultOut,
    ScheduleStatus,
    ScheduleUpdate,
    StatsOut,
    WeeklyScheduleCreate,
    WeeklyScheduleOut,
    WeeklyScheduleUpdate,
)
from labsync.timetable.schedules import ScheduleResult, ScheduleService, conflicts_payload
from labsync.timetable.weekly import WeeklyScheduleService

router = APIRouter(prefix="/timetable", tags=["schedules"])

writers = require_roles("admin", "instructor")


def schedule_service(db: Session = Depends(get_db)) -> ScheduleService:
    return ScheduleService(db, enforce_conflicts=get_settings().ENFORCE_CONFLICTS)


def weekly_service(db: Session = Depends(get_db)) -> WeeklyScheduleService:
    return WeeklyScheduleService(db, enforce_conflicts=get_settings().ENFORCE_CONFLICTS)


def result_payload(result: ScheduleResult) -> Dict[str, Any]:
    return {"schedule": result.schedule, "conflicts": conflicts_payload(result.conflicts)}


# ----------------------------
# SESSIONS
# ----------------------------
@router.get("/schedules", response_model=List[ScheduleOut], dependencies=[Depends(get_current_user)])
def list_schedules(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    version_id: Optional[int] = Query(None),
    lab_id: Optional[int] = Query(None),
    instructor_id: Optional[int] = Query(None),
    class_id: Optional[int] = Query(None),
    group_id: Optional[int] = Query(None),
    status: Optional[ScheduleStatus] = Query(None),
    service: ScheduleService = Depends(schedule_service),
):
    return service.list_schedules(
        start_date=start_date,
        end_date=end_date,
        version_id=version_id,
        lab_id=lab_id,
        instructor_id=instructor_id,
        class_id=class_id,
        group_id=group_id,
        status=status,
    )


@router.post("/schedules", response_model=ScheduleResultOut, status_code=201)
def create_schedule(
    payload: ScheduleCreate,
    service: ScheduleService = Depends(schedule_service),
    user: Dict[str, Any] = Depends(writers),
):
    result = service.create_schedule(
        payload.model_dump(exclude={"enforce_conflicts"}),
        enforce=payload.enforce_conflicts,
        created_by=user.get("sub"),
    )
    return result_payload(result)


@router.put("/schedules/{schedule_id}", response_model=ScheduleResultOut, dependencies=[Depends(writers)])
def update_schedule(
    schedule_id: int,
    payload: ScheduleUpdate,
    service: ScheduleService = Depends(schedule_service),
):
    changes = payload.model_dump(exclude_unset=True, exclude={"enforce_conflicts"})
    result = service.update_schedule(schedule_id, changes, enforce=payload.enforce_conflicts)
    return result_payload(result)


@router.delete("/schedules/{schedule_id}", status_code=204, dependencies=[Depends(writers)])
def delete_schedule(schedule_id: int, service: ScheduleService = Depends(schedule_service)):
    service.delete_schedule(schedule_id)
    return Response(status_code=204)


@router.get(
    "/schedules/{schedule_id}/conflicts",
    response_model=List[ConflictOut],
    dependencies=[Depends(get_current_user)],
)
def get_schedule_conflicts(schedule_id: int, service: ScheduleService = Depends(schedule_service)):
    return conflicts_payload(service.get_conflicts(schedule_id))


@router.get("/stats", response_model=StatsOut, dependencies=[Depends(get_current_user)])
def get_stats(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    service: ScheduleService = Depends(schedule_service),
):
    return service.get_stats(start_date, end_date)


# ----------------------------
# WEEKLY TEMPLATES
# ----------------------------
@router.post(
    "/weekly-schedules",
    response_model=WeeklyScheduleOut,
    status_code=201,
    dependencies=[Depends(writers)],
)
def create_weekly_schedule(
    payload: WeeklyScheduleCreate,
    service: WeeklyScheduleService = Depends(weekly_service),
):
    data = payload.model_dump(exclude={"timetable_version_id"})
    return service.create(payload.timetable_version_id, data)


@router.put(
    "/weekly-schedules/{weekly_schedule_id}",
    response_model=WeeklyScheduleOut,
    dependencies=[Depends(writers)],
)
def update_weekly_schedule(
    weekly_schedule_id: int,
    payload: WeeklyScheduleUpdate,
    service: WeeklyScheduleService = Depends(weekly_service),
):
    return service.update(weekly_schedule_id, payload.model_dump(exclude_unset=True))


@router.delete("/weekly-schedules/{weekly_schedule_id}", status_code=204, dependencies=[Depends(writers)])
def delete_weekly_schedule(
    weekly_schedule_id: int,
    service: WeeklyScheduleService = Depends(weekly_service),
):
    service.delete(weekly_schedule_id)
    return Response(status_code=204)
