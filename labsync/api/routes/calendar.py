import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from labsync.api.deps import get_current_user, require_roles
from labsync.db.session import get_db
from labsync.models.calendar_day import CalendarDay
from labsync.schemas.calendar import CalendarDayIn, CalendarDayOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/calendar", tags=["calendar"])


@router.post("/import", response_model=list[CalendarDayOut], dependencies=[Depends(require_roles("admin"))])
def import_calendar(
    payload: list[CalendarDayIn],
    db: Session = Depends(get_db),
):
    """Upsert calendar days by date; closed days stop weekly sessions being generated."""
    saved = []

    for item in payload:
        row = db.execute(
            select(CalendarDay).where(CalendarDay.day == item.day)
        ).scalar_one_or_none()

        if row is None:
            row = CalendarDay(day=item.day)
            db.add(row)
        row.is_school_day = item.is_school_day
        row.kind = item.kind
        row.note = item.note
        saved.append(row)

    db.commit()
    logger.info("calendar import: %d days saved", len(saved))
    return saved


@router.get("", response_model=list[CalendarDayOut], dependencies=[Depends(get_current_user)])
def list_calendar(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
):
    q = select(CalendarDay)
    if start_date:
        q = q.where(CalendarDay.day >= start_date)
    if end_date:
        q = q.where(CalendarDay.day <= end_date)
    return db.execute(q.order_by(CalendarDay.day)).scalars().all()
