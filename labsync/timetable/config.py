import logging
from typing import Any, Dict

from sqlalchemy import select
from sqlalchemy.orm import Session

from labsync.core.errors import ValidationError
from labsync.models.timetable_config import CONFIG_DEFAULTS, DEFAULT_WORKING_DAYS, TimetableConfig

logger = logging.getLogger(__name__)


def get_config(db: Session) -> TimetableConfig:
    """The stored school-day defaults, or an unsaved row carrying the defaults."""
    config = db.execute(select(TimetableConfig).order_by(TimetableConfig.id).limit(1)).scalar_one_or_none()
    if config is None:
        config = TimetableConfig(working_days=list(DEFAULT_WORKING_DAYS), **CONFIG_DEFAULTS)
    return config


def update_config(db: Session, changes: Dict[str, Any]) -> TimetableConfig:
    config = get_config(db)
    for key, value in changes.items():
        if value is not None:
            setattr(config, key, value)

    if config.start_time >= config.end_time:
        db.rollback()
        raise ValidationError(
            "end time must be after start time",
            details={"start_time": config.start_time.isoformat(), "end_time": config.end_time.isoformat()},
        )

    if config.id is None:
        db.add(config)
    db.commit()
    logger.info("timetable config updated: %s", ", ".join(sorted(k for k, v in changes.items() if v is not None)))
    return config
