from sqlalchemy.orm import DeclarativeBase

class Base(DeclarativeBase):
    pass

# register every mapped class on Base.metadata (alembic and create_all rely on it)
import labsync.models.calendar_day  # noqa: E402,F401
import labsync.models.timetable_version  # noqa: E402,F401
import labsync.models.period  # noqa: E402,F401
import labsync.models.schedule  # noqa: E402,F401
import labsync.models.weekly_class_schedule  # noqa: E402,F401
import labsync.models.timetable_config  # noqa: E402,F401
