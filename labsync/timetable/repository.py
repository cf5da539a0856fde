from datetime import date
from typing import List, Optional, Protocol

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from labsync.models.timetable_version import TimetableVersion


class VersionRepository(Protocol):
    def get(self, version_id: int) -> Optional[TimetableVersion]: ...

    def save(self, version: TimetableVersion) -> TimetableVersion: ...

    def list_by_effective_range(
        self, start: Optional[date] = None, end: Optional[date] = None
    ) -> List[TimetableVersion]: ...

    def list_all(self) -> List[TimetableVersion]: ...


class SqlVersionRepository:
    """Versions stored in ``timetable_versions``. ``save`` flushes, never commits."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, version_id: int) -> Optional[TimetableVersion]:
        return self.db.get(TimetableVersion, version_id)

    def save(self, version: TimetableVersion) -> TimetableVersion:
        self.db.add(version)
        self.db.flush()
        return version

    def list_by_effective_range(
        self, start: Optional[date] = None, end: Optional[date] = None
    ) -> List[TimetableVersion]:
        """Versions whose coverage intersects ``[start, end]`` (either bound optional)."""
        q = select(TimetableVersion)
        if end is not None:
            q = q.where(TimetableVersion.effective_from <= end)
        if start is not None:
            q = q.where(
                or_(
                    TimetableVersion.effective_until.is_(None),
                    TimetableVersion.effective_until > start,
                )
            )
        q = q.order_by(TimetableVersion.effective_from)
        return list(self.db.execute(q).scalars().all())

    def list_all(self) -> List[TimetableVersion]:
        return self.list_by_effective_range()
