import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTH_SECRET"] = "test-secret"
os.environ["ENFORCE_CONFLICTS"] = "false"

from datetime import date, time  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine, event  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from labsync.core.security import sign  # noqa: E402
from labsync.db.base import Base  # noqa: E402
from labsync.db.session import get_db  # noqa: E402
from labsync.main import app  # noqa: E402
from labsync.models.period import Period  # noqa: E402
from labsync.models.timetable_version import TimetableVersion  # noqa: E402

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@event.listens_for(engine, "connect")
def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def db():
    Base.metadata.create_all(engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)


@pytest.fixture()
def client(db):
    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def auth_headers(role: str = "admin", sub: str = "tester") -> dict:
    token = sign({"sub": sub, "role": role}, os.environ["AUTH_SECRET"])
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def admin_headers() -> dict:
    return auth_headers("admin")


@pytest.fixture()
def instructor_headers() -> dict:
    return auth_headers("instructor", sub="instructor1")


@pytest.fixture()
def student_headers() -> dict:
    return auth_headers("student", sub="student1")


def add_version(db, name: str, effective_from: date, effective_until=None, periods=()) -> TimetableVersion:
    """Store a version directly, with ``periods`` given as (number, name, start, end[, is_break])."""
    number = str(len(db.query(TimetableVersion).all()) + 1)
    version = TimetableVersion(
        version_number=number,
        version_name=name,
        effective_from=effective_from,
        effective_until=effective_until,
    )
    for i, row in enumerate(periods, start=1):
        period_number, period_name, start, end = row[:4]
        is_break = row[4] if len(row) > 4 else False
        version.periods.append(
            Period(
                period_number=period_number,
                period_name=period_name,
                start_time=start,
                end_time=end,
                is_break=is_break,
                break_duration_minutes=0,
                display_order=i,
            )
        )
    db.add(version)
    db.commit()
    return version


STANDARD_DAY = (
    (1, "Lecture 1", time(8, 0), time(8, 45)),
    (2, "Lecture 2", time(8, 45), time(9, 30)),
    (3, "Break after Lecture 2", time(9, 30), time(9, 45), True),
    (4, "Lecture 3", time(9, 45), time(10, 30)),
)


@pytest.fixture()
def standard_version(db) -> TimetableVersion:
    return add_version(db, "Term 1", date(2024, 1, 1), periods=STANDARD_DAY)
