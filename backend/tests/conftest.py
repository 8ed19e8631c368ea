import os

# Must be set before class_scheduling.core.config caches its settings.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

from datetime import date, datetime, time  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine, event  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from class_scheduling.api.deps import get_db  # noqa: E402
from class_scheduling.db.base import Base  # noqa: E402
from class_scheduling.db.tenant import TenantScope  # noqa: E402
from class_scheduling.main import app  # noqa: E402
from class_scheduling.models import (  # noqa: E402
    Class,
    ClassSchedule,
    ClassSession,
    ClassStudent,
    Course,
    SessionStatus,
    User,
    UserRole,
)

CENTER_ID = "center-123"
OTHER_CENTER_ID = "center-999"


def at(day: date, clock: str) -> datetime:
    hours, minutes = clock.split(":")
    return datetime.combine(day, time(int(hours), int(minutes)))


class Seeder:
    """Inserts fixture rows for one center and commits each of them."""

    def __init__(self, db, center_id: str = CENTER_ID):
        self.db = db
        self.center_id = center_id

    def _save(self, record):
        record.center_id = self.center_id
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)
        return record

    def teacher(self, name: str = "Teacher One") -> User:
        email = f"{name.lower().replace(' ', '.')}@example.com"
        return self._save(User(name=name, email=email, role=UserRole.teacher))

    def course(self, name: str = "IELTS Foundation") -> Course:
        return self._save(Course(name=name))

    def klass(self, name: str = "Class A", *, teacher_id: str | None = None, course_id: str | None = None) -> Class:
        if course_id is None:
            course_id = self.course().id
        return self._save(Class(name=name, course_id=course_id, teacher_id=teacher_id))

    def enroll(self, class_id: str, student_id: str) -> ClassStudent:
        return self._save(ClassStudent(class_id=class_id, student_id=student_id))

    def session(
        self,
        class_id: str,
        start_time: datetime,
        end_time: datetime,
        *,
        room_name: str | None = None,
        status: SessionStatus = SessionStatus.scheduled,
        schedule_id: str | None = None,
    ) -> ClassSession:
        return self._save(
            ClassSession(
                class_id=class_id,
                start_time=start_time,
                end_time=end_time,
                room_name=room_name,
                status=status,
                schedule_id=schedule_id,
            )
        )

    def schedule(
        self,
        class_id: str,
        day_of_week: int,
        start_time: str,
        end_time: str,
        *,
        room_name: str | None = None,
    ) -> ClassSchedule:
        return self._save(
            ClassSchedule(
                class_id=class_id,
                day_of_week=day_of_week,
                start_time=start_time,
                end_time=end_time,
                room_name=room_name,
            )
        )


class QueryRecorder:
    def __init__(self):
        self.statements: list[str] = []

    def clear(self) -> None:
        self.statements.clear()

    def session_queries(self) -> list[str]:
        return [
            statement
            for statement in self.statements
            if statement.lstrip().upper().startswith("SELECT") and "FROM class_sessions" in statement
        ]


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def tenant(db):
    return TenantScope(db, CENTER_ID)


@pytest.fixture()
def seed(db):
    return Seeder(db)


@pytest.fixture()
def other_seed(db):
    return Seeder(db, OTHER_CENTER_ID)


@pytest.fixture()
def queries(engine):
    recorder = QueryRecorder()

    def record(conn, cursor, statement, parameters, context, executemany):
        recorder.statements.append(statement)

    event.listen(engine, "before_cursor_execute", record)
    yield recorder
    event.remove(engine, "before_cursor_execute", record)


@pytest.fixture()
def client(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
