"""Session lifecycle: tenant-scoped listing and CRUD around the conflict engine."""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta

from sqlalchemy import Select, delete, func

from class_scheduling.core.config import get_settings
from class_scheduling.core.exceptions import ResourceNotFoundError, SchedulingValidationError
from class_scheduling.db.tenant import TenantScope
from class_scheduling.models.class_model import Class, ClassStudent
from class_scheduling.models.class_schedule import ClassSchedule
from class_scheduling.models.class_session import ClassSession, SessionStatus
from class_scheduling.models.course import Course
from class_scheduling.models.user import User
from class_scheduling.schemas.session import (
    BatchSessionIn,
    ClassParticipants,
    ClassSessionCreate,
    ClassSessionOut,
    ClassSessionUpdate,
    ClassSummary,
    DeleteFutureSessionsOut,
    SessionUpdateOut,
    TeacherRef,
)
from class_scheduling.services.batch_conflicts import check_batch_conflicts
from class_scheduling.services.intervals import day_of_week, ensure_valid_interval, start_of_week, to_wall_clock

logger = logging.getLogger(__name__)


class SessionService:
    """Service layer for class session operations of one center."""

    def __init__(self, tenant: TenantScope):
        self.tenant = tenant
        self.db = tenant.db

    def _projection_query(self) -> Select:
        tenant = self.tenant
        student_counts = (
            tenant.select(ClassStudent, ClassStudent.class_id, func.count(ClassStudent.id).label("student_count"))
            .group_by(ClassStudent.class_id)
            .subquery()
        )
        return (
            tenant.select(
                ClassSession,
                ClassSession,
                Class,
                Course.name.label("course_name"),
                User.id.label("teacher_id"),
                User.name.label("teacher_name"),
                student_counts.c.student_count,
            )
            .outerjoin(Class, (Class.id == ClassSession.class_id) & tenant.owns(Class))
            .outerjoin(Course, (Course.id == Class.course_id) & tenant.owns(Course))
            .outerjoin(User, (User.id == Class.teacher_id) & tenant.owns(User))
            .outerjoin(student_counts, student_counts.c.class_id == ClassSession.class_id)
        )

    @staticmethod
    def _to_out(row) -> ClassSessionOut:
        session, klass = row[0], row[1]
        out = ClassSessionOut.model_validate(session)
        if klass is not None:
            teacher = TeacherRef(id=row.teacher_id, name=row.teacher_name) if row.teacher_id else None
            out.class_info = ClassSummary(
                id=klass.id,
                name=klass.name,
                course_id=klass.course_id,
                course_name=row.course_name,
                teacher=teacher,
                student_count=row.student_count or 0,
            )
        return out

    def list_sessions(
        self,
        start: datetime,
        end: datetime,
        class_id: str | None = None,
    ) -> list[ClassSessionOut]:
        stmt = self._projection_query().where(
            ClassSession.start_time >= to_wall_clock(start),
            ClassSession.end_time <= to_wall_clock(end),
        )
        if class_id:
            stmt = stmt.where(ClassSession.class_id == class_id)
        stmt = stmt.order_by(ClassSession.start_time.asc())
        return [self._to_out(row) for row in self.db.execute(stmt)]

    def list_sessions_with_conflicts(
        self,
        start: datetime,
        end: datetime,
        class_id: str | None = None,
    ) -> list[ClassSessionOut]:
        sessions = self.list_sessions(start, end, class_id)
        conflict_map = check_batch_conflicts(
            self.tenant,
            [
                BatchSessionIn(
                    id=session.id,
                    class_id=session.class_id,
                    start_time=session.start_time,
                    end_time=session.end_time,
                    room_name=session.room_name,
                )
                for session in sessions
            ],
        )
        for session in sessions:
            session.has_conflicts = conflict_map.get(session.id, False)
        return sessions

    def get_sessions_for_week(self, week_start: date, class_id: str | None = None) -> list[ClassSessionOut]:
        monday = start_of_week(week_start)
        start = datetime.combine(monday, time())
        end = start + timedelta(days=7)
        return self.list_sessions(start, end, class_id)

    def get_session(self, session_id: str) -> ClassSessionOut:
        row = self.db.execute(self._projection_query().where(ClassSession.id == session_id)).first()
        if row is None:
            raise ResourceNotFoundError("ClassSession", session_id)
        return self._to_out(row)

    def create_session(self, payload: ClassSessionCreate) -> ClassSessionOut:
        ensure_valid_interval(payload.start_time, payload.end_time)
        self.tenant.get_or_raise(Class, payload.class_id, "Class")

        session = self.tenant.add(
            ClassSession(
                class_id=payload.class_id,
                schedule_id=payload.schedule_id,
                start_time=payload.start_time,
                end_time=payload.end_time,
                room_name=payload.room_name,
                status=payload.status or SessionStatus.scheduled,
            )
        )
        self.db.flush()

        if payload.recurrence != "none":
            self._create_recurring_series(session, payload.recurrence)

        self.db.commit()
        logger.info("Created session %s for class %s", session.id, session.class_id)
        return self.get_session(session.id)

    def _create_recurring_series(self, primary: ClassSession, recurrence: str) -> None:
        settings = get_settings()
        if recurrence == "biweekly":
            interval_weeks, total = 2, settings.recurrence_biweekly_instances
        else:
            interval_weeks, total = 1, settings.recurrence_weekly_instances

        schedule = self.tenant.add(
            ClassSchedule(
                class_id=primary.class_id,
                day_of_week=day_of_week(primary.start_time.date()),
                start_time=primary.start_time.strftime("%H:%M"),
                end_time=primary.end_time.strftime("%H:%M"),
                room_name=primary.room_name,
            )
        )
        self.db.flush()
        primary.schedule_id = schedule.id

        occurrences = []
        for index in range(1, total):
            offset = timedelta(weeks=index * interval_weeks)
            occurrences.append(
                ClassSession(
                    class_id=primary.class_id,
                    schedule_id=schedule.id,
                    start_time=primary.start_time + offset,
                    end_time=primary.end_time + offset,
                    room_name=primary.room_name,
                    status=SessionStatus.scheduled,
                )
            )
        self.tenant.add_all(occurrences)
        logger.info("Created %s series %s with %d session(s)", recurrence, schedule.id, total)

    def update_session(self, session_id: str, payload: ClassSessionUpdate) -> SessionUpdateOut:
        session = self.tenant.get_or_raise(ClassSession, session_id, "ClassSession")
        previous_start_time = session.start_time
        previous_end_time = session.end_time
        previous_room_name = session.room_name

        data = payload.model_dump(exclude_unset=True)
        for key in ("start_time", "end_time", "status"):
            if key in data and data[key] is None:
                data.pop(key)

        ensure_valid_interval(
            data.get("start_time", session.start_time),
            data.get("end_time", session.end_time),
        )
        for key, value in data.items():
            setattr(session, key, value)
        self.db.commit()

        return SessionUpdateOut(
            session=self.get_session(session_id),
            previous_start_time=previous_start_time,
            previous_end_time=previous_end_time,
            previous_room_name=previous_room_name,
        )

    def delete_session(self, session_id: str) -> None:
        session = self.tenant.get_or_raise(ClassSession, session_id, "ClassSession")
        self.db.delete(session)
        self.db.commit()
        logger.info("Deleted session %s", session_id)

    def delete_future_sessions(self, session_id: str) -> DeleteFutureSessionsOut:
        session = self.tenant.get_or_raise(ClassSession, session_id, "ClassSession")
        if not session.schedule_id:
            raise SchedulingValidationError(
                "Session is not part of a recurring series",
                details={"session_id": session_id},
            )
        schedule_id = session.schedule_id
        class_id = session.class_id

        result = self.db.execute(
            delete(ClassSession)
            .where(
                self.tenant.owns(ClassSession),
                ClassSession.schedule_id == schedule_id,
                ClassSession.start_time >= session.start_time,
            )
            .execution_options(synchronize_session=False)
        )
        deleted_count = result.rowcount or 0

        remaining = self.db.execute(
            self.tenant.select(ClassSession, func.count(ClassSession.id)).where(
                ClassSession.schedule_id == schedule_id
            )
        ).scalar_one()
        if remaining == 0:
            schedule = self.tenant.get(ClassSchedule, schedule_id)
            if schedule is not None:
                self.db.delete(schedule)
        self.db.commit()
        self.db.expire_all()

        logger.info("Deleted %d future session(s) of series %s", deleted_count, schedule_id)
        return DeleteFutureSessionsOut(deleted_count=deleted_count, class_id=class_id)

    def get_class_participants(self, class_id: str) -> ClassParticipants:
        klass = self.tenant.get_or_raise(Class, class_id, "Class")
        student_ids = self.db.execute(
            self.tenant.select(ClassStudent, ClassStudent.student_id)
            .where(ClassStudent.class_id == class_id)
            .order_by(ClassStudent.student_id.asc())
        ).scalars()
        return ClassParticipants(teacher_id=klass.teacher_id, student_ids=list(student_ids))
