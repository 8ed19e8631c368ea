from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import Select

from class_scheduling.db.tenant import TenantScope
from class_scheduling.models.class_model import Class
from class_scheduling.models.class_session import ClassSession, SessionStatus
from class_scheduling.models.course import Course
from class_scheduling.models.user import User
from class_scheduling.schemas.session import ConflictCheckRequest, ConflictingSession, ConflictResult
from class_scheduling.services.intervals import ensure_valid_interval

logger = logging.getLogger(__name__)


def _conflict_query(tenant: TenantScope, start_time: datetime, end_time: datetime) -> Select:
    # Active sessions overlapping [start_time, end_time), with display names joined in.
    return (
        tenant.select(ClassSession, ClassSession, Class.name, Course.name, User.name)
        .outerjoin(Class, (Class.id == ClassSession.class_id) & tenant.owns(Class))
        .outerjoin(Course, (Course.id == Class.course_id) & tenant.owns(Course))
        .outerjoin(User, (User.id == Class.teacher_id) & tenant.owns(User))
        .where(
            ClassSession.status != SessionStatus.cancelled,
            ClassSession.start_time < end_time,
            ClassSession.end_time > start_time,
        )
        .order_by(ClassSession.start_time.asc())
    )


def _to_conflicting(rows) -> list[ConflictingSession]:
    return [
        ConflictingSession(
            id=session.id,
            class_id=session.class_id,
            start_time=session.start_time,
            end_time=session.end_time,
            room_name=session.room_name,
            class_name=class_name,
            course_name=course_name,
            teacher_name=teacher_name,
        )
        for session, class_name, course_name, teacher_name in rows
    ]


def class_teacher_id(tenant: TenantScope, class_id: str) -> str | None:
    stmt = tenant.select(Class, Class.teacher_id).where(Class.id == class_id)
    return tenant.db.execute(stmt).scalar_one_or_none()


def find_room_conflicts(
    tenant: TenantScope,
    room_name: str,
    start_time: datetime,
    end_time: datetime,
    *,
    exclude_session_id: str | None = None,
) -> list[ConflictingSession]:
    stmt = _conflict_query(tenant, start_time, end_time).where(ClassSession.room_name == room_name)
    if exclude_session_id:
        stmt = stmt.where(ClassSession.id != exclude_session_id)
    return _to_conflicting(tenant.db.execute(stmt).all())


def find_teacher_conflicts(
    tenant: TenantScope,
    teacher_id: str,
    start_time: datetime,
    end_time: datetime,
    *,
    exclude_session_id: str | None = None,
) -> list[ConflictingSession]:
    stmt = _conflict_query(tenant, start_time, end_time).where(Class.teacher_id == teacher_id)
    if exclude_session_id:
        stmt = stmt.where(ClassSession.id != exclude_session_id)
    return _to_conflicting(tenant.db.execute(stmt).all())


def check_conflicts(
    tenant: TenantScope,
    request: ConflictCheckRequest,
    *,
    include_suggestions: bool = True,
) -> ConflictResult:
    """Classify room and teacher double-bookings for one candidate session.

    The room check runs only when a room is requested and the teacher check
    only when the candidate's class has a teacher; each issues a single
    session query. Both may report conflicts at the same time.
    """
    ensure_valid_interval(request.start_time, request.end_time)

    room_conflicts: list[ConflictingSession] = []
    teacher_conflicts: list[ConflictingSession] = []

    if request.room_name:
        room_conflicts = find_room_conflicts(
            tenant,
            request.room_name,
            request.start_time,
            request.end_time,
            exclude_session_id=request.exclude_session_id,
        )

    teacher_id = class_teacher_id(tenant, request.class_id)
    if teacher_id:
        teacher_conflicts = find_teacher_conflicts(
            tenant,
            teacher_id,
            request.start_time,
            request.end_time,
            exclude_session_id=request.exclude_session_id,
        )

    has_conflicts = bool(room_conflicts or teacher_conflicts)
    suggestions = None
    if has_conflicts:
        logger.info(
            "Conflicts for class %s at %s: %d room, %d teacher",
            request.class_id,
            request.start_time.isoformat(),
            len(room_conflicts),
            len(teacher_conflicts),
        )
        if include_suggestions:
            # suggestions imports this module.
            from class_scheduling.services.suggestions import suggest_next_available

            suggestions = suggest_next_available(
                tenant,
                class_id=request.class_id,
                start_time=request.start_time,
                end_time=request.end_time,
                room_name=request.room_name,
                teacher_id=teacher_id,
                exclude_session_id=request.exclude_session_id,
            )

    return ConflictResult(
        has_conflicts=has_conflicts,
        room_conflicts=room_conflicts,
        teacher_conflicts=teacher_conflicts,
        suggestions=suggestions,
    )
