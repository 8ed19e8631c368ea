from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from class_scheduling.db.tenant import TenantScope
from class_scheduling.models.class_model import Class
from class_scheduling.models.class_session import ClassSession, SessionStatus
from class_scheduling.schemas.session import BatchSessionIn
from class_scheduling.services.intervals import ensure_valid_interval, overlaps

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Booking:
    id: str
    class_id: str
    start_time: datetime
    end_time: datetime
    room_name: str | None
    teacher_id: str | None


def bookings_conflict(first: Booking, second: Booking) -> bool:
    if first.id == second.id:
        return False
    if not overlaps(first.start_time, first.end_time, second.start_time, second.end_time):
        return False
    if first.room_name and first.room_name == second.room_name:
        return True
    return bool(first.teacher_id and first.teacher_id == second.teacher_id)


def check_batch_conflicts(tenant: TenantScope, sessions: Sequence[BatchSessionIn]) -> dict[str, bool]:
    """Flag every candidate that double-books a room or teacher.

    Candidates are compared with each other and with all active persisted
    sessions overlapping the batch span, so a clash with a stored session
    outside the batch is reported too.
    """
    if not sessions:
        return {}
    for session in sessions:
        ensure_valid_interval(session.start_time, session.end_time)

    span_start = min(session.start_time for session in sessions)
    span_end = max(session.end_time for session in sessions)

    stmt = (
        tenant.select(
            ClassSession,
            ClassSession.id,
            ClassSession.class_id,
            ClassSession.start_time,
            ClassSession.end_time,
            ClassSession.room_name,
            Class.teacher_id,
        )
        .outerjoin(Class, (Class.id == ClassSession.class_id) & tenant.owns(Class))
        .where(
            ClassSession.status != SessionStatus.cancelled,
            ClassSession.start_time < span_end,
            ClassSession.end_time > span_start,
        )
    )
    persisted = tenant.db.execute(stmt).all()

    teacher_by_class: dict[str, str | None] = {row.class_id: row.teacher_id for row in persisted}
    missing_class_ids = {session.class_id for session in sessions} - set(teacher_by_class)
    if missing_class_ids:
        class_rows = tenant.db.execute(
            tenant.select(Class, Class.id, Class.teacher_id).where(Class.id.in_(missing_class_ids))
        ).all()
        teacher_by_class.update({row.id: row.teacher_id for row in class_rows})

    candidates: dict[str, Booking] = {}
    for session in sessions:
        candidates[session.id] = Booking(
            id=session.id,
            class_id=session.class_id,
            start_time=session.start_time,
            end_time=session.end_time,
            room_name=session.room_name,
            teacher_id=teacher_by_class.get(session.class_id),
        )

    # A stored row that is also in the batch is represented by its candidate version.
    working_set = list(candidates.values()) + [
        Booking(
            id=row.id,
            class_id=row.class_id,
            start_time=row.start_time,
            end_time=row.end_time,
            room_name=row.room_name,
            teacher_id=row.teacher_id,
        )
        for row in persisted
        if row.id not in candidates
    ]

    result: dict[str, bool] = {}
    for candidate in candidates.values():
        result[candidate.id] = any(bookings_conflict(candidate, other) for other in working_set)

    flagged = sum(1 for value in result.values() if value)
    if flagged:
        logger.info("Batch conflict check flagged %d of %d session(s)", flagged, len(result))
    return result
