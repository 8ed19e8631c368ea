from __future__ import annotations

import logging
from datetime import datetime, time, timedelta

from sqlalchemy import or_

from class_scheduling.core.config import get_settings
from class_scheduling.db.tenant import TenantScope
from class_scheduling.models.class_model import Class
from class_scheduling.models.class_session import ClassSession, SessionStatus
from class_scheduling.schemas.session import RoomSuggestion, Suggestion, TimeSuggestion
from class_scheduling.services.conflicts import class_teacher_id, find_room_conflicts
from class_scheduling.services.intervals import ensure_valid_interval, overlaps, to_wall_clock

logger = logging.getLogger(__name__)

_UNSET = object()


def _day_window(start_time: datetime) -> tuple[datetime, datetime]:
    settings = get_settings()
    day = start_time.date()
    day_start = datetime.combine(day, time(hour=settings.suggestion_day_start_hour))
    day_end = datetime.combine(day, time()) + timedelta(hours=settings.suggestion_day_end_hour)
    return day_start, day_end


def _busy_intervals(
    tenant: TenantScope,
    *,
    room_name: str | None,
    teacher_id: str | None,
    window_start: datetime,
    window_end: datetime,
    exclude_session_id: str | None = None,
) -> list[tuple[datetime, datetime]]:
    resource_filters = []
    if room_name:
        resource_filters.append(ClassSession.room_name == room_name)
    if teacher_id:
        resource_filters.append(Class.teacher_id == teacher_id)
    if not resource_filters:
        return []

    stmt = (
        tenant.select(ClassSession, ClassSession.start_time, ClassSession.end_time)
        .outerjoin(Class, (Class.id == ClassSession.class_id) & tenant.owns(Class))
        .where(
            ClassSession.status != SessionStatus.cancelled,
            ClassSession.start_time < window_end,
            ClassSession.end_time > window_start,
            or_(*resource_filters),
        )
        .order_by(ClassSession.start_time.asc())
    )
    if exclude_session_id:
        stmt = stmt.where(ClassSession.id != exclude_session_id)
    return [(row.start_time, row.end_time) for row in tenant.db.execute(stmt)]


def next_free_start(
    requested_start: datetime,
    duration: timedelta,
    busy: list[tuple[datetime, datetime]],
) -> datetime:
    """Push a slot of ``duration`` forward past every busy interval it hits.

    ``busy`` must be sorted by start. Adjacent intervals do not block.
    """
    candidate = requested_start
    for busy_start, busy_end in busy:
        if busy_start >= candidate + duration:
            break
        if overlaps(candidate, candidate + duration, busy_start, busy_end):
            candidate = busy_end
    return candidate


def _known_rooms(tenant: TenantScope, since: datetime, exclude: str) -> list[str]:
    stmt = (
        tenant.select(ClassSession, ClassSession.room_name)
        .where(
            ClassSession.room_name.is_not(None),
            ClassSession.room_name != exclude,
            ClassSession.status != SessionStatus.cancelled,
            ClassSession.start_time >= since,
        )
        .distinct()
        .order_by(ClassSession.room_name.asc())
    )
    return list(tenant.db.execute(stmt).scalars())


def suggest_next_available(
    tenant: TenantScope,
    *,
    class_id: str,
    start_time: datetime,
    end_time: datetime,
    room_name: str | None = None,
    teacher_id=_UNSET,
    exclude_session_id: str | None = None,
) -> list[Suggestion]:
    """Offer the nearest free start on the same day, then free alternative rooms.

    ``teacher_id`` may be passed when the caller already resolved it for the
    class; otherwise it is looked up. The session named by
    ``exclude_session_id`` (one being moved) does not count as busy.
    An empty list means nothing was found.
    """
    start_time, end_time = to_wall_clock(start_time), to_wall_clock(end_time)
    ensure_valid_interval(start_time, end_time)
    settings = get_settings()
    if teacher_id is _UNSET:
        teacher_id = class_teacher_id(tenant, class_id)

    suggestions: list[Suggestion] = []
    duration = end_time - start_time

    day_start, day_end = _day_window(start_time)
    busy = _busy_intervals(
        tenant,
        room_name=room_name,
        teacher_id=teacher_id,
        window_start=day_start,
        window_end=day_end,
        exclude_session_id=exclude_session_id,
    )
    if busy:
        suggested_start = next_free_start(max(start_time, day_start), duration, busy)
        if suggested_start + duration <= day_end:
            suggestions.append(TimeSuggestion(value=suggested_start, end_time=suggested_start + duration))

    if room_name:
        since = start_time - timedelta(days=settings.room_suggestion_lookback_days)
        free_rooms: list[str] = []
        for candidate_room in _known_rooms(tenant, since, exclude=room_name):
            if len(free_rooms) >= settings.max_room_suggestions:
                break
            if not find_room_conflicts(
                tenant, candidate_room, start_time, end_time, exclude_session_id=exclude_session_id
            ):
                free_rooms.append(candidate_room)
        suggestions.extend(RoomSuggestion(value=name) for name in free_rooms)

    logger.debug("Suggested %d alternative(s) for class %s", len(suggestions), class_id)
    return suggestions
