from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta

from class_scheduling.core.exceptions import SchedulingValidationError
from class_scheduling.db.tenant import TenantScope
from class_scheduling.models.class_schedule import ClassSchedule
from class_scheduling.models.class_session import ClassSession, SessionStatus
from class_scheduling.services.intervals import combine_wall_clock, day_of_week, iter_days

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    generated_count: int
    sessions: list[ClassSession] = field(default_factory=list)


def expand_schedule(schedule: ClassSchedule, start_date: date, end_date: date) -> list[tuple[datetime, datetime]]:
    """Concrete (start, end) pairs of a weekly template within an inclusive date range."""
    occurrences: list[tuple[datetime, datetime]] = []
    for day in iter_days(start_date, end_date):
        if day_of_week(day) != schedule.day_of_week:
            continue
        occurrences.append(
            (combine_wall_clock(day, schedule.start_time), combine_wall_clock(day, schedule.end_time))
        )
    return occurrences


def generate_sessions(
    tenant: TenantScope,
    start_date: date,
    end_date: date,
    *,
    class_id: str | None = None,
) -> GenerationResult:
    """Materialize recurring templates into sessions for ``start_date``..``end_date``.

    Occurrences whose ``(class_id, start_time)`` already exists are skipped, so
    running the same range twice creates nothing the second time. No conflict
    detection is performed on the created sessions.
    """
    if end_date < start_date:
        raise SchedulingValidationError(
            "end_date must not be before start_date",
            details={"start_date": start_date.isoformat(), "end_date": end_date.isoformat()},
        )

    schedule_stmt = tenant.select(ClassSchedule)
    if class_id:
        schedule_stmt = schedule_stmt.where(ClassSchedule.class_id == class_id)
    schedules = list(tenant.db.execute(schedule_stmt).scalars())

    range_start = datetime.combine(start_date, time())
    range_end = datetime.combine(end_date + timedelta(days=1), time())
    existing_stmt = tenant.select(ClassSession, ClassSession.class_id, ClassSession.start_time).where(
        ClassSession.start_time >= range_start,
        ClassSession.start_time < range_end,
    )
    if class_id:
        existing_stmt = existing_stmt.where(ClassSession.class_id == class_id)
    existing_keys = {(row.class_id, row.start_time) for row in tenant.db.execute(existing_stmt)}

    to_create: list[ClassSession] = []
    for schedule in schedules:
        try:
            occurrences = expand_schedule(schedule, start_date, end_date)
        except ValueError:
            logger.warning("Skipping schedule %s with malformed wall-clock times", schedule.id)
            continue
        for occurrence_start, occurrence_end in occurrences:
            if occurrence_end <= occurrence_start:
                logger.warning("Skipping schedule %s: end_time is not after start_time", schedule.id)
                break
            key = (schedule.class_id, occurrence_start)
            if key in existing_keys:
                continue
            existing_keys.add(key)
            to_create.append(
                ClassSession(
                    class_id=schedule.class_id,
                    schedule_id=schedule.id,
                    start_time=occurrence_start,
                    end_time=occurrence_end,
                    room_name=schedule.room_name,
                    status=SessionStatus.scheduled,
                )
            )

    if to_create:
        tenant.add_all(to_create)
        tenant.db.commit()

    logger.info(
        "Generated %d session(s) for center %s between %s and %s",
        len(to_create),
        tenant.center_id,
        start_date.isoformat(),
        end_date.isoformat(),
    )
    return GenerationResult(generated_count=len(to_create), sessions=to_create)
