from datetime import date

import pytest
from sqlalchemy import select

from class_scheduling.core.exceptions import SchedulingValidationError
from class_scheduling.models import ClassSession, SessionStatus
from class_scheduling.services.session_generator import expand_schedule, generate_sessions
from conftest import CENTER_ID, at

MONDAY = 1


def stored_sessions(db):
    return list(db.execute(select(ClassSession).order_by(ClassSession.start_time)).scalars())


def test_generates_monday_session_within_range(tenant, db, seed):
    klass = seed.klass("Weekly")
    template = seed.schedule(klass.id, MONDAY, "09:00", "10:00", room_name="Room A")

    result = generate_sessions(tenant, date(2026, 1, 20), date(2026, 1, 26))

    assert result.generated_count == 1
    sessions = stored_sessions(db)
    assert len(sessions) == 1
    created = sessions[0]
    assert created.start_time == at(date(2026, 1, 26), "09:00")
    assert created.end_time == at(date(2026, 1, 26), "10:00")
    assert created.room_name == "Room A"
    assert created.schedule_id == template.id
    assert created.center_id == CENTER_ID
    assert created.status == SessionStatus.scheduled


def test_second_run_over_same_range_creates_nothing(tenant, db, seed):
    klass = seed.klass("Weekly")
    seed.schedule(klass.id, MONDAY, "09:00", "10:00", room_name="Room A")

    first = generate_sessions(tenant, date(2026, 1, 1), date(2026, 1, 31))
    second = generate_sessions(tenant, date(2026, 1, 1), date(2026, 1, 31))

    assert first.generated_count == 4
    assert second.generated_count == 0
    assert len(stored_sessions(db)) == 4


def test_existing_manual_session_is_not_duplicated(tenant, db, seed):
    klass = seed.klass("Weekly")
    seed.schedule(klass.id, MONDAY, "09:00", "10:00")
    seed.session(klass.id, at(date(2026, 1, 26), "09:00"), at(date(2026, 1, 26), "10:30"), room_name="Room Z")

    result = generate_sessions(tenant, date(2026, 1, 26), date(2026, 1, 26))

    assert result.generated_count == 0
    assert len(stored_sessions(db)) == 1


def test_cancelled_session_still_counts_as_existing(tenant, db, seed):
    klass = seed.klass("Weekly")
    seed.schedule(klass.id, MONDAY, "09:00", "10:00")
    seed.session(
        klass.id,
        at(date(2026, 1, 26), "09:00"),
        at(date(2026, 1, 26), "10:00"),
        status=SessionStatus.cancelled,
    )

    assert generate_sessions(tenant, date(2026, 1, 26), date(2026, 1, 26)).generated_count == 0


def test_multiple_templates_of_one_class(tenant, db, seed):
    klass = seed.klass("Twice a week")
    seed.schedule(klass.id, MONDAY, "09:00", "10:00")
    seed.schedule(klass.id, 3, "14:00", "15:30")

    result = generate_sessions(tenant, date(2026, 1, 26), date(2026, 2, 1))

    assert result.generated_count == 2
    starts = [session.start_time for session in stored_sessions(db)]
    assert starts == [at(date(2026, 1, 26), "09:00"), at(date(2026, 1, 28), "14:00")]


def test_sunday_is_day_zero_and_end_date_is_inclusive(tenant, db, seed):
    klass = seed.klass("Sunday")
    seed.schedule(klass.id, 0, "18:00", "19:00")

    result = generate_sessions(tenant, date(2026, 1, 26), date(2026, 2, 1))

    assert result.generated_count == 1
    assert stored_sessions(db)[0].start_time == at(date(2026, 2, 1), "18:00")


def test_same_start_for_different_classes_is_not_a_duplicate(tenant, db, seed):
    first = seed.klass("First")
    second = seed.klass("Second")
    seed.schedule(first.id, MONDAY, "09:00", "10:00", room_name="Room A")
    seed.schedule(second.id, MONDAY, "09:00", "10:00", room_name="Room A")

    result = generate_sessions(tenant, date(2026, 1, 26), date(2026, 1, 26))

    assert result.generated_count == 2


def test_class_filter_limits_generation(tenant, db, seed):
    first = seed.klass("First")
    second = seed.klass("Second")
    seed.schedule(first.id, MONDAY, "09:00", "10:00")
    seed.schedule(second.id, MONDAY, "11:00", "12:00")

    result = generate_sessions(tenant, date(2026, 1, 26), date(2026, 1, 26), class_id=second.id)

    assert result.generated_count == 1
    assert [session.class_id for session in stored_sessions(db)] == [second.id]


def test_templates_of_other_centers_are_ignored(tenant, db, seed, other_seed):
    foreign = other_seed.klass("Foreign")
    other_seed.schedule(foreign.id, MONDAY, "09:00", "10:00")

    assert generate_sessions(tenant, date(2026, 1, 26), date(2026, 1, 26)).generated_count == 0


def test_malformed_template_is_skipped(tenant, db, seed):
    klass = seed.klass("Broken")
    seed.schedule(klass.id, MONDAY, "9am", "10:00")
    seed.schedule(klass.id, MONDAY, "11:00", "10:00")
    seed.schedule(klass.id, MONDAY, "12:00", "13:00")

    result = generate_sessions(tenant, date(2026, 1, 26), date(2026, 1, 26))

    assert result.generated_count == 1
    assert stored_sessions(db)[0].start_time == at(date(2026, 1, 26), "12:00")


def test_reversed_range_is_rejected(tenant):
    with pytest.raises(SchedulingValidationError):
        generate_sessions(tenant, date(2026, 1, 26), date(2026, 1, 20))


def test_expand_schedule_lists_every_matching_day(seed):
    klass = seed.klass("Weekly")
    template = seed.schedule(klass.id, MONDAY, "09:00", "10:00")

    occurrences = expand_schedule(template, date(2026, 1, 1), date(2026, 1, 31))

    assert [start.day for start, _ in occurrences] == [5, 12, 19, 26]
