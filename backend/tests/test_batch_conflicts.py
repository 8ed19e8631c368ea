from datetime import date

from class_scheduling.models import SessionStatus
from class_scheduling.schemas.session import BatchSessionIn
from class_scheduling.services.batch_conflicts import Booking, bookings_conflict, check_batch_conflicts
from conftest import at

DAY = date(2026, 1, 26)


def candidate(session_id, class_id, start, end, room_name=None):
    return BatchSessionIn(
        id=session_id,
        class_id=class_id,
        start_time=at(DAY, start),
        end_time=at(DAY, end),
        room_name=room_name,
    )


def test_empty_batch_returns_empty_map_without_queries(tenant, queries):
    assert check_batch_conflicts(tenant, []) == {}
    assert queries.statements == []


def test_flags_room_conflict_inside_batch(tenant, seed):
    first_class = seed.klass("First")
    second_class = seed.klass("Second")

    result = check_batch_conflicts(
        tenant,
        [
            candidate("a", first_class.id, "09:00", "10:00", "Room A"),
            candidate("b", second_class.id, "09:30", "10:30", "Room A"),
            candidate("c", second_class.id, "11:00", "12:00", "Room A"),
        ],
    )

    assert result == {"a": True, "b": True, "c": False}


def test_back_to_back_batch_entries_are_not_flagged(tenant, seed):
    klass = seed.klass("Back to back")

    result = check_batch_conflicts(
        tenant,
        [
            candidate("a", klass.id, "09:00", "10:00", "Room A"),
            candidate("b", klass.id, "10:00", "11:00", "Room A"),
        ],
    )

    assert result == {"a": False, "b": False}


def test_flags_conflict_with_persisted_session_outside_batch(tenant, seed):
    stored_class = seed.klass("Stored")
    candidate_class = seed.klass("Candidate")
    seed.session(stored_class.id, at(DAY, "09:00"), at(DAY, "10:00"), room_name="Room A")

    result = check_batch_conflicts(tenant, [candidate("new", candidate_class.id, "09:15", "09:45", "Room A")])

    assert result == {"new": True}


def test_flags_teacher_conflict_across_rooms(tenant, seed):
    teacher = seed.teacher("Jane Doe")
    first_class = seed.klass("First", teacher_id=teacher.id)
    second_class = seed.klass("Second", teacher_id=teacher.id)

    result = check_batch_conflicts(
        tenant,
        [
            candidate("a", first_class.id, "09:00", "10:00", "Room A"),
            candidate("b", second_class.id, "09:30", "10:30", "Room B"),
        ],
    )

    assert result == {"a": True, "b": True}


def test_sessions_without_room_or_shared_teacher_never_conflict(tenant, seed):
    first_class = seed.klass("First", teacher_id=seed.teacher("Jane Doe").id)
    second_class = seed.klass("Second", teacher_id=seed.teacher("John Roe").id)

    result = check_batch_conflicts(
        tenant,
        [
            candidate("a", first_class.id, "09:00", "10:00"),
            candidate("b", second_class.id, "09:00", "10:00"),
        ],
    )

    assert result == {"a": False, "b": False}


def test_cancelled_persisted_sessions_are_ignored(tenant, seed):
    stored_class = seed.klass("Stored")
    candidate_class = seed.klass("Candidate")
    seed.session(
        stored_class.id,
        at(DAY, "09:00"),
        at(DAY, "10:00"),
        room_name="Room A",
        status=SessionStatus.cancelled,
    )

    result = check_batch_conflicts(tenant, [candidate("new", candidate_class.id, "09:00", "10:00", "Room A")])

    assert result == {"new": False}


def test_candidate_replaces_persisted_row_with_same_id(tenant, seed):
    klass = seed.klass("Moving")
    other_class = seed.klass("Other")
    moving = seed.session(klass.id, at(DAY, "09:00"), at(DAY, "10:00"), room_name="Room A")
    seed.session(other_class.id, at(DAY, "11:00"), at(DAY, "12:00"), room_name="Room B")

    # The stored 09:00 slot must not count against the session being moved away from it.
    result = check_batch_conflicts(
        tenant,
        [
            candidate(moving.id, klass.id, "09:30", "10:30", "Room A"),
            candidate("fresh", other_class.id, "09:00", "09:30", "Room A"),
        ],
    )

    assert result == {moving.id: False, "fresh": False}


def test_teacher_resolved_for_classes_without_persisted_sessions(tenant, seed):
    teacher = seed.teacher("Jane Doe")
    busy_class = seed.klass("Busy", teacher_id=teacher.id)
    new_class = seed.klass("New", teacher_id=teacher.id)
    seed.session(busy_class.id, at(DAY, "09:00"), at(DAY, "10:00"), room_name="Room A")

    result = check_batch_conflicts(tenant, [candidate("new", new_class.id, "09:30", "10:30", "Room B")])

    assert result == {"new": True}


def test_other_center_sessions_are_ignored(tenant, seed, other_seed):
    foreign_class = other_seed.klass("Foreign")
    other_seed.session(foreign_class.id, at(DAY, "09:00"), at(DAY, "10:00"), room_name="Room A")
    klass = seed.klass("Local")

    result = check_batch_conflicts(tenant, [candidate("a", klass.id, "09:00", "10:00", "Room A")])

    assert result == {"a": False}


def test_bookings_conflict_ignores_same_identity():
    booking = Booking(
        id="x",
        class_id="c",
        start_time=at(DAY, "09:00"),
        end_time=at(DAY, "10:00"),
        room_name="Room A",
        teacher_id="t",
    )

    assert bookings_conflict(booking, booking) is False
