from __future__ import annotations

import logging

from sqlalchemy import inspect, text

from class_scheduling.db.base import Base
from class_scheduling.db.session import engine
import class_scheduling.models  # noqa: F401

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "class_sessions": {
        "id",
        "center_id",
        "class_id",
        "schedule_id",
        "start_time",
        "end_time",
        "room_name",
        "status",
    },
    "class_schedules": {"id", "center_id", "class_id", "day_of_week", "start_time", "end_time", "room_name"},
    "classes": {"id", "center_id", "course_id", "name", "teacher_id"},
    "class_students": {"id", "center_id", "class_id", "student_id"},
}


def _ensure_class_sessions_schedule_id_column() -> None:
    # Sessions created before recurring series existed carry no schedule link.
    with engine.begin() as connection:
        inspector = inspect(connection)
        if "class_sessions" not in set(inspector.get_table_names()):
            return
        column_names = {item["name"] for item in inspector.get_columns("class_sessions")}
        if "schedule_id" in column_names:
            return
        connection.execute(text("ALTER TABLE class_sessions ADD COLUMN schedule_id VARCHAR(36)"))
        connection.execute(
            text("CREATE INDEX IF NOT EXISTS ix_class_sessions_schedule_id ON class_sessions (schedule_id)")
        )


def _assert_required_columns() -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        missing_tables = [name for name in REQUIRED_COLUMNS if name not in table_names]
        if missing_tables:
            raise RuntimeError(f"Missing required tables: {', '.join(sorted(missing_tables))}")

        missing_columns: list[str] = []
        for table_name, required in REQUIRED_COLUMNS.items():
            existing = {item["name"] for item in inspector.get_columns(table_name)}
            for column_name in sorted(required - existing):
                missing_columns.append(f"{table_name}.{column_name}")
        if missing_columns:
            raise RuntimeError(f"Missing required columns: {', '.join(missing_columns)}")


def ensure_runtime_schema_compatibility() -> None:
    try:
        # Ensure missing tables are present before additive compatibility patches.
        Base.metadata.create_all(bind=engine)
        _ensure_class_sessions_schedule_id_column()
        _assert_required_columns()
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Runtime schema compatibility bootstrap failed")
        raise RuntimeError("Runtime schema compatibility bootstrap failed") from exc
