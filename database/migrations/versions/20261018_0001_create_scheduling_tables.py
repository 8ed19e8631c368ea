"""create scheduling tables

Revision ID: 20261018_0001
Revises: None
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


user_role_enum = sa.Enum("owner", "admin", "teacher", "student", name="user_role")
session_status_enum = sa.Enum("SCHEDULED", "CANCELLED", "COMPLETED", name="session_status")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("center_id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("role", user_role_enum, nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("center_id", "email", name="uq_users_center_email"),
    )
    op.create_index("ix_users_center_id", "users", ["center_id"])

    op.create_table(
        "courses",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("center_id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.String(length=1000), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_courses_center_id", "courses", ["center_id"])

    op.create_table(
        "classes",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("center_id", sa.String(length=36), nullable=False),
        sa.Column("course_id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("teacher_id", sa.String(length=36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_classes_center_id", "classes", ["center_id"])
    op.create_index("ix_classes_course_id", "classes", ["course_id"])
    op.create_index("ix_classes_teacher_id", "classes", ["teacher_id"])

    op.create_table(
        "class_students",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("center_id", sa.String(length=36), nullable=False),
        sa.Column("class_id", sa.String(length=36), nullable=False),
        sa.Column("student_id", sa.String(length=36), nullable=False),
        sa.Column("enrolled_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("class_id", "student_id", name="uq_class_students_class_student"),
    )
    op.create_index("ix_class_students_center_id", "class_students", ["center_id"])
    op.create_index("ix_class_students_class_id", "class_students", ["class_id"])

    op.create_table(
        "class_schedules",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("center_id", sa.String(length=36), nullable=False),
        sa.Column("class_id", sa.String(length=36), nullable=False),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("room_name", sa.String(length=100), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_class_schedules_center_id", "class_schedules", ["center_id"])
    op.create_index("ix_class_schedules_class_id", "class_schedules", ["class_id"])

    op.create_table(
        "class_sessions",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("center_id", sa.String(length=36), nullable=False),
        sa.Column("class_id", sa.String(length=36), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=False), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=False), nullable=False),
        sa.Column("room_name", sa.String(length=100), nullable=True),
        sa.Column("status", session_status_enum, nullable=False, server_default="SCHEDULED"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_class_sessions_center_id", "class_sessions", ["center_id"])
    op.create_index("ix_class_sessions_class_id", "class_sessions", ["class_id"])
    op.create_index("ix_class_sessions_center_start", "class_sessions", ["center_id", "start_time"])
    op.create_index("ix_class_sessions_center_room", "class_sessions", ["center_id", "room_name"])


def downgrade() -> None:
    op.drop_index("ix_class_sessions_center_room", table_name="class_sessions")
    op.drop_index("ix_class_sessions_center_start", table_name="class_sessions")
    op.drop_index("ix_class_sessions_class_id", table_name="class_sessions")
    op.drop_index("ix_class_sessions_center_id", table_name="class_sessions")
    op.drop_table("class_sessions")
    op.drop_index("ix_class_schedules_class_id", table_name="class_schedules")
    op.drop_index("ix_class_schedules_center_id", table_name="class_schedules")
    op.drop_table("class_schedules")
    op.drop_index("ix_class_students_class_id", table_name="class_students")
    op.drop_index("ix_class_students_center_id", table_name="class_students")
    op.drop_table("class_students")
    op.drop_index("ix_classes_teacher_id", table_name="classes")
    op.drop_index("ix_classes_course_id", table_name="classes")
    op.drop_index("ix_classes_center_id", table_name="classes")
    op.drop_table("classes")
    op.drop_index("ix_courses_center_id", table_name="courses")
    op.drop_table("courses")
    op.drop_index("ix_users_center_id", table_name="users")
    op.drop_table("users")
    session_status_enum.drop(op.get_bind(), checkfirst=True)
    user_role_enum.drop(op.get_bind(), checkfirst=True)
