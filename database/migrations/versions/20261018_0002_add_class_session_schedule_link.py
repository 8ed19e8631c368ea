"""add schedule link to class sessions

Revision ID: 20261018_0002
Revises: 20261018_0001
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261018_0002"
down_revision = "20261018_0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column("class_sessions", sa.Column("schedule_id", sa.String(length=36), nullable=True))
    op.create_index("ix_class_sessions_schedule_id", "class_sessions", ["schedule_id"])


def downgrade() -> None:
    op.drop_index("ix_class_sessions_schedule_id", table_name="class_sessions")
    op.drop_column("class_sessions", "schedule_id")
