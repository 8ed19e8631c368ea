import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Enum as SAEnum, Index, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from class_scheduling.db.base import Base


class SessionStatus(str, Enum):
    scheduled = "SCHEDULED"
    cancelled = "CANCELLED"
    completed = "COMPLETED"


class ClassSession(Base):
    __tablename__ = "class_sessions"
    __table_args__ = (
        Index("ix_class_sessions_center_start", "center_id", "start_time"),
        Index("ix_class_sessions_center_room", "center_id", "room_name"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    center_id: Mapped[str] = mapped_column(String(36), index=True, nullable=False)
    class_id: Mapped[str] = mapped_column(String(36), index=True, nullable=False)
    schedule_id: Mapped[str | None] = mapped_column(String(36), index=True, nullable=True)
    # Wall-clock timestamps of the center, stored without zone.
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    end_time: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    room_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    status: Mapped[SessionStatus] = mapped_column(
        SAEnum(
            SessionStatus,
            name="session_status",
            values_callable=lambda enum: [item.value for item in enum],
        ),
        nullable=False,
        default=SessionStatus.scheduled,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
