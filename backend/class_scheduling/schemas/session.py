from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, Field

from class_scheduling.models.class_session import SessionStatus
from class_scheduling.services.intervals import to_wall_clock

# Request timestamps are read as center wall-clock time; any offset is dropped.
WallClock = Annotated[datetime, AfterValidator(to_wall_clock)]


class ClassSessionCreate(BaseModel):
    class_id: str = Field(min_length=1, max_length=36)
    schedule_id: str | None = Field(default=None, max_length=36)
    start_time: WallClock
    end_time: WallClock
    room_name: str | None = Field(default=None, max_length=100)
    status: SessionStatus | None = None
    recurrence: Literal["none", "weekly", "biweekly"] = "none"


class ClassSessionUpdate(BaseModel):
    start_time: WallClock | None = None
    end_time: WallClock | None = None
    room_name: str | None = Field(default=None, max_length=100)
    status: SessionStatus | None = None


class TeacherRef(BaseModel):
    id: str
    name: str


class ClassSummary(BaseModel):
    id: str
    name: str
    course_id: str | None = None
    course_name: str | None = None
    teacher: TeacherRef | None = None
    student_count: int = 0


class ClassSessionOut(BaseModel):
    id: str
    center_id: str
    class_id: str
    schedule_id: str | None = None
    start_time: datetime
    end_time: datetime
    room_name: str | None = None
    status: SessionStatus
    class_info: ClassSummary | None = None
    has_conflicts: bool | None = None

    model_config = {"from_attributes": True}


class SessionUpdateOut(BaseModel):
    session: ClassSessionOut
    previous_start_time: datetime
    previous_end_time: datetime
    previous_room_name: str | None = None


class DeleteFutureSessionsOut(BaseModel):
    deleted_count: int
    class_id: str


class GenerateSessionsRequest(BaseModel):
    start_date: date
    end_date: date
    class_id: str | None = Field(default=None, max_length=36)


class GenerateSessionsOut(BaseModel):
    generated_count: int
    sessions: list[ClassSessionOut] = Field(default_factory=list)


class ConflictCheckRequest(BaseModel):
    class_id: str = Field(min_length=1, max_length=36)
    start_time: WallClock
    end_time: WallClock
    room_name: str | None = Field(default=None, max_length=100)
    exclude_session_id: str | None = Field(default=None, max_length=36)


class ConflictingSession(BaseModel):
    id: str
    class_id: str
    start_time: datetime
    end_time: datetime
    room_name: str | None = None
    class_name: str | None = None
    course_name: str | None = None
    teacher_name: str | None = None


class TimeSuggestion(BaseModel):
    type: Literal["time"] = "time"
    value: datetime
    end_time: datetime


class RoomSuggestion(BaseModel):
    type: Literal["room"] = "room"
    value: str


Suggestion = Annotated[TimeSuggestion | RoomSuggestion, Field(discriminator="type")]


class ConflictResult(BaseModel):
    has_conflicts: bool
    room_conflicts: list[ConflictingSession] = Field(default_factory=list)
    teacher_conflicts: list[ConflictingSession] = Field(default_factory=list)
    suggestions: list[Suggestion] | None = None


class BatchSessionIn(BaseModel):
    id: str = Field(min_length=1, max_length=36)
    class_id: str = Field(min_length=1, max_length=36)
    start_time: WallClock
    end_time: WallClock
    room_name: str | None = Field(default=None, max_length=100)


class BatchConflictRequest(BaseModel):
    sessions: list[BatchSessionIn] = Field(default_factory=list, max_length=2000)


class BatchConflictOut(BaseModel):
    conflicts: dict[str, bool]


class SuggestionRequest(BaseModel):
    class_id: str = Field(min_length=1, max_length=36)
    start_time: WallClock
    end_time: WallClock
    room_name: str | None = Field(default=None, max_length=100)
    exclude_session_id: str | None = Field(default=None, max_length=36)


class ClassParticipants(BaseModel):
    teacher_id: str | None = None
    student_ids: list[str] = Field(default_factory=list)
