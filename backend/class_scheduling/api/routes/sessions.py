from datetime import date, datetime

from fastapi import APIRouter, Depends, Query, status

from class_scheduling.api.deps import get_session_service, get_tenant
from class_scheduling.db.tenant import TenantScope
from class_scheduling.schemas.session import (
    BatchConflictOut,
    BatchConflictRequest,
    ClassParticipants,
    ClassSessionCreate,
    ClassSessionOut,
    ClassSessionUpdate,
    ConflictCheckRequest,
    ConflictResult,
    DeleteFutureSessionsOut,
    GenerateSessionsOut,
    GenerateSessionsRequest,
    SessionUpdateOut,
    Suggestion,
    SuggestionRequest,
)
from class_scheduling.services.batch_conflicts import check_batch_conflicts
from class_scheduling.services.conflicts import check_conflicts
from class_scheduling.services.session_generator import generate_sessions
from class_scheduling.services.sessions import SessionService
from class_scheduling.services.suggestions import suggest_next_available

router = APIRouter()


@router.get("/", response_model=list[ClassSessionOut])
def list_sessions(
    start_date: datetime = Query(...),
    end_date: datetime = Query(...),
    class_id: str | None = Query(default=None),
    include_conflicts: bool = Query(default=False),
    service: SessionService = Depends(get_session_service),
) -> list[ClassSessionOut]:
    if include_conflicts:
        return service.list_sessions_with_conflicts(start_date, end_date, class_id)
    return service.list_sessions(start_date, end_date, class_id)


@router.get("/week", response_model=list[ClassSessionOut])
def list_week_sessions(
    week_start: date = Query(...),
    class_id: str | None = Query(default=None),
    service: SessionService = Depends(get_session_service),
) -> list[ClassSessionOut]:
    return service.get_sessions_for_week(week_start, class_id)


@router.post("/generate", response_model=GenerateSessionsOut)
def generate(
    payload: GenerateSessionsRequest,
    tenant: TenantScope = Depends(get_tenant),
) -> GenerateSessionsOut:
    result = generate_sessions(tenant, payload.start_date, payload.end_date, class_id=payload.class_id)
    return GenerateSessionsOut(
        generated_count=result.generated_count,
        sessions=[ClassSessionOut.model_validate(session) for session in result.sessions],
    )


@router.post("/conflicts/check", response_model=ConflictResult)
def check_session_conflicts(
    payload: ConflictCheckRequest,
    tenant: TenantScope = Depends(get_tenant),
) -> ConflictResult:
    return check_conflicts(tenant, payload)


@router.post("/conflicts/batch", response_model=BatchConflictOut)
def check_session_batch_conflicts(
    payload: BatchConflictRequest,
    tenant: TenantScope = Depends(get_tenant),
) -> BatchConflictOut:
    return BatchConflictOut(conflicts=check_batch_conflicts(tenant, payload.sessions))


@router.post("/suggestions", response_model=list[Suggestion])
def suggest_alternatives(
    payload: SuggestionRequest,
    tenant: TenantScope = Depends(get_tenant),
) -> list[Suggestion]:
    return suggest_next_available(
        tenant,
        class_id=payload.class_id,
        start_time=payload.start_time,
        end_time=payload.end_time,
        room_name=payload.room_name,
        exclude_session_id=payload.exclude_session_id,
    )


@router.get("/classes/{class_id}/participants", response_model=ClassParticipants)
def get_class_participants(
    class_id: str,
    service: SessionService = Depends(get_session_service),
) -> ClassParticipants:
    return service.get_class_participants(class_id)


@router.get("/{session_id}", response_model=ClassSessionOut)
def get_session(
    session_id: str,
    service: SessionService = Depends(get_session_service),
) -> ClassSessionOut:
    return service.get_session(session_id)


@router.post("/", response_model=ClassSessionOut, status_code=status.HTTP_201_CREATED)
def create_session(
    payload: ClassSessionCreate,
    service: SessionService = Depends(get_session_service),
) -> ClassSessionOut:
    return service.create_session(payload)


@router.patch("/{session_id}", response_model=SessionUpdateOut)
def update_session(
    session_id: str,
    payload: ClassSessionUpdate,
    service: SessionService = Depends(get_session_service),
) -> SessionUpdateOut:
    return service.update_session(session_id, payload)


@router.delete("/{session_id}")
def delete_session(
    session_id: str,
    service: SessionService = Depends(get_session_service),
) -> dict:
    service.delete_session(session_id)
    return {"success": True}


@router.delete("/{session_id}/future", response_model=DeleteFutureSessionsOut)
def delete_future_sessions(
    session_id: str,
    service: SessionService = Depends(get_session_service),
) -> DeleteFutureSessionsOut:
    return service.delete_future_sessions(session_id)
