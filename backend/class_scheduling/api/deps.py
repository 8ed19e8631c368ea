from collections.abc import Generator

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from class_scheduling.db.session import SessionLocal
from class_scheduling.db.tenant import TenantScope
from class_scheduling.services.sessions import SessionService


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_tenant(
    x_center_id: str | None = Header(default=None, alias="X-Center-Id"),
    db: Session = Depends(get_db),
) -> TenantScope:
    # TenantScope raises MissingTenantError (401) for an absent or blank id.
    return TenantScope(db, x_center_id)


def get_session_service(tenant: TenantScope = Depends(get_tenant)) -> SessionService:
    return SessionService(tenant)
