from __future__ import annotations

from typing import Any, TypeVar

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from class_scheduling.core.exceptions import MissingTenantError, ResourceNotFoundError

ModelT = TypeVar("ModelT")


class TenantScope:
    """Database access bound to one center.

    Engine code never builds a statement from a bare ``select``: every query
    starts from :meth:`select` (or joins through :meth:`owns`) so rows of other
    centers cannot leak into conflict results.
    """

    def __init__(self, db: Session, center_id: str | None) -> None:
        if not center_id or not center_id.strip():
            raise MissingTenantError()
        self.db = db
        self.center_id = center_id.strip()

    def owns(self, model: Any):
        return model.center_id == self.center_id

    def select(self, model: Any, *columns: Any) -> Select:
        stmt = select(*columns) if columns else select(model)
        return stmt.where(self.owns(model))

    def get(self, model: type[ModelT], record_id: str) -> ModelT | None:
        stmt = self.select(model).where(model.id == record_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_or_raise(self, model: type[ModelT], record_id: str, resource_type: str) -> ModelT:
        record = self.get(model, record_id)
        if record is None:
            raise ResourceNotFoundError(resource_type, record_id)
        return record

    def add(self, record: ModelT) -> ModelT:
        record.center_id = self.center_id
        self.db.add(record)
        return record

    def add_all(self, records: list[Any]) -> None:
        for record in records:
            record.center_id = self.center_id
        self.db.add_all(records)
