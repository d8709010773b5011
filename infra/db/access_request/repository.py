from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from core.domain import AccessRequest, AccessRequestStatus
from core.exceptions import NotFoundError
from core.interfaces import AccessRequestRepository
from infra.db.access_request.mapper import access_request_from_orm, access_request_to_orm
from infra.db.models import AccessRequestORM
from infra.db.timestamps import to_db


class SqlAlchemyAccessRequestRepository(AccessRequestRepository):
    def __init__(self, session: Session):
        self.session = session

    def add(self, request: AccessRequest) -> None:
        self.session.add(access_request_to_orm(request))

    def update(self, request: AccessRequest) -> None:
        obj = self.session.get(AccessRequestORM, request.id)
        if obj is None:
            raise NotFoundError("Access request not found.", code="ACCESS_REQUEST_NOT_FOUND")
        obj.status = request.status
        obj.decided_by_user_id = request.decided_by_user_id
        obj.decided_at = to_db(request.decided_at)
        obj.decision_note = request.decision_note

    def get(self, request_id: str) -> Optional[AccessRequest]:
        obj = self.session.get(AccessRequestORM, request_id)
        return access_request_from_orm(obj) if obj else None

    def list_requests(
        self,
        *,
        status: AccessRequestStatus | None = None,
        project_id: str | None = None,
    ) -> List[AccessRequest]:
        stmt = select(AccessRequestORM)
        if status is not None:
            stmt = stmt.where(AccessRequestORM.status == status)
        if project_id is not None:
            stmt = stmt.where(AccessRequestORM.project_id == project_id)
        stmt = stmt.order_by(AccessRequestORM.requested_at.desc())
        rows = self.session.execute(stmt).scalars().all()
        return [access_request_from_orm(row) for row in rows]


__all__ = ["SqlAlchemyAccessRequestRepository"]
