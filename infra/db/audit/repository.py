from __future__ import annotations

from datetime import datetime
from typing import List, Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from core.domain import AuditLogEntry
from core.interfaces import AuditLogRepository
from infra.db.audit.mapper import entry_from_orm, entry_to_orm
from infra.db.models import AuditLogORM
from infra.db.timestamps import to_db


class SqlAlchemyAuditLogRepository(AuditLogRepository):
    """Insert and read only; ledger rows are never updated or deleted."""

    def __init__(self, session: Session):
        self.session = session

    def add(self, entry: AuditLogEntry) -> None:
        self.session.add(entry_to_orm(entry))

    def query(
        self,
        *,
        occurred_from: datetime | None = None,
        occurred_to: datetime | None = None,
        actor_ids: Sequence[str] | None = None,
        project_ids: Sequence[str] | None = None,
        action_types: Sequence[str] | None = None,
        limit: int | None = None,
    ) -> List[AuditLogEntry]:
        # Pending entries of the current transaction are part of the view.
        self.session.flush()
        stmt = select(AuditLogORM)
        if occurred_from is not None:
            stmt = stmt.where(AuditLogORM.occurred_at >= to_db(occurred_from))
        if occurred_to is not None:
            stmt = stmt.where(AuditLogORM.occurred_at <= to_db(occurred_to))
        if actor_ids is not None:
            stmt = stmt.where(AuditLogORM.actor_user_id.in_(list(actor_ids)))
        if project_ids is not None:
            stmt = stmt.where(AuditLogORM.project_id.in_(list(project_ids)))
        if action_types is not None:
            stmt = stmt.where(AuditLogORM.action_type.in_(list(action_types)))
        stmt = stmt.order_by(AuditLogORM.occurred_at.desc(), AuditLogORM.seq.desc())
        if limit is not None:
            stmt = stmt.limit(max(1, int(limit)))
        rows = self.session.execute(stmt).scalars().all()
        return [entry_from_orm(row) for row in rows]

    def count(self) -> int:
        self.session.flush()
        return int(self.session.execute(select(func.count()).select_from(AuditLogORM)).scalar_one())

    def list_action_types(self) -> List[str]:
        self.session.flush()
        stmt = select(AuditLogORM.action_type).distinct().order_by(AuditLogORM.action_type)
        return list(self.session.execute(stmt).scalars().all())


__all__ = ["SqlAlchemyAuditLogRepository"]
