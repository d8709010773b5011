from __future__ import annotations

from core.domain import AuditLogEntry, Impact
from infra.db.models import AuditLogORM
from infra.db.timestamps import from_db, to_db


def entry_to_orm(entry: AuditLogEntry) -> AuditLogORM:
    return AuditLogORM(
        id=entry.id,
        occurred_at=to_db(entry.occurred_at),
        actor_user_id=entry.actor_user_id,
        actor_name=entry.actor_name,
        actor_email=entry.actor_email,
        action=entry.action,
        action_type=entry.action_type,
        details=entry.details,
        impact=entry.impact.value,
        project_id=entry.project_id,
    )


def entry_from_orm(obj: AuditLogORM) -> AuditLogEntry:
    return AuditLogEntry(
        id=obj.id,
        occurred_at=from_db(obj.occurred_at),
        actor_user_id=obj.actor_user_id,
        actor_name=obj.actor_name,
        actor_email=obj.actor_email,
        action=obj.action,
        action_type=obj.action_type,
        details=obj.details or "",
        impact=Impact(obj.impact),
        project_id=obj.project_id,
    )


__all__ = ["entry_to_orm", "entry_from_orm"]
