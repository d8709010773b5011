from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from core.domain.enums import Impact
from core.domain.identifiers import AUDIT_PREFIX, generate_id

SYSTEM_ACTOR_NAME = "System"


@dataclass(frozen=True)
class AuditLogEntry:
    id: str
    occurred_at: datetime
    actor_user_id: str | None
    actor_name: str | None
    actor_email: str | None
    action: str
    action_type: str
    details: str
    impact: Impact
    project_id: str | None = None

    @property
    def actor_display_name(self) -> str:
        return self.actor_name or SYSTEM_ACTOR_NAME

    @staticmethod
    def create(
        action: str,
        details: str,
        *,
        action_type: str,
        impact: Impact,
        actor_user_id: str | None = None,
        actor_name: str | None = None,
        actor_email: str | None = None,
        project_id: str | None = None,
    ) -> "AuditLogEntry":
        return AuditLogEntry(
            id=generate_id(AUDIT_PREFIX),
            occurred_at=datetime.now(timezone.utc),
            actor_user_id=actor_user_id,
            actor_name=actor_name,
            actor_email=actor_email,
            action=action,
            action_type=action_type,
            details=details,
            impact=impact,
            project_id=project_id,
        )


__all__ = ["AuditLogEntry", "SYSTEM_ACTOR_NAME"]
