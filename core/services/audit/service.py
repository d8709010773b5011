from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from pathlib import Path
from typing import Iterable, List, Protocol, Sequence

from sqlalchemy.orm import Session

from core.domain import AuditAction, AuditLogEntry
from core.events.domain_events import domain_events
from core.interfaces import AuditLogRepository
from core.services.audit.export import export_csv, write_csv
from core.services.audit.impact import derive_action_type, impact_for
from core.services.auth.session import UserSessionContext

logger = logging.getLogger(__name__)


class Actor(Protocol):
    name: str
    email: str


@dataclass(frozen=True)
class AuditFilter:
    """Read-side filter; every supplied predicate must match.

    ``date`` bounds cover the whole day; ``datetime`` bounds are exact.
    """

    date_from: date | datetime | None = None
    date_to: date | datetime | None = None
    actor_ids: Sequence[str] | None = None
    project_ids: Sequence[str] | None = None
    action_types: Sequence[str] | None = None


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _lower_bound(value: date | datetime | None) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return _as_utc(value)
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def _upper_bound(value: date | datetime | None) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return _as_utc(value)
    return datetime.combine(value, time.max, tzinfo=timezone.utc)


def _actor_id(actor: object | None) -> str | None:
    if actor is None:
        return None
    return getattr(actor, "user_id", None) or getattr(actor, "id", None)


class AuditService:
    """Append-only ledger of permission and ownership changes."""

    def __init__(
        self,
        session: Session,
        audit_repo: AuditLogRepository,
        user_session: UserSessionContext | None = None,
    ):
        self._session = session
        self._audit_repo = audit_repo
        self._user_session = user_session

    def append(
        self,
        actor: Actor | None,
        action_label: str,
        detail: str,
        *,
        kind: AuditAction | None = None,
        project_id: str | None = None,
        commit: bool = True,
    ) -> AuditLogEntry:
        entry = AuditLogEntry.create(
            action=action_label,
            details=detail or "",
            action_type=kind.value if kind is not None else derive_action_type(action_label),
            impact=impact_for(action_label, kind),
            actor_user_id=_actor_id(actor),
            actor_name=getattr(actor, "name", None),
            actor_email=getattr(actor, "email", None),
            project_id=project_id,
        )
        if not commit:
            self._audit_repo.add(entry)
        else:
            try:
                self._audit_repo.add(entry)
                self._session.commit()
            except Exception:
                self._session.rollback()
                raise
            domain_events.audit_appended.emit(entry.id)
        logger.info("Audit %s [%s]: %s", entry.action, entry.impact.value, entry.details)
        return entry

    def record(
        self,
        kind: AuditAction,
        action_label: str,
        detail: str,
        *,
        project_id: str | None = None,
        commit: bool = False,
    ) -> AuditLogEntry:
        principal = self._user_session.principal if self._user_session else None
        return self.append(
            principal,
            action_label,
            detail,
            kind=kind,
            project_id=project_id,
            commit=commit,
        )

    def query(self, audit_filter: AuditFilter | None = None) -> List[AuditLogEntry]:
        f = audit_filter or AuditFilter()
        occurred_from = _lower_bound(f.date_from)
        occurred_to = _upper_bound(f.date_to)
        if occurred_from is not None and occurred_to is not None and occurred_from > occurred_to:
            return []
        return self._audit_repo.query(
            occurred_from=occurred_from,
            occurred_to=occurred_to,
            actor_ids=list(f.actor_ids) if f.actor_ids is not None else None,
            project_ids=list(f.project_ids) if f.project_ids is not None else None,
            action_types=list(f.action_types) if f.action_types is not None else None,
        )

    def list_recent(self, limit: int = 200, *, project_id: str | None = None) -> List[AuditLogEntry]:
        return self._audit_repo.query(
            project_ids=[project_id] if project_id is not None else None,
            limit=max(1, int(limit)),
        )

    def count(self) -> int:
        return self._audit_repo.count()

    def action_types(self) -> List[str]:
        return self._audit_repo.list_action_types()

    def export_csv(self, entries: Iterable[AuditLogEntry] | None = None) -> bytes:
        return export_csv(self.query() if entries is None else entries)

    def write_csv(self, output_path: str | Path, entries: Iterable[AuditLogEntry] | None = None) -> Path:
        return write_csv(self.query() if entries is None else entries, output_path)


__all__ = ["AuditService", "AuditFilter", "Actor"]
