from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy.orm import Session

from core.services.access_request import AccessRequestService
from core.services.audit import AuditService
from core.services.auth import UserService
from core.services.auth.session import UserSessionContext
from core.services.permissions.presets import DEFAULT_REGISTRY, PresetRegistry
from core.services.project import ProjectService
from infra.db.base import build_engine, build_session_factory
from infra.db.repositories import (
    SqlAlchemyAccessRequestRepository,
    SqlAlchemyAuditLogRepository,
    SqlAlchemyProjectRepository,
    SqlAlchemyUserRepository,
)
from infra.migrate import run_migrations
from infra.path import database_url


@dataclass(frozen=True)
class ServiceGraph:
    session: Session
    user_session: UserSessionContext
    registry: PresetRegistry
    audit_service: AuditService
    user_service: UserService
    project_service: ProjectService
    access_request_service: AccessRequestService

    def as_dict(self) -> dict[str, Any]:
        return {
            "session": self.session,
            "user_session": self.user_session,
            "registry": self.registry,
            "audit_service": self.audit_service,
            "user_service": self.user_service,
            "project_service": self.project_service,
            "access_request_service": self.access_request_service,
        }


def build_service_graph(
    session: Session,
    *,
    registry: PresetRegistry = DEFAULT_REGISTRY,
    bootstrap: bool = True,
) -> ServiceGraph:
    user_session = UserSessionContext()
    user_repo = SqlAlchemyUserRepository(session)
    project_repo = SqlAlchemyProjectRepository(session)
    audit_repo = SqlAlchemyAuditLogRepository(session)
    request_repo = SqlAlchemyAccessRequestRepository(session)

    audit_service = AuditService(
        session=session,
        audit_repo=audit_repo,
        user_session=user_session,
    )
    user_service = UserService(
        session=session,
        user_repo=user_repo,
        project_repo=project_repo,
        audit_service=audit_service,
        user_session=user_session,
        registry=registry,
    )
    if bootstrap:
        user_service.bootstrap_defaults()

    project_service = ProjectService(
        session,
        project_repo,
        user_repo,
        audit_service,
        user_session=user_session,
        registry=registry,
    )
    access_request_service = AccessRequestService(
        session,
        request_repo,
        project_repo,
        user_repo,
        audit_service,
        user_session=user_session,
        registry=registry,
    )
    return ServiceGraph(
        session=session,
        user_session=user_session,
        registry=registry,
        audit_service=audit_service,
        user_service=user_service,
        project_service=project_service,
        access_request_service=access_request_service,
    )


def open_service_graph(db_url: str | None = None) -> ServiceGraph:
    """Upgrade the database to head, then wire services over a fresh session."""
    url = db_url or database_url()
    run_migrations(url)
    session = build_session_factory(build_engine(url))()
    return build_service_graph(session)


__all__ = ["ServiceGraph", "build_service_graph", "open_service_graph"]
