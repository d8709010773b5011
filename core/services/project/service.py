from __future__ import annotations

from sqlalchemy.orm import Session

from core.interfaces import ProjectRepository, UserRepository
from core.services.audit.service import AuditService
from core.services.auth.session import UserSessionContext
from core.services.permissions.presets import DEFAULT_REGISTRY, PresetRegistry
from core.services.project.lifecycle import ProjectLifecycleMixin
from core.services.project.membership import ProjectMembershipMixin
from core.services.project.permissions import ProjectPermissionMixin
from core.services.project.query import ProjectQueryMixin


class ProjectService(
    ProjectLifecycleMixin,
    ProjectMembershipMixin,
    ProjectPermissionMixin,
    ProjectQueryMixin,
):
    """Only write path into project membership and permission state.

    Every mutation validates against the resolver first; a rejected mutation
    leaves the store untouched and writes no audit entry.
    """

    def __init__(
        self,
        session: Session,
        project_repo: ProjectRepository,
        user_repo: UserRepository,
        audit_service: AuditService,
        user_session: UserSessionContext | None = None,
        registry: PresetRegistry = DEFAULT_REGISTRY,
    ):
        self._session: Session = session
        self._project_repo: ProjectRepository = project_repo
        self._user_repo: UserRepository = user_repo
        self._audit_service: AuditService = audit_service
        self._user_session: UserSessionContext | None = user_session
        self._registry: PresetRegistry = registry


__all__ = ["ProjectService"]
