from __future__ import annotations

import logging
from typing import Iterable, List

from sqlalchemy.orm import Session

from core.domain import Capability, GlobalRole, PermissionMap, Project, UserAccount
from core.exceptions import NotFoundError, OwnerContinuityViolation, ValidationError
from core.interfaces import ProjectRepository, UserRepository
from core.services.auth.authorization import current_principal, require_capability
from core.services.auth.session import UserSessionContext
from core.services.permissions import resolver
from core.services.permissions.catalog import parse_capability
from core.services.permissions.presets import PresetRegistry

logger = logging.getLogger(__name__)


class ProjectQueryMixin:
    _session: Session
    _project_repo: ProjectRepository
    _user_repo: UserRepository
    _registry: PresetRegistry
    _user_session: UserSessionContext | None

    def get_project(self, project_id: str) -> Project:
        return self._require_project(project_id)

    def list_projects(self) -> List[Project]:
        return self._project_repo.list_all()

    def list_projects_for_user(self, user_id: str) -> List[Project]:
        return self._project_repo.list_for_member(user_id)

    def effective_permissions(self, user_id: str, project_id: str) -> PermissionMap:
        """Capability gates for view code; recomputed on every call."""
        project = self._require_project(project_id)
        self._require_user(user_id)
        return resolver.effective_for_member(
            project,
            user_id,
            self._roles_for(project.permissions),
            self._registry,
        )

    def preview_effective(
        self,
        project_id: str,
        user_id: str,
        override: dict[Capability | str, bool] | None = None,
    ) -> PermissionMap:
        """'Preview as user': resolve a hypothetical override without touching state."""
        project = self._require_project(project_id)
        user = self._require_user(user_id)
        if not project.is_member(user.id):
            raise NotFoundError(
                f"{user.name} is not a member of '{project.name}'.",
                code="MEMBER_NOT_FOUND",
            )
        proposed = project.override_for(user.id) if override is None else resolver.close_dependencies(
            {parse_capability(k): bool(v) for k, v in override.items()}
        )
        baseline = resolver.baseline_for(project, user.role, self._registry)
        return resolver.resolve_effective(baseline, proposed)

    def owner_equivalents(self, project_id: str) -> List[str]:
        project = self._require_project(project_id)
        roles = self._roles_for(project.permissions)
        return [
            user_id
            for user_id in project.member_ids
            if resolver.effective_for_member(project, user_id, roles, self._registry)[resolver.OWNER_CAPABILITY]
        ]

    def member_preset(self, project_id: str, user_id: str) -> str | None:
        project = self._require_project(project_id)
        return self._registry.match_preset(project.permissions.get(user_id))

    def _require_project(self, project_id: str) -> Project:
        project = self._project_repo.get(project_id)
        if not project:
            raise NotFoundError("Project not found.", code="PROJECT_NOT_FOUND")
        return project

    def _require_user(self, user_id: str) -> UserAccount:
        user = self._user_repo.get(user_id)
        if not user:
            raise NotFoundError("User not found.", code="USER_NOT_FOUND")
        return user

    def _require_active_user(self, user_id: str) -> UserAccount:
        user = self._require_user(user_id)
        if not user.is_active:
            raise ValidationError(f"{user.name} is deactivated.", code="USER_INACTIVE")
        return user

    def _roles_for(self, user_ids: Iterable[str]) -> dict[str, GlobalRole]:
        return {user_id: self._require_user(user_id).role for user_id in user_ids}

    def _require_project_capability(
        self,
        project: Project,
        capability: Capability,
        *,
        operation_label: str,
    ) -> None:
        principal = current_principal(self._user_session)
        if principal is None:
            return
        effective = resolver.effective_for_member(
            project,
            principal.user_id,
            {**self._roles_for(project.permissions), principal.user_id: principal.role},
            self._registry,
        )
        require_capability(self._user_session, effective, capability, operation_label=operation_label)

    def _reject(self, project: Project, violation: resolver.Violation) -> None:
        logger.warning("Rejected change to project %s: %s", project.id, violation.message)
        raise OwnerContinuityViolation(violation.message, code=violation.code)


__all__ = ["ProjectQueryMixin"]
