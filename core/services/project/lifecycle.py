from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, Mapping

from sqlalchemy.orm import Session

from core.domain import AuditAction, Capability, Project
from core.events.domain_events import domain_events
from core.exceptions import ValidationError
from core.interfaces import ProjectRepository
from core.services.audit.service import AuditService
from core.services.auth.authorization import current_principal, require_capability
from core.services.permissions import resolver
from core.services.permissions.presets import MANAGER_PRESET
from core.services.project.validation import ProjectValidationMixin

logger = logging.getLogger(__name__)


def _unique(ids: Iterable[str]) -> list[str]:
    seen: list[str] = []
    for item in ids:
        if item and item not in seen:
            seen.append(item)
    return seen


class ProjectLifecycleMixin(ProjectValidationMixin):
    _session: Session
    _project_repo: ProjectRepository
    _audit_service: AuditService

    def create_project(
        self,
        name: str,
        description: str = "",
        member_ids: Iterable[str] = (),
        *,
        owner_id: str | None = None,
        default_preset: str | None = None,
        member_presets: Mapping[str, str] | None = None,
    ) -> Project:
        principal = current_principal(self._user_session)
        if principal is not None:
            require_capability(
                self._user_session,
                self._registry.role_default_preset(principal.role).grants,
                Capability.CREATE_PROJECT,
                operation_label="create project",
            )
        self._validate_project_name(name)

        resolved_owner_id = owner_id or (principal.user_id if principal else None)
        if not resolved_owner_id:
            raise ValidationError("A project owner is required.", code="PROJECT_OWNER_REQUIRED")
        owner = self._require_active_user(resolved_owner_id)
        if default_preset:
            default_preset = self._registry.get(default_preset).key

        project = Project.create(
            name=name.strip(),
            owner_id=owner.id,
            description=(description or "").strip(),
            default_preset=default_preset,
        )
        # The creator keeps merge rights regardless of their global role.
        project.permissions[owner.id] = self._registry.get_preset(MANAGER_PRESET)
        presets = dict(member_presets or {})
        for user_id in _unique(member_ids):
            if user_id == owner.id:
                continue
            self._require_active_user(user_id)
            preset_key = presets.get(user_id)
            project.member_ids.append(user_id)
            project.permissions[user_id] = self._registry.get_preset(preset_key) if preset_key else {}

        violation = resolver.validate_mutation(
            project,
            project.permissions,
            self._roles_for(project.permissions),
            self._registry,
        )
        if violation is not None:
            self._reject(project, violation)

        try:
            self._project_repo.add(project)
            self._audit_service.record(
                AuditAction.PROJECT_CREATE,
                f'Created project "{project.name}"',
                f"Assigned to {len(project.member_ids)} member(s).",
                project_id=project.id,
            )
            self._session.commit()
        except Exception as e:
            self._session.rollback()
            logger.error("Error creating project: %s", e)
            raise

        logger.info("Created project %s - %s", project.id, project.name)
        domain_events.project_changed.emit(project.id)
        return project

    def _touch(self, project: Project) -> None:
        project.updated_at = datetime.now(timezone.utc)


__all__ = ["ProjectLifecycleMixin"]
