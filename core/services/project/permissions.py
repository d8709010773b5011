from __future__ import annotations

import logging
from typing import Mapping

from core.domain import AuditAction, Capability, Project
from core.events.domain_events import domain_events
from core.exceptions import BusinessRuleError
from core.services.auth.authorization import current_principal
from core.services.permissions import resolver
from core.services.permissions.catalog import CATALOG, parse_capability

logger = logging.getLogger(__name__)


class ProjectPermissionMixin:
    def set_capability(
        self,
        project_id: str,
        user_id: str,
        capability: Capability | str,
        value: bool,
    ) -> Project:
        key = parse_capability(capability)
        project = self._require_project(project_id)
        self._require_project_capability(project, Capability.ASSIGN_USERS, operation_label="change permissions")
        user = self._require_user(user_id)
        outcome = resolver.set_capability(
            project,
            user.id,
            key,
            value,
            self._roles_for(project.permissions),
            self._registry,
        )
        change = "granted" if value else "revoked"
        return self._commit_permissions(
            project,
            outcome,
            f"Changed permissions for {user.name}: {CATALOG[key].label} {change}.",
        )

    def apply_preset(self, project_id: str, user_id: str, preset_key: str) -> Project:
        project = self._require_project(project_id)
        self._require_project_capability(project, Capability.ASSIGN_USERS, operation_label="apply preset")
        principal = current_principal(self._user_session)
        if principal is not None and principal.user_id == user_id:
            raise BusinessRuleError(
                "You cannot apply a preset to your own permissions.",
                code="SELF_PRESET_FORBIDDEN",
            )
        user = self._require_user(user_id)
        preset = self._registry.get(preset_key)
        outcome = resolver.apply_preset(
            project,
            user.id,
            preset.key,
            self._roles_for(project.permissions),
            self._registry,
        )
        return self._commit_permissions(
            project,
            outcome,
            f"Applied preset '{preset.name}' to {user.name}.",
        )

    def update_permissions(
        self,
        project_id: str,
        overrides: Mapping[str, Mapping[Capability | str, bool]],
    ) -> Project:
        """Save an edited member -> override map in one step."""
        project = self._require_project(project_id)
        self._require_project_capability(project, Capability.ASSIGN_USERS, operation_label="update permissions")
        outcome = resolver.replace_overrides(
            project,
            overrides,
            self._roles_for(project.permissions),
            self._registry,
        )
        return self._commit_permissions(project, outcome, "Changed permissions for project members.")

    def _commit_permissions(
        self,
        project: Project,
        outcome: resolver.ResolveOutcome,
        detail: str,
    ) -> Project:
        if not outcome.ok:
            self._reject(project, outcome.violation)

        project.permissions = outcome.permissions
        self._touch(project)
        try:
            self._project_repo.update(project)
            self._audit_service.record(
                AuditAction.PERMISSIONS_UPDATE,
                f'Updated permissions for "{project.name}"',
                detail,
                project_id=project.id,
            )
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("Updated permissions for project %s: %s", project.id, detail)
        domain_events.permissions_changed.emit(project.id)
        return project


__all__ = ["ProjectPermissionMixin"]
