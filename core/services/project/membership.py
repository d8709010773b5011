from __future__ import annotations

import logging
from typing import Iterable

from core.domain import AuditAction, Capability, Project
from core.events.domain_events import domain_events
from core.exceptions import BusinessRuleError, NotFoundError, ValidationError
from core.services.permissions import resolver
from core.services.project.lifecycle import _unique

logger = logging.getLogger(__name__)


class ProjectMembershipMixin:
    def add_members(
        self,
        project_id: str,
        user_ids: Iterable[str],
        *,
        preset: str | None = None,
    ) -> Project:
        project = self._require_project(project_id)
        self._require_project_capability(project, Capability.ASSIGN_USERS, operation_label="add members")
        new_users = [
            self._require_active_user(user_id)
            for user_id in _unique(user_ids)
            if user_id not in project.permissions
        ]
        if not new_users:
            raise ValidationError("No new members to add.", code="NO_NEW_MEMBERS")
        grants = self._registry.get_preset(preset) if preset else {}

        proposed = resolver.copy_overrides(project.permissions)
        for user in new_users:
            proposed[user.id] = dict(grants)
        violation = resolver.validate_mutation(project, proposed, self._roles_for(proposed), self._registry)
        if violation is not None:
            self._reject(project, violation)

        project.member_ids.extend(user.id for user in new_users)
        project.permissions = proposed
        self._touch(project)
        try:
            self._project_repo.update(project)
            for user in new_users:
                self._audit_service.record(
                    AuditAction.MEMBER_ADD,
                    "Assigned member",
                    f"{user.name} was added to '{project.name}'.",
                    project_id=project.id,
                )
            self._audit_service.record(
                AuditAction.PERMISSIONS_UPDATE,
                f'Updated permissions for "{project.name}"',
                f"Added {len(new_users)} member(s): {', '.join(u.name for u in new_users)}.",
                project_id=project.id,
            )
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("Added %d member(s) to project %s", len(new_users), project.id)
        domain_events.project_changed.emit(project.id)
        domain_events.permissions_changed.emit(project.id)
        return project

    def add_member(self, project_id: str, user_id: str, *, preset: str | None = None) -> Project:
        return self.add_members(project_id, [user_id], preset=preset)

    def remove_member(self, project_id: str, user_id: str) -> Project:
        project = self._require_project(project_id)
        self._require_project_capability(project, Capability.ASSIGN_USERS, operation_label="remove members")
        if user_id == project.owner_id:
            raise BusinessRuleError(
                "The project owner cannot be removed from the project.",
                code="OWNER_REMOVAL_FORBIDDEN",
            )
        if user_id not in project.permissions:
            raise NotFoundError("User is not a member of this project.", code="MEMBER_NOT_FOUND")
        user = self._require_user(user_id)

        proposed = resolver.copy_overrides(project.permissions)
        del proposed[user_id]
        violation = resolver.validate_mutation(project, proposed, self._roles_for(proposed), self._registry)
        if violation is not None:
            self._reject(project, violation)

        project.member_ids = [member_id for member_id in project.member_ids if member_id != user_id]
        project.permissions = proposed
        self._touch(project)
        try:
            self._project_repo.update(project)
            self._audit_service.record(
                AuditAction.MEMBER_REMOVE,
                "Removed member",
                f"{user.name} was removed from '{project.name}'.",
                project_id=project.id,
            )
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("Removed member %s from project %s", user_id, project.id)
        domain_events.project_changed.emit(project.id)
        domain_events.permissions_changed.emit(project.id)
        return project


__all__ = ["ProjectMembershipMixin"]
