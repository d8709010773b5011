from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.domain import AuditAction, GlobalRole, UserAccount
from core.events.domain_events import domain_events
from core.exceptions import BusinessRuleError, OwnerContinuityViolation, ValidationError
from core.interfaces import ProjectRepository, UserRepository
from core.services.auth.authorization import require_manager
from core.services.auth.query import UserQueryMixin
from core.services.auth.session import UserSessionContext, UserSessionPrincipal
from core.services.auth.validation import UserValidationMixin
from core.services.permissions import resolver
from core.services.permissions.presets import DEFAULT_REGISTRY, PresetRegistry

if TYPE_CHECKING:
    from core.services.audit.service import AuditService

logger = logging.getLogger(__name__)


def _parse_role(role: GlobalRole | str) -> GlobalRole:
    if isinstance(role, GlobalRole):
        return role
    try:
        return GlobalRole((role or "").strip().lower())
    except ValueError as exc:
        raise ValidationError(f"Unknown global role '{role}'.", code="INVALID_ROLE") from exc


class UserService(UserQueryMixin, UserValidationMixin):
    """Onboarding and global-role administration."""

    def __init__(
        self,
        session: Session,
        user_repo: UserRepository,
        project_repo: ProjectRepository,
        audit_service: AuditService,
        user_session: UserSessionContext | None = None,
        registry: PresetRegistry = DEFAULT_REGISTRY,
    ):
        self._session: Session = session
        self._user_repo: UserRepository = user_repo
        self._project_repo: ProjectRepository = project_repo
        self._audit_service: AuditService = audit_service
        self._user_session: UserSessionContext | None = user_session
        self._registry: PresetRegistry = registry

    def bootstrap_defaults(self) -> UserAccount:
        managers = self.list_managers()
        if managers:
            return managers[0]
        name = os.getenv("AH_ADMIN_NAME", "Administrator").strip() or "Administrator"
        email = os.getenv("AH_ADMIN_EMAIL", "admin@example.com")
        existing = self._user_repo.get_by_email(self._normalize_email(email))
        if existing is not None:
            return self.change_global_role(existing.id, GlobalRole.MANAGER, bypass_permission=True)
        return self.register_user(name, email, GlobalRole.MANAGER, bypass_permission=True)

    def register_user(
        self,
        name: str,
        email: str,
        role: GlobalRole | str = GlobalRole.EMPLOYEE,
        manager_id: str | None = None,
        *,
        bypass_permission: bool = False,
    ) -> UserAccount:
        if not bypass_permission:
            require_manager(self._user_session, operation_label="register user")
        normalized_name = self._normalize_name(name)
        normalized_email = self._normalize_email(email)
        resolved_role = _parse_role(role)
        self._validate_name(normalized_name)
        self._validate_email(normalized_email)
        if self._user_repo.get_by_email(normalized_email):
            raise ValidationError("Email already exists.", code="EMAIL_EXISTS")
        if resolved_role == GlobalRole.EMPLOYEE:
            manager = self._require_user(manager_id) if manager_id else None
            if manager is None or not manager.is_manager or not manager.is_active:
                raise ValidationError(
                    "An employee must be assigned to an active manager.",
                    code="MANAGER_REQUIRED",
                )
        else:
            manager_id = None

        user = UserAccount.create(
            name=normalized_name,
            email=normalized_email,
            role=resolved_role,
            manager_id=manager_id,
        )
        try:
            self._user_repo.add(user)
            self._audit_service.record(
                AuditAction.USER_REGISTER,
                "Registered user",
                f"{user.name} joined as {user.role.value}.",
            )
            self._session.commit()
        except IntegrityError as exc:
            self._session.rollback()
            raise ValidationError(
                "Failed to create user due to data conflict.",
                code="USER_CREATE_CONFLICT",
            ) from exc
        except Exception:
            self._session.rollback()
            raise

        logger.info("Registered user %s (%s)", user.id, user.role.value)
        domain_events.user_changed.emit(user.id)
        return user

    def change_global_role(
        self,
        user_id: str,
        role: GlobalRole | str,
        *,
        manager_id: str | None = None,
        bypass_permission: bool = False,
    ) -> UserAccount:
        """Switch a user's global role.

        Demotion to employee needs ``manager_id`` (an active manager other than
        the user); promotion clears the reporting line.
        """
        if not bypass_permission:
            require_manager(self._user_session, operation_label="change global role")
        user = self._require_user(user_id)
        new_role = _parse_role(role)
        if user.role == new_role:
            return user
        if user.is_manager:
            if user.is_active:
                self._ensure_not_last_manager(user, action="demoted")
            self._ensure_no_reports(user, action="demoted")
        if new_role == GlobalRole.EMPLOYEE:
            new_manager_id = self._require_reporting_manager(user, manager_id)
        else:
            new_manager_id = None

        affected = self._project_repo.list_for_member(user.id)
        for project in affected:
            roles = {member_id: self._require_user(member_id).role for member_id in project.permissions}
            roles[user.id] = new_role
            violation = resolver.validate_mutation(project, project.permissions, roles, self._registry)
            if violation is not None:
                logger.warning("Rejected role change for %s: %s", user.id, violation.message)
                raise OwnerContinuityViolation(violation.message, code=violation.code)

        previous = user.role
        user.role = new_role
        user.manager_id = new_manager_id
        user.updated_at = datetime.now(timezone.utc)
        try:
            self._user_repo.update(user)
            self._audit_service.record(
                AuditAction.ROLE_CHANGE,
                "Changed global role",
                f"{user.name}: {previous.value} -> {new_role.value}.",
            )
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("Changed role of %s from %s to %s", user.id, previous.value, new_role.value)
        self._refresh_principal(user)
        domain_events.user_changed.emit(user.id)
        for project in affected:
            domain_events.permissions_changed.emit(project.id)
        return user

    def set_user_active(self, user_id: str, is_active: bool) -> UserAccount:
        require_manager(self._user_session, operation_label="set user active")
        user = self._require_user(user_id)
        if user.is_active == bool(is_active):
            return user
        if not is_active and user.is_manager:
            self._ensure_not_last_manager(user, action="deactivated")
            self._ensure_no_reports(user, action="deactivated")

        user.is_active = bool(is_active)
        user.updated_at = datetime.now(timezone.utc)
        try:
            self._user_repo.update(user)
            self._audit_service.record(
                AuditAction.USER_SET_ACTIVE,
                "Reactivated user" if user.is_active else "Deactivated user",
                f"{user.name} is now {'active' if user.is_active else 'inactive'}.",
            )
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        self._refresh_principal(user)
        domain_events.user_changed.emit(user.id)
        return user

    def build_principal(self, user: UserAccount) -> UserSessionPrincipal:
        return UserSessionPrincipal(
            user_id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            is_active=user.is_active,
        )

    def _refresh_principal(self, user: UserAccount) -> None:
        # the acting user's own role or status changed; authorize with the new state
        principal = self._user_session.principal if self._user_session else None
        if principal is not None and principal.user_id == user.id:
            self._user_session.set_principal(self.build_principal(user))

    def _require_reporting_manager(self, user: UserAccount, manager_id: str | None) -> str:
        manager = self._require_user(manager_id) if manager_id else None
        if manager is None or manager.id == user.id or not manager.is_manager or not manager.is_active:
            raise ValidationError(
                "An employee must be assigned to an active manager.",
                code="MANAGER_REQUIRED",
            )
        return manager.id

    def _ensure_no_reports(self, user: UserAccount, *, action: str) -> None:
        if self.list_reports(user.id):
            raise BusinessRuleError(
                f"{user.name} still has direct reports and cannot be {action}. Reassign them first.",
                code="MANAGER_HAS_REPORTS",
            )

    def _ensure_not_last_manager(self, user: UserAccount, *, action: str) -> None:
        others = [m for m in self.list_managers() if m.id != user.id]
        if not others:
            raise BusinessRuleError(
                f"The last active manager cannot be {action}.",
                code="LAST_MANAGER",
            )


__all__ = ["UserService"]
