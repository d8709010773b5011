from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, List

from sqlalchemy.orm import Session

from core.domain import AccessRequest, AccessRequestStatus, AuditAction, Capability, Project
from core.events.domain_events import domain_events
from core.exceptions import BusinessRuleError, NotFoundError, OwnerContinuityViolation, ValidationError
from core.interfaces import AccessRequestRepository, ProjectRepository, UserRepository
from core.services.audit.service import AuditService
from core.services.auth.authorization import current_principal, require_capability
from core.services.auth.session import UserSessionContext
from core.services.permissions import resolver
from core.services.permissions.catalog import CATALOG, parse_capability
from core.services.permissions.presets import DEFAULT_REGISTRY, PresetRegistry

logger = logging.getLogger(__name__)


def _labels(capabilities: Iterable[Capability]) -> str:
    return ", ".join(CATALOG[c].label for c in capabilities)


class AccessRequestService:
    """Members ask for extra capabilities; approvers grant or deny them."""

    def __init__(
        self,
        session: Session,
        request_repo: AccessRequestRepository,
        project_repo: ProjectRepository,
        user_repo: UserRepository,
        audit_service: AuditService,
        user_session: UserSessionContext | None = None,
        registry: PresetRegistry = DEFAULT_REGISTRY,
    ):
        self._session = session
        self._request_repo = request_repo
        self._project_repo = project_repo
        self._user_repo = user_repo
        self._audit_service = audit_service
        self._user_session = user_session
        self._registry = registry

    def submit(
        self,
        project_id: str,
        capabilities: Iterable[Capability | str],
        justification: str = "",
        *,
        requested_by: str | None = None,
    ) -> AccessRequest:
        principal = current_principal(self._user_session)
        requester_id = requested_by or (principal.user_id if principal else None)
        if not requester_id:
            raise ValidationError("A requesting user is required.", code="REQUESTER_REQUIRED")
        project = self._require_project(project_id)
        if not project.is_member(requester_id):
            raise BusinessRuleError(
                "Only project members can request access.",
                code="REQUESTER_NOT_MEMBER",
            )
        requester = self._user_repo.get(requester_id)
        if requester is None:
            raise NotFoundError("User not found.", code="USER_NOT_FOUND")

        requested: list[Capability] = []
        for raw in capabilities:
            key = parse_capability(raw)
            if key not in requested:
                requested.append(key)
        effective = resolver.effective_for_member(project, requester.id, self._roles_for(project), self._registry)
        missing = [key for key in requested if not effective[key]]
        if not missing:
            raise ValidationError("Requested permissions are already granted.", code="NOTHING_TO_REQUEST")

        request = AccessRequest.create(
            project_id=project.id,
            requested_by_user_id=requester.id,
            capabilities=missing,
            justification=(justification or "").strip(),
        )
        try:
            self._request_repo.add(request)
            self._audit_service.record(
                AuditAction.ACCESS_REQUEST,
                "Requested access",
                f"{requester.name} requested {_labels(missing)} on '{project.name}'.",
                project_id=project.id,
            )
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        domain_events.access_requests_changed.emit(request.id)
        return request

    def list_requests(
        self,
        *,
        status: AccessRequestStatus | str | None = None,
        project_id: str | None = None,
    ) -> List[AccessRequest]:
        normalized: AccessRequestStatus | None
        if isinstance(status, AccessRequestStatus) or status is None:
            normalized = status
        else:
            try:
                normalized = AccessRequestStatus(str(status).strip().upper())
            except ValueError as exc:
                raise ValidationError(f"Unknown request status '{status}'.", code="INVALID_STATUS") from exc
        return self._request_repo.list_requests(status=normalized, project_id=project_id)

    def list_pending(self, *, project_id: str | None = None) -> List[AccessRequest]:
        return self.list_requests(status=AccessRequestStatus.PENDING, project_id=project_id)

    def approve(self, request_id: str, note: str | None = None) -> AccessRequest:
        request = self._require_pending(request_id)
        project = self._require_project(request.project_id)
        self._ensure_can_decide(request, project, operation_label="approve access request")
        requester = self._user_repo.get(request.requested_by_user_id)
        if requester is None:
            raise NotFoundError("User not found.", code="USER_NOT_FOUND")

        outcome = resolver.set_capabilities(
            project,
            requester.id,
            {key: True for key in request.capabilities},
            self._roles_for(project),
            self._registry,
        )
        if not outcome.ok:
            raise OwnerContinuityViolation(outcome.violation.message, code=outcome.violation.code)
        project.permissions = outcome.permissions
        project.updated_at = datetime.now(timezone.utc)

        self._decide(request, AccessRequestStatus.APPROVED, note)
        try:
            self._project_repo.update(project)
            self._request_repo.update(request)
            self._audit_service.record(
                AuditAction.ACCESS_APPROVE,
                f'Approved access request for "{project.name}"',
                f"Granted {_labels(request.capabilities)} to {requester.name}.",
                project_id=project.id,
            )
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("Approved access request %s", request.id)
        domain_events.access_requests_changed.emit(request.id)
        domain_events.permissions_changed.emit(project.id)
        return request

    def deny(self, request_id: str, note: str | None = None) -> AccessRequest:
        request = self._require_pending(request_id)
        project = self._require_project(request.project_id)
        self._ensure_can_decide(request, project, operation_label="deny access request")
        requester = self._user_repo.get(request.requested_by_user_id)
        requester_name = requester.name if requester else request.requested_by_user_id

        self._decide(request, AccessRequestStatus.DENIED, note)
        try:
            self._request_repo.update(request)
            self._audit_service.record(
                AuditAction.ACCESS_DENY,
                f'Denied access request for "{project.name}"',
                f"Declined {_labels(request.capabilities)} for {requester_name}.",
                project_id=project.id,
            )
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("Denied access request %s", request.id)
        domain_events.access_requests_changed.emit(request.id)
        return request

    def _decide(self, request: AccessRequest, status: AccessRequestStatus, note: str | None) -> None:
        principal = current_principal(self._user_session)
        request.status = status
        request.decided_at = datetime.now(timezone.utc)
        request.decided_by_user_id = principal.user_id if principal else None
        request.decision_note = (note or "").strip() or None

    def _require_pending(self, request_id: str) -> AccessRequest:
        request = self._request_repo.get(request_id)
        if request is None:
            raise NotFoundError("Access request not found.", code="ACCESS_REQUEST_NOT_FOUND")
        if request.status != AccessRequestStatus.PENDING:
            raise BusinessRuleError(
                "Access request is already decided.",
                code="ACCESS_REQUEST_ALREADY_DECIDED",
            )
        return request

    def _require_project(self, project_id: str) -> Project:
        project = self._project_repo.get(project_id)
        if project is None:
            raise NotFoundError("Project not found.", code="PROJECT_NOT_FOUND")
        return project

    def _roles_for(self, project: Project) -> dict:
        roles = {}
        for user_id in project.permissions:
            user = self._user_repo.get(user_id)
            if user is None:
                raise NotFoundError("User not found.", code="USER_NOT_FOUND")
            roles[user_id] = user.role
        return roles

    def _ensure_can_decide(self, request: AccessRequest, project: Project, *, operation_label: str) -> None:
        principal = current_principal(self._user_session)
        if principal is None:
            return
        if principal.user_id == request.requested_by_user_id:
            raise BusinessRuleError(
                "You cannot approve or deny your own access request.",
                code="ACCESS_REQUEST_SELF_DECISION_FORBIDDEN",
            )
        roles = {**self._roles_for(project), principal.user_id: principal.role}
        effective = resolver.effective_for_member(project, principal.user_id, roles, self._registry)
        require_capability(
            self._user_session,
            effective,
            Capability.APPROVE_ACCESS_REQUESTS,
            operation_label=operation_label,
        )


__all__ = ["AccessRequestService"]
