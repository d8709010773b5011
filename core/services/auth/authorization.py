from __future__ import annotations

from typing import Mapping

from core.domain.enums import Capability
from core.exceptions import BusinessRuleError
from core.services.auth.session import UserSessionContext, UserSessionPrincipal
from core.services.permissions.catalog import CATALOG


def current_principal(user_session: UserSessionContext | None) -> UserSessionPrincipal | None:
    return user_session.principal if user_session is not None else None


def _require_active(principal: UserSessionPrincipal, operation_label: str) -> None:
    if not principal.is_active:
        raise BusinessRuleError(
            f"Permission denied for {operation_label}. Account is deactivated.",
            code="PERMISSION_DENIED",
        )


def require_manager(
    user_session: UserSessionContext | None,
    *,
    operation_label: str,
) -> None:
    principal = current_principal(user_session)
    if principal is None:
        return
    _require_active(principal, operation_label)
    if principal.is_manager:
        return
    raise BusinessRuleError(
        f"Permission denied for {operation_label}. Manager role required.",
        code="PERMISSION_DENIED",
    )


def require_capability(
    user_session: UserSessionContext | None,
    effective: Mapping[Capability, bool] | None,
    capability: Capability,
    *,
    operation_label: str,
) -> None:
    principal = current_principal(user_session)
    if principal is None:
        return
    _require_active(principal, operation_label)
    granted = effective or {}
    if granted.get(capability) or granted.get(Capability.ADMIN_OVERRIDE):
        return
    raise BusinessRuleError(
        f"Permission denied for {operation_label}. Missing '{CATALOG[capability].label}'.",
        code="PERMISSION_DENIED",
    )


__all__ = ["current_principal", "require_manager", "require_capability"]
