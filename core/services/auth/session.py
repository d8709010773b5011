from __future__ import annotations

from dataclasses import dataclass

from core.domain.enums import GlobalRole


@dataclass(frozen=True)
class UserSessionPrincipal:
    user_id: str
    name: str
    email: str
    role: GlobalRole
    is_active: bool = True

    @property
    def is_manager(self) -> bool:
        return self.role == GlobalRole.MANAGER


class UserSessionContext:
    def __init__(self):
        self._principal: UserSessionPrincipal | None = None

    @property
    def principal(self) -> UserSessionPrincipal | None:
        return self._principal

    def set_principal(self, principal: UserSessionPrincipal) -> None:
        self._principal = principal

    def clear(self) -> None:
        self._principal = None

    def is_authenticated(self) -> bool:
        return self._principal is not None


__all__ = ["UserSessionPrincipal", "UserSessionContext"]
