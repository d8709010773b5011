from __future__ import annotations

from typing import List

from core.domain import GlobalRole, UserAccount
from core.exceptions import NotFoundError
from core.interfaces import UserRepository


class UserQueryMixin:
    _user_repo: UserRepository

    def get_user(self, user_id: str) -> UserAccount:
        return self._require_user(user_id)

    def list_users(self) -> List[UserAccount]:
        return self._user_repo.list_all()

    def list_managers(self, *, active_only: bool = True) -> List[UserAccount]:
        return [
            user
            for user in self._user_repo.list_all()
            if user.role == GlobalRole.MANAGER and (user.is_active or not active_only)
        ]

    def list_reports(self, manager_id: str) -> List[UserAccount]:
        return [user for user in self._user_repo.list_all() if user.manager_id == manager_id]

    def _require_user(self, user_id: str) -> UserAccount:
        user = self._user_repo.get(user_id)
        if not user:
            raise NotFoundError("User not found.", code="USER_NOT_FOUND")
        return user


__all__ = ["UserQueryMixin"]
