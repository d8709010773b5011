from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from core.domain.enums import GlobalRole
from core.domain.identifiers import USER_PREFIX, generate_id


@dataclass
class UserAccount:
    id: str
    name: str
    email: str
    role: GlobalRole = GlobalRole.EMPLOYEE
    manager_id: Optional[str] = None
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None
    version: int = 1

    @property
    def is_manager(self) -> bool:
        return self.role == GlobalRole.MANAGER

    @staticmethod
    def create(
        name: str,
        email: str,
        role: GlobalRole = GlobalRole.EMPLOYEE,
        manager_id: str | None = None,
        is_active: bool = True,
    ) -> "UserAccount":
        now = datetime.now(timezone.utc)
        return UserAccount(
            id=generate_id(USER_PREFIX),
            name=name,
            email=email,
            role=role,
            manager_id=manager_id,
            is_active=is_active,
            created_at=now,
            updated_at=now,
            version=1,
        )


__all__ = ["UserAccount"]
