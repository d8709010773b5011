from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Sequence

from core.domain import AccessRequest, AccessRequestStatus, AuditLogEntry, Project, UserAccount


class UserRepository(ABC):
    @abstractmethod
    def add(self, user: UserAccount) -> None: ...

    @abstractmethod
    def update(self, user: UserAccount) -> None: ...

    @abstractmethod
    def get(self, user_id: str) -> Optional[UserAccount]: ...

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[UserAccount]: ...

    @abstractmethod
    def list_all(self) -> List[UserAccount]: ...


class ProjectRepository(ABC):
    @abstractmethod
    def add(self, project: Project) -> None: ...

    @abstractmethod
    def update(self, project: Project) -> None: ...

    @abstractmethod
    def get(self, project_id: str) -> Optional[Project]: ...

    @abstractmethod
    def get_by_name(self, name: str) -> Optional[Project]: ...

    @abstractmethod
    def list_all(self) -> List[Project]: ...

    @abstractmethod
    def list_for_member(self, user_id: str) -> List[Project]: ...


class AuditLogRepository(ABC):
    @abstractmethod
    def add(self, entry: AuditLogEntry) -> None: ...

    @abstractmethod
    def query(
        self,
        *,
        occurred_from: datetime | None = None,
        occurred_to: datetime | None = None,
        actor_ids: Sequence[str] | None = None,
        project_ids: Sequence[str] | None = None,
        action_types: Sequence[str] | None = None,
        limit: int | None = None,
    ) -> List[AuditLogEntry]: ...

    @abstractmethod
    def count(self) -> int: ...

    @abstractmethod
    def list_action_types(self) -> List[str]: ...


class AccessRequestRepository(ABC):
    @abstractmethod
    def add(self, request: AccessRequest) -> None: ...

    @abstractmethod
    def update(self, request: AccessRequest) -> None: ...

    @abstractmethod
    def get(self, request_id: str) -> Optional[AccessRequest]: ...

    @abstractmethod
    def list_requests(
        self,
        *,
        status: AccessRequestStatus | None = None,
        project_id: str | None = None,
    ) -> List[AccessRequest]: ...


__all__ = [
    "UserRepository",
    "ProjectRepository",
    "AuditLogRepository",
    "AccessRequestRepository",
]
