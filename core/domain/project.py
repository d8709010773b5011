from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from core.domain.enums import Capability
from core.domain.identifiers import PROJECT_PREFIX, generate_id

# Complete map (every catalog key) or partial override, depending on context.
PermissionMap = Dict[Capability, bool]


@dataclass
class Project:
    id: str
    name: str
    owner_id: str
    description: str = ""
    member_ids: List[str] = field(default_factory=list)
    permissions: Dict[str, PermissionMap] = field(default_factory=dict)
    default_preset: Optional[str] = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    version: int = 1

    def is_member(self, user_id: str) -> bool:
        return user_id in self.member_ids

    def override_for(self, user_id: str) -> PermissionMap:
        return dict(self.permissions.get(user_id) or {})

    @staticmethod
    def create(
        name: str,
        owner_id: str,
        description: str = "",
        default_preset: str | None = None,
    ) -> "Project":
        now = datetime.now(timezone.utc)
        return Project(
            id=generate_id(PROJECT_PREFIX),
            name=name,
            owner_id=owner_id,
            description=description,
            member_ids=[owner_id],
            permissions={owner_id: {}},
            default_preset=default_preset,
            created_at=now,
            updated_at=now,
        )


__all__ = ["Project", "PermissionMap"]
