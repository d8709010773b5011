from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List

from core.domain.enums import AccessRequestStatus, Capability
from core.domain.identifiers import REQUEST_PREFIX, generate_id


@dataclass
class AccessRequest:
    id: str
    project_id: str
    requested_by_user_id: str
    capabilities: List[Capability]
    justification: str = ""
    status: AccessRequestStatus = AccessRequestStatus.PENDING
    requested_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    decided_by_user_id: str | None = None
    decided_at: datetime | None = None
    decision_note: str | None = None

    @staticmethod
    def create(
        project_id: str,
        requested_by_user_id: str,
        capabilities: List[Capability],
        justification: str = "",
    ) -> "AccessRequest":
        return AccessRequest(
            id=generate_id(REQUEST_PREFIX),
            project_id=project_id,
            requested_by_user_id=requested_by_user_id,
            capabilities=list(capabilities),
            justification=justification,
        )


__all__ = ["AccessRequest"]
