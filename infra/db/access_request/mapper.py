from __future__ import annotations

import json
from typing import List

from core.domain import AccessRequest, Capability
from infra.db.models import AccessRequestORM
from infra.db.timestamps import from_db, to_db


def _capabilities_to_json(capabilities: List[Capability]) -> str:
    return json.dumps([Capability(key).value for key in capabilities])


def _capabilities_from_json(raw: str | None) -> List[Capability]:
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        return []
    if not isinstance(value, list):
        return []
    keys: List[Capability] = []
    for item in value:
        try:
            keys.append(Capability(item))
        except ValueError:
            continue
    return keys


def access_request_to_orm(request: AccessRequest) -> AccessRequestORM:
    return AccessRequestORM(
        id=request.id,
        project_id=request.project_id,
        requested_by_user_id=request.requested_by_user_id,
        capabilities_json=_capabilities_to_json(request.capabilities),
        justification=request.justification,
        status=request.status,
        requested_at=to_db(request.requested_at),
        decided_by_user_id=request.decided_by_user_id,
        decided_at=to_db(request.decided_at),
        decision_note=request.decision_note,
    )


def access_request_from_orm(obj: AccessRequestORM) -> AccessRequest:
    return AccessRequest(
        id=obj.id,
        project_id=obj.project_id,
        requested_by_user_id=obj.requested_by_user_id,
        capabilities=_capabilities_from_json(obj.capabilities_json),
        justification=obj.justification or "",
        status=obj.status,
        requested_at=from_db(obj.requested_at),
        decided_by_user_id=obj.decided_by_user_id,
        decided_at=from_db(obj.decided_at),
        decision_note=obj.decision_note,
    )


__all__ = ["access_request_to_orm", "access_request_from_orm"]
