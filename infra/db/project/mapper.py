from __future__ import annotations

import json
import logging
from typing import Iterable, List

from core.domain import Capability, PermissionMap, Project
from core.domain.identifiers import MEMBER_PREFIX, generate_id
from infra.db.models import ProjectMemberORM, ProjectORM
from infra.db.timestamps import from_db, to_db

logger = logging.getLogger(__name__)


def override_to_json(override: PermissionMap | None) -> str:
    payload = {Capability(key).value: bool(value) for key, value in (override or {}).items()}
    return json.dumps(payload, sort_keys=True)


def override_from_json(raw: str | None) -> PermissionMap:
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Discarding unreadable permission override: %r", raw)
        return {}
    if not isinstance(value, dict):
        return {}
    override: PermissionMap = {}
    for key, granted in value.items():
        try:
            override[Capability(key)] = bool(granted)
        except ValueError:
            logger.warning("Ignoring unknown stored capability '%s'", key)
    return override


def project_to_orm(project: Project) -> ProjectORM:
    return ProjectORM(
        id=project.id,
        name=project.name,
        description=project.description,
        owner_id=project.owner_id,
        default_preset=project.default_preset,
        created_at=to_db(project.created_at),
        updated_at=to_db(project.updated_at),
        version=getattr(project, "version", 1),
    )


def members_to_orm(project: Project) -> List[ProjectMemberORM]:
    return [
        ProjectMemberORM(
            id=generate_id(MEMBER_PREFIX),
            project_id=project.id,
            user_id=user_id,
            position=position,
            override_json=override_to_json(project.permissions.get(user_id)),
        )
        for position, user_id in enumerate(project.member_ids)
    ]


def project_from_orm(obj: ProjectORM, members: Iterable[ProjectMemberORM]) -> Project:
    ordered = sorted(members, key=lambda row: row.position)
    return Project(
        id=obj.id,
        name=obj.name,
        owner_id=obj.owner_id,
        description=obj.description or "",
        member_ids=[row.user_id for row in ordered],
        permissions={row.user_id: override_from_json(row.override_json) for row in ordered},
        default_preset=obj.default_preset,
        created_at=from_db(obj.created_at),
        updated_at=from_db(obj.updated_at),
        version=getattr(obj, "version", 1),
    )


__all__ = [
    "override_to_json",
    "override_from_json",
    "project_to_orm",
    "members_to_orm",
    "project_from_orm",
]
