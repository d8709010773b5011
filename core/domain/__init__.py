from core.domain.access_request import AccessRequest
from core.domain.audit import AuditLogEntry
from core.domain.enums import (
    AccessRequestStatus,
    AuditAction,
    Capability,
    CapabilityCategory,
    GlobalRole,
    Impact,
)
from core.domain.identifiers import generate_id
from core.domain.project import PermissionMap, Project
from core.domain.user import UserAccount

__all__ = [
    "generate_id",
    "GlobalRole",
    "Capability",
    "CapabilityCategory",
    "Impact",
    "AuditAction",
    "AccessRequestStatus",
    "UserAccount",
    "Project",
    "PermissionMap",
    "AuditLogEntry",
    "AccessRequest",
]
