from __future__ import annotations

from enum import Enum


class GlobalRole(str, Enum):
    MANAGER = "manager"
    EMPLOYEE = "employee"


class Capability(str, Enum):
    VIEW_ASSIGNED_PROJECTS = "viewAssignedProjects"
    AUTOMATE_TEST_CASES = "automateTestCases"
    CREATE_SRC_STRUCTURE = "createSrcStructure"
    RUN_PIPELINES = "runPipelines"
    APPROVE_MERGE_PRS = "approveMergePRs"
    COMMIT_AND_PUBLISH = "commitAndPublish"
    CREATE_PROJECT = "createProject"
    EDIT_PROJECT_SETTINGS = "editProjectSettings"
    ASSIGN_USERS = "assignUsers"
    SYNC_TMT = "syncTMT"
    APPROVE_ACCESS_REQUESTS = "approveAccessRequests"
    ADMIN_OVERRIDE = "adminOverride"


class CapabilityCategory(str, Enum):
    PROJECT = "Project"
    MANAGEMENT = "Management"
    ADMIN = "Admin"


class Impact(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class AuditAction(str, Enum):
    PROJECT_CREATE = "project.create"
    MEMBER_ADD = "member.add"
    MEMBER_REMOVE = "member.remove"
    PERMISSIONS_UPDATE = "permissions.update"
    ROLE_CHANGE = "user.role_change"
    USER_REGISTER = "user.register"
    USER_SET_ACTIVE = "user.set_active"
    ACCESS_REQUEST = "access_request.submit"
    ACCESS_APPROVE = "access_request.approve"
    ACCESS_DENY = "access_request.deny"

    @property
    def impact(self) -> Impact:
        return _ACTION_IMPACT.get(self, Impact.LOW)


_ACTION_IMPACT: dict[AuditAction, Impact] = {
    AuditAction.PROJECT_CREATE: Impact.HIGH,
    AuditAction.PERMISSIONS_UPDATE: Impact.MEDIUM,
    AuditAction.ROLE_CHANGE: Impact.MEDIUM,
    AuditAction.ACCESS_APPROVE: Impact.MEDIUM,
    AuditAction.ACCESS_DENY: Impact.MEDIUM,
}


class AccessRequestStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    DENIED = "DENIED"


__all__ = [
    "GlobalRole",
    "Capability",
    "CapabilityCategory",
    "Impact",
    "AuditAction",
    "AccessRequestStatus",
]
