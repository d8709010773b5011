from .access_request import AccessRequestService
from .audit import AuditFilter, AuditService
from .auth import UserService
from .project import ProjectService

__all__ = [
    "AccessRequestService",
    "AuditFilter",
    "AuditService",
    "ProjectService",
    "UserService",
]
