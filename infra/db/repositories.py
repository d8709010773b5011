# infra/db/repositories.py
from infra.db.access_request.repository import SqlAlchemyAccessRequestRepository
from infra.db.audit.repository import SqlAlchemyAuditLogRepository
from infra.db.auth.repository import SqlAlchemyUserRepository
from infra.db.project.repository import SqlAlchemyProjectRepository

__all__ = [
    "SqlAlchemyAccessRequestRepository",
    "SqlAlchemyAuditLogRepository",
    "SqlAlchemyProjectRepository",
    "SqlAlchemyUserRepository",
]
