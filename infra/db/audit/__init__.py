"""Append-only storage for the audit ledger."""
from infra.db.audit.repository import SqlAlchemyAuditLogRepository

__all__ = ["SqlAlchemyAuditLogRepository"]
