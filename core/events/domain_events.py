"""Track changes in projects, memberships, permissions and the audit ledger."""
from core.events.signal import Signal


class DomainEvents:
    def __init__(self) -> None:
        self.project_changed: Signal[str] = Signal()          # project_id
        self.permissions_changed: Signal[str] = Signal()      # project_id
        self.user_changed: Signal[str] = Signal()             # user_id
        self.audit_appended: Signal[str] = Signal()           # entry id
        self.access_requests_changed: Signal[str] = Signal()  # request id


# SINGLE global instance
domain_events = DomainEvents()
