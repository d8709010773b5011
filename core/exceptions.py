# core/exceptions.py

class DomainError(Exception):
    """Base class for domain-level errors."""
    def __init__(self, message: str,*, code: str | None = None):
        super().__init__(message)
        self.code = code or self.__class__.__name__


class ValidationError(DomainError):
    """Raised when data is invalid or violates constraints."""


class NotFoundError(DomainError):
    """Raised when an entity, preset or capability is not found."""


class BusinessRuleError(DomainError):
    """Raised when business rules are violated (e.g., permission denied)."""


class ConcurrencyError(DomainError):
    """Raised when optimistic locking detects a stale update."""


class OwnerContinuityViolation(BusinessRuleError):
    """Raised when a mutation would leave a project without a member able to approve/merge."""
    def __init__(self, message: str, *, code: str | None = None):
        super().__init__(message, code=code or "OWNER_CONTINUITY")


class UnknownCapabilityError(NotFoundError):
    """Raised when a capability key is not part of the catalog."""
    def __init__(self, message: str, *, code: str | None = None):
        super().__init__(message, code=code or "UNKNOWN_CAPABILITY")


class IncompletePresetError(DomainError):
    """Raised at registration time when a preset does not cover the whole catalog."""


class CapabilityCycleError(DomainError):
    """Raised when the capability implication graph contains a cycle."""
