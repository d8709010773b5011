from core.services.auth.service import UserService
from core.services.auth.session import UserSessionContext, UserSessionPrincipal

__all__ = ["UserService", "UserSessionPrincipal", "UserSessionContext"]
