from core.services.access_request.service import AccessRequestService

__all__ = ["AccessRequestService"]
