from infra.db.access_request.mapper import access_request_from_orm, access_request_to_orm
from infra.db.access_request.repository import SqlAlchemyAccessRequestRepository

__all__ = [
    "access_request_to_orm",
    "access_request_from_orm",
    "SqlAlchemyAccessRequestRepository",
]
