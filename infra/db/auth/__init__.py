from infra.db.auth.mapper import user_from_orm, user_to_orm
from infra.db.auth.repository import SqlAlchemyUserRepository

__all__ = [
    "user_to_orm",
    "user_from_orm",
    "SqlAlchemyUserRepository",
]
