from __future__ import annotations

from core.domain import UserAccount
from infra.db.models import UserORM
from infra.db.timestamps import from_db, to_db


def user_to_orm(user: UserAccount) -> UserORM:
    return UserORM(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        manager_id=user.manager_id,
        is_active=user.is_active,
        created_at=to_db(user.created_at),
        updated_at=to_db(user.updated_at),
        version=getattr(user, "version", 1),
    )


def user_from_orm(obj: UserORM) -> UserAccount:
    return UserAccount(
        id=obj.id,
        name=obj.name,
        email=obj.email,
        role=obj.role,
        manager_id=obj.manager_id,
        is_active=obj.is_active,
        created_at=from_db(obj.created_at),
        updated_at=from_db(obj.updated_at),
        version=getattr(obj, "version", 1),
    )


__all__ = ["user_to_orm", "user_from_orm"]
