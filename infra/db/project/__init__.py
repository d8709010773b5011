from infra.db.project.mapper import members_to_orm, project_from_orm, project_to_orm
from infra.db.project.repository import SqlAlchemyProjectRepository

__all__ = [
    "project_to_orm",
    "project_from_orm",
    "members_to_orm",
    "SqlAlchemyProjectRepository",
]
