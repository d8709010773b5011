from __future__ import annotations

from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from core.domain import Project
from core.interfaces import ProjectRepository
from infra.db.models import ProjectMemberORM, ProjectORM
from infra.db.optimistic import update_with_version_check
from infra.db.project.mapper import members_to_orm, project_from_orm, project_to_orm
from infra.db.timestamps import to_db


class SqlAlchemyProjectRepository(ProjectRepository):
    def __init__(self, session: Session):
        self.session = session

    def add(self, project: Project) -> None:
        self.session.add(project_to_orm(project))
        self.session.add_all(members_to_orm(project))

    def update(self, project: Project) -> None:
        project.version = update_with_version_check(
            self.session,
            ProjectORM,
            project.id,
            getattr(project, "version", 1),
            {
                "name": project.name,
                "description": project.description,
                "default_preset": project.default_preset,
                "updated_at": to_db(project.updated_at),
            },
            entity="Project",
            code_prefix="PROJECT",
        )
        # Member rows are rewritten whole so membership and overrides never diverge.
        self.session.execute(delete(ProjectMemberORM).where(ProjectMemberORM.project_id == project.id))
        self.session.add_all(members_to_orm(project))

    def get(self, project_id: str) -> Optional[Project]:
        obj = self.session.get(ProjectORM, project_id)
        return self._load(obj) if obj else None

    def get_by_name(self, name: str) -> Optional[Project]:
        stmt = select(ProjectORM).where(func.lower(ProjectORM.name) == (name or "").strip().lower())
        obj = self.session.execute(stmt).scalars().first()
        return self._load(obj) if obj else None

    def list_all(self) -> List[Project]:
        rows = self.session.execute(select(ProjectORM).order_by(ProjectORM.name)).scalars().all()
        return [self._load(row) for row in rows]

    def list_for_member(self, user_id: str) -> List[Project]:
        stmt = (
            select(ProjectORM)
            .join(ProjectMemberORM, ProjectMemberORM.project_id == ProjectORM.id)
            .where(ProjectMemberORM.user_id == user_id)
            .order_by(ProjectORM.name)
        )
        rows = self.session.execute(stmt).scalars().all()
        return [self._load(row) for row in rows]

    def _load(self, obj: ProjectORM) -> Project:
        stmt = select(ProjectMemberORM).where(ProjectMemberORM.project_id == obj.id)
        members = self.session.execute(stmt).scalars().all()
        return project_from_orm(obj, members)


__all__ = ["SqlAlchemyProjectRepository"]
