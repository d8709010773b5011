from __future__ import annotations

from core.exceptions import ValidationError
from core.interfaces import ProjectRepository


class ProjectValidationMixin:
    _project_repo: ProjectRepository

    def _validate_project_name(self, name: str) -> None:
        if not name or not name.strip():
            raise ValidationError("Project name is required.", code="PROJECT_NAME_EMPTY")
        if self._project_repo.get_by_name(name.strip()) is not None:
            raise ValidationError(
                "A project with this name already exists. Please choose a different name.",
                code="PROJECT_NAME_DUPLICATE",
            )


__all__ = ["ProjectValidationMixin"]
