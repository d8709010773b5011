from __future__ import annotations

import re

from core.exceptions import ValidationError


_EMAIL_RE = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")
_MIN_NAME_LENGTH = 2


class UserValidationMixin:
    @staticmethod
    def _normalize_name(name: str | None) -> str:
        return " ".join((name or "").split())

    @staticmethod
    def _validate_name(name: str) -> None:
        if len(name) < _MIN_NAME_LENGTH:
            raise ValidationError(
                "Name must be at least 2 characters.",
                code="NAME_TOO_SHORT",
            )

    @staticmethod
    def _normalize_email(email: str | None) -> str:
        return (email or "").strip().lower()

    @staticmethod
    def _validate_email(email: str) -> None:
        if not _EMAIL_RE.match(email):
            raise ValidationError(
                "Invalid email format.",
                code="INVALID_EMAIL",
            )


__all__ = ["UserValidationMixin"]
