from __future__ import annotations

from uuid import uuid4

USER_PREFIX = "usr"
PROJECT_PREFIX = "prj"
MEMBER_PREFIX = "mbr"
AUDIT_PREFIX = "aud"
REQUEST_PREFIX = "req"


def generate_id(prefix: str | None = None) -> str:
    """Opaque unique id; a prefix makes ids in logs and exports self-describing."""
    token = uuid4().hex
    return f"{prefix}_{token}" if prefix else token


__all__ = [
    "USER_PREFIX",
    "PROJECT_PREFIX",
    "MEMBER_PREFIX",
    "AUDIT_PREFIX",
    "REQUEST_PREFIX",
    "generate_id",
]
