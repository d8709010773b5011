from __future__ import annotations

from typing import Any, Mapping

from sqlalchemy import update
from sqlalchemy.orm import Session

from core.exceptions import ConcurrencyError, NotFoundError


def update_with_version_check(
    session: Session,
    orm_type: type[Any],
    row_id: str,
    expected_version: int,
    values: Mapping[str, Any],
    *,
    entity: str,
    code_prefix: str,
) -> int:
    """Write ``values`` only if the row still carries ``expected_version``.

    Returns the bumped version. A missing row raises ``<PREFIX>_NOT_FOUND``;
    a row moved on by another writer raises ``STALE_WRITE``.
    """
    bumped = int(expected_version) + 1
    result = session.execute(
        update(orm_type)
        .where(orm_type.id == row_id)
        .where(orm_type.version == int(expected_version))
        .values({**values, "version": bumped})
    )
    if result.rowcount == 1:
        return bumped

    current = session.get(orm_type, row_id, populate_existing=True)
    if current is None:
        raise NotFoundError(f"{entity} not found.", code=f"{code_prefix}_NOT_FOUND")
    raise ConcurrencyError(
        f"{entity} was changed by someone else (expected version {expected_version}, "
        f"found {current.version}). Reload and try again.",
        code="STALE_WRITE",
    )


__all__ = ["update_with_version_check"]
