from __future__ import annotations

import csv
import io
from datetime import date, timezone
from pathlib import Path
from typing import Iterable

from core.domain.audit import AuditLogEntry

CSV_HEADERS = ("Timestamp", "Actor Name", "Actor Email", "Action", "Details", "Impact")
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def _single_line(text: str | None) -> str:
    # one ledger entry must stay one physical line
    return " ".join((text or "").splitlines())


def entry_row(entry: AuditLogEntry) -> list[str]:
    occurred = entry.occurred_at
    if occurred.tzinfo is not None:
        occurred = occurred.astimezone(timezone.utc)
    return [
        occurred.strftime(TIMESTAMP_FORMAT),
        _single_line(entry.actor_display_name),
        _single_line(entry.actor_email),
        _single_line(entry.action),
        _single_line(entry.details),
        entry.impact.value,
    ]


def export_csv(entries: Iterable[AuditLogEntry]) -> bytes:
    """Plain header line, then one fully quoted row per entry, '\\n' separated."""
    buffer = io.StringIO()
    buffer.write(",".join(CSV_HEADERS))
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="")
    for entry in entries:
        buffer.write("\n")
        writer.writerow(entry_row(entry))
    return buffer.getvalue().encode("utf-8")


def default_export_filename(today: date | None = None) -> str:
    stamp = (today or date.today()).strftime("%Y-%m-%d")
    return f"audit-log-{stamp}.csv"


def write_csv(entries: Iterable[AuditLogEntry], output_path: str | Path) -> Path:
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(export_csv(entries))
    return path


__all__ = ["CSV_HEADERS", "TIMESTAMP_FORMAT", "entry_row", "export_csv", "default_export_filename", "write_csv"]
