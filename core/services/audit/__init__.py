from core.services.audit.export import CSV_HEADERS, default_export_filename, export_csv, write_csv
from core.services.audit.impact import classify_impact, derive_action_type
from core.services.audit.service import AuditFilter, AuditService

__all__ = [
    "AuditService",
    "AuditFilter",
    "CSV_HEADERS",
    "classify_impact",
    "derive_action_type",
    "default_export_filename",
    "export_csv",
    "write_csv",
]
