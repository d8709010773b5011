from __future__ import annotations

from collections import Counter
from pathlib import Path
from typing import Iterable

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

from core.domain import AuditLogEntry, Impact
from core.services.audit.export import CSV_HEADERS, TIMESTAMP_FORMAT, entry_row


class AuditExcelRenderer:
    def render(self, entries: Iterable[AuditLogEntry], output_path: Path) -> Path:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        rows = list(entries)
        wb = Workbook()

        header_font = Font(bold=True)
        title_font = Font(bold=True, size=14)
        center = Alignment(horizontal="center")
        thin_border = Border(
            left=Side(style="thin"),
            right=Side(style="thin"),
            top=Side(style="thin"),
            bottom=Side(style="thin"),
        )
        header_fill = PatternFill("solid", fgColor="DDDDDD")

        # ---------------- Audit log ----------------
        ws = wb.active
        ws.title = "Audit Log"
        for col_index, h in enumerate(CSV_HEADERS, start=1):
            cell = ws.cell(row=1, column=col_index, value=h)
            cell.font = header_font
            cell.alignment = center
            cell.fill = header_fill
            cell.border = thin_border

        for row_index, entry in enumerate(rows, start=2):
            for col_index, value in enumerate(entry_row(entry), start=1):
                ws.cell(row=row_index, column=col_index, value=value).border = thin_border

        ws.column_dimensions["A"].width = 20
        ws.column_dimensions["B"].width = 24
        ws.column_dimensions["C"].width = 30
        ws.column_dimensions["D"].width = 40
        ws.column_dimensions["E"].width = 60
        ws.column_dimensions["F"].width = 10
        ws.freeze_panes = "A2"

        # ---------------- Summary ----------------
        ws_sum = wb.create_sheet("Summary")
        ws_sum["A1"] = "Audit summary"
        ws_sum["A1"].font = title_font

        by_impact = Counter(entry.impact for entry in rows)
        stamps = sorted(entry.occurred_at for entry in rows)
        row = 3

        def kv(key, value):
            nonlocal row
            ws_sum[f"A{row}"] = key
            ws_sum[f"B{row}"] = value
            ws_sum[f"A{row}"].font = header_font
            ws_sum[f"A{row}"].border = thin_border
            ws_sum[f"B{row}"].border = thin_border
            row += 1

        kv("Entries", len(rows))
        kv("First entry", stamps[0].strftime(TIMESTAMP_FORMAT) if stamps else "")
        kv("Last entry", stamps[-1].strftime(TIMESTAMP_FORMAT) if stamps else "")
        row += 1
        for impact in (Impact.HIGH, Impact.MEDIUM, Impact.LOW):
            kv(f"Impact - {impact.value}", by_impact.get(impact, 0))

        ws_sum.column_dimensions["A"].width = 24
        ws_sum.column_dimensions["B"].width = 22

        wb.save(output_path)
        return output_path


def export_audit_xlsx(entries: Iterable[AuditLogEntry], output_path: str | Path) -> Path:
    return AuditExcelRenderer().render(entries, Path(output_path))


__all__ = ["AuditExcelRenderer", "export_audit_xlsx"]
