# PATH: /OperativeX/utils/xlsx.py
"""Styled single-sheet XLSX exports."""

from __future__ import annotations

from datetime import date, datetime
from io import BytesIO
from typing import Iterable, Sequence

from django.http import HttpResponse
from django.utils import timezone

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.table import Table, TableStyleInfo

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# Columns whose text reads better left aligned.
TEXT_COLUMN_HINTS = ("name", "customer", "description", "completed by")


def sanitize_value(raw: object) -> object:
    """
    Prepare a value for XLSX cells.

    - Numbers stay numeric so Excel treats them as numbers.
    - Aware datetimes are converted to local time and written as text.
    - Illegal control characters are stripped from text.
    """
    if raw is None:
        return ""
    if isinstance(raw, bool):
        return "Yes" if raw else "No"
    if isinstance(raw, (int, float)):
        return raw
    if isinstance(raw, datetime):
        if timezone.is_aware(raw):
            raw = timezone.localtime(raw)
        return raw.strftime("%Y-%m-%d %H:%M")
    if isinstance(raw, date):
        return raw.isoformat()
    return ILLEGAL_CHARACTERS_RE.sub("", str(raw))


def base_styles():
    """Return the shared style objects used across XLSX exports."""
    thin_side = Side(style="thin", color="FFE5E7EB")
    return {
        "title_font": Font(name="Calibri", bold=True, size=14),
        "header_font": Font(name="Calibri", bold=True, size=11),
        "cell_font": Font(name="Calibri", size=11),
        "center_header": Alignment(horizontal="center", vertical="center", wrap_text=True),
        "left_cell": Alignment(horizontal="left", vertical="center", wrap_text=True),
        "center_cell": Alignment(horizontal="center", vertical="center", wrap_text=True),
        "header_fill": PatternFill("solid", fgColor="FFEDE9FE"),
        "border": Border(left=thin_side, right=thin_side, top=thin_side, bottom=thin_side),
    }


def _safe_table_name(base: str) -> str:
    cleaned = "".join(ch if ch.isalnum() else "_" for ch in (base or "Table")) or "Table"
    if cleaned[0].isdigit():
        cleaned = f"T{cleaned}"
    return cleaned


def write_table(
    ws,
    headers: Sequence[str],
    rows: Iterable[Sequence[object]],
    *,
    start_row: int = 1,
    column_widths: Sequence[int] | None = None,
    table_name: str | None = None,
) -> tuple[int, int]:
    """Write a header row and data rows, then add a banded Excel table over them.

    Returns ``(header_row, last_data_row)``.
    """
    styles = base_styles()
    text_columns = {
        idx for idx, label in enumerate(headers, start=1)
        if any(hint in str(label).lower() for hint in TEXT_COLUMN_HINTS)
    }

    for col_idx, label in enumerate(headers, start=1):
        c = ws.cell(row=start_row, column=col_idx, value=label)
        c.font = styles["header_font"]
        c.alignment = styles["center_header"]
        c.fill = styles["header_fill"]
        c.border = styles["border"]

    row_idx = start_row + 1
    for data_row in rows:
        for col_idx, raw_value in enumerate(data_row, start=1):
            c = ws.cell(row=row_idx, column=col_idx, value=sanitize_value(raw_value))
            c.font = styles["cell_font"]
            c.alignment = styles["left_cell"] if col_idx in text_columns else styles["center_cell"]
            c.border = styles["border"]
        row_idx += 1

    widths = list(column_widths or [])
    for col_idx in range(1, len(headers) + 1):
        width = widths[col_idx - 1] if col_idx - 1 < len(widths) else 20
        ws.column_dimensions[get_column_letter(col_idx)].width = width

    data_end = row_idx - 1
    if data_end > start_row:
        table = Table(
            displayName=_safe_table_name(table_name or "Table1"),
            ref=f"A{start_row}:{get_column_letter(len(headers))}{data_end}",
        )
        table.tableStyleInfo = TableStyleInfo(
            name="TableStyleMedium12",
            showFirstColumn=False,
            showLastColumn=False,
            showRowStripes=True,
            showColumnStripes=False,
        )
        ws.add_table(table)
    return start_row, data_end


def build_table_response(
    *,
    sheet_title: str,
    report_title: str | None,
    headers: list[str],
    rows: Iterable[Sequence[object]],
    filename: str,
    column_widths: Sequence[int] | None = None,
    include_timestamp: bool = True,
    table_name: str | None = None,
) -> HttpResponse:
    """
    Build a single-sheet XLSX download with a merged title row, an optional
    "Generated" timestamp line and the data table.
    """
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_title or "Report"
    styles = base_styles()
    row_idx = 1

    if report_title:
        ws.merge_cells(start_row=row_idx, start_column=1, end_row=row_idx, end_column=len(headers))
        c = ws.cell(row=row_idx, column=1, value=report_title)
        c.font = styles["title_font"]
        c.alignment = styles["center_header"]
        row_idx += 1

    if include_timestamp:
        ws.merge_cells(start_row=row_idx, start_column=1, end_row=row_idx, end_column=len(headers))
        c = ws.cell(row=row_idx, column=1, value=f"Generated: {sanitize_value(timezone.now())}")
        c.font = styles["cell_font"]
        c.alignment = styles["left_cell"]
        row_idx += 1

    write_table(
        ws,
        headers=headers,
        rows=rows,
        start_row=row_idx,
        column_widths=column_widths,
        table_name=table_name,
    )

    bio = BytesIO()
    wb.save(bio)
    resp = HttpResponse(bio.getvalue(), content_type=XLSX_CONTENT_TYPE)
    resp["Content-Disposition"] = f"attachment; filename={filename}"
    return resp
