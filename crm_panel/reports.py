"""Render analytics report payloads as JSON, CSV, Excel or PDF bytes."""

from __future__ import annotations

import csv
import io
import json
import re
from typing import Any, Dict, List, NamedTuple, Tuple

import openpyxl
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from pydantic import TypeAdapter
from pydantic_core import to_jsonable_python
from reportlab.lib.pagesizes import LETTER
from reportlab.pdfgen import canvas as pdf_canvas

_PAYLOAD_ADAPTER = TypeAdapter(Any)

HEADER_FONT = Font(name="Calibri", bold=True, size=11, color="FFFFFF")
HEADER_FILL = PatternFill(start_color="2F5496", end_color="2F5496", fill_type="solid")
BODY_FONT = Font(name="Calibri", size=10)
THIN_BORDER = Border(
    left=Side(style="thin"), right=Side(style="thin"), top=Side(style="thin"), bottom=Side(style="thin")
)

_SHEET_TITLE_INVALID = re.compile(r"[\[\]:*?/\\]")
_PDF_MARGIN = 50
_PDF_BOTTOM = 80


class ReportRows(NamedTuple):
    """A payload flattened into ``(key, value)`` scalars and named record tables."""

    summary: List[Tuple[str, Any]]
    tables: Dict[str, List[Dict[str, Any]]]


def _cell_value(value: Any) -> Any:
    if isinstance(value, (list, dict)):
        return json.dumps(value, sort_keys=True)
    return value


def _flatten_record(record: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    flat: Dict[str, Any] = {}
    for key, value in record.items():
        name = f"{prefix}{key}"
        if isinstance(value, dict) and value and all(not isinstance(v, (dict, list)) for v in value.values()):
            flat.update(_flatten_record(value, prefix=f"{name}."))
        else:
            flat[name] = _cell_value(value)
    return flat


def build_rows(payload: Any) -> ReportRows:
    """Split a payload into summary scalars and tables of records.

    Nested mappings become dotted keys. Lists of mappings become tables named
    after their dotted path; every other list is written as a JSON string.
    """
    summary: List[Tuple[str, Any]] = []
    tables: Dict[str, List[Dict[str, Any]]] = {}

    def walk(node: Any, path: str) -> None:
        if isinstance(node, dict):
            for key, value in node.items():
                walk(value, f"{path}.{key}" if path else str(key))
        elif isinstance(node, list) and node and all(isinstance(item, dict) for item in node):
            tables[path or "records"] = [_flatten_record(item) for item in node]
        elif isinstance(node, list):
            summary.append((path, _cell_value(node)))
        else:
            summary.append((path or "value", node))

    walk(to_jsonable_python(payload), "")
    return ReportRows(summary=summary, tables=tables)


def _table_columns(records: List[Dict[str, Any]]) -> List[str]:
    columns: List[str] = []
    for record in records:
        for key in record:
            if key not in columns:
                columns.append(key)
    return columns


# ----------------------------------------------------------------------
# Formats
# ----------------------------------------------------------------------


def to_json(payload: Any) -> bytes:
    return _PAYLOAD_ADAPTER.dump_json(payload, indent=2)


def to_csv(payload: Any) -> bytes:
    rows = build_rows(payload)
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(["Metric", "Value"])
    writer.writerows(rows.summary)
    for name, records in rows.tables.items():
        columns = _table_columns(records)
        writer.writerow([])
        writer.writerow([name])
        writer.writerow(columns)
        for record in records:
            writer.writerow([record.get(column, "") for column in columns])
    return buffer.getvalue().encode("utf-8")


def _sheet_title(name: str, used: set) -> str:
    base = _SHEET_TITLE_INVALID.sub("_", name)[:31] or "Sheet"
    title, counter = base, 1
    while title in used:
        suffix = f"_{counter}"
        title = f"{base[: 31 - len(suffix)]}{suffix}"
        counter += 1
    used.add(title)
    return title


def _style_sheet(ws) -> None:
    for cell in ws[1]:
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = Alignment(vertical="center", horizontal="center")
        cell.border = THIN_BORDER
    for row in ws.iter_rows(min_row=2, max_row=ws.max_row, max_col=ws.max_column):
        for cell in row:
            cell.font = BODY_FONT
            cell.border = THIN_BORDER
    for col in range(1, ws.max_column + 1):
        longest = 0
        for (cell,) in ws.iter_rows(min_row=1, max_row=min(ws.max_row, 50), min_col=col, max_col=col):
            if cell.value is not None:
                longest = max(longest, min(len(str(cell.value)), 60))
        ws.column_dimensions[get_column_letter(col)].width = max(longest + 2, 12)


def to_excel(payload: Any, sheet_name: str = "Summary") -> bytes:
    rows = build_rows(payload)
    wb = openpyxl.Workbook()
    used: set = set()

    ws = wb.active
    ws.title = _sheet_title(sheet_name, used)
    ws.append(["Metric", "Value"])
    for key, value in rows.summary:
        ws.append([key, value])
    _style_sheet(ws)

    for name, records in rows.tables.items():
        columns = _table_columns(records)
        sheet = wb.create_sheet(_sheet_title(name, used))
        sheet.append(columns)
        for record in records:
            sheet.append([record.get(column) for column in columns])
        _style_sheet(sheet)

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def to_pdf(payload: Any, title: str = "Report") -> bytes:
    rows = build_rows(payload)
    buffer = io.BytesIO()
    c = pdf_canvas.Canvas(buffer, pagesize=LETTER)
    width, height = LETTER
    y = height - _PDF_MARGIN

    def line(text: str, font: str = "Helvetica", size: int = 10, indent: int = 0, step: int = 14) -> None:
        nonlocal y
        if y < _PDF_BOTTOM:
            c.showPage()
            y = height - _PDF_MARGIN
        c.setFont(font, size)
        c.drawString(_PDF_MARGIN + indent, y, text[:110])
        y -= step

    line(title, font="Helvetica-Bold", size=16, step=24)
    line("Summary", font="Helvetica-Bold", size=12, step=18)
    for key, value in rows.summary:
        line(f"{key}: {value}", indent=10)

    for name, records in rows.tables.items():
        y -= 8
        line(f"{name} ({len(records)})", font="Helvetica-Bold", size=12, step=18)
        for record in records:
            text = "  |  ".join(f"{key}={value}" for key, value in record.items() if value not in (None, "", "[]", "{}"))
            line(text, size=8, indent=10, step=12)

    c.showPage()
    c.save()
    return buffer.getvalue()
