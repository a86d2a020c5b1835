from __future__ import annotations

from datetime import date, datetime
from io import BytesIO

from openpyxl import load_workbook

from expensi.modules.imports.fields import parse_excel_serial
from expensi.modules.imports.models import ImportFileType, ParseResult, RawExpenseInput, RowError
from expensi.modules.imports.parsers.tabular import (
    build_row,
    missing_columns_message,
    resolve_columns,
)


def parse_excel(body: bytes) -> ParseResult:
    """Parse the first worksheet of a workbook; the first row holds the headers."""
    try:
        return _parse_workbook(body)
    except Exception as e:
        return ParseResult.failed(
            ImportFileType.EXCEL, f"Failed to read Excel file: {str(e) or type(e).__name__}"
        )


def _parse_workbook(body: bytes) -> ParseResult:
    workbook = load_workbook(BytesIO(body), data_only=True, read_only=True)
    try:
        if not workbook.worksheets:
            return ParseResult.failed(ImportFileType.EXCEL, "No sheets found in Excel file")
        sheet = workbook.worksheets[0]
        raw_rows = list(sheet.iter_rows(values_only=True))
    finally:
        workbook.close()

    if not raw_rows:
        return ParseResult.failed(ImportFileType.EXCEL, "No data found in Excel file")

    headers = _normalize_headers(raw_rows[0])
    rows: list[tuple[int, dict[str, object]]] = []
    for row_number, raw_row in enumerate(raw_rows[1:], start=2):
        row = {
            header: value
            for header, value in zip(headers, raw_row)
            if header and value not in (None, "")
        }
        if row:
            rows.append((row_number, row))

    if not rows:
        return ParseResult.failed(ImportFileType.EXCEL, "No data found in Excel file")

    present_headers = [h for h in headers if h]
    columns = resolve_columns(present_headers)
    if columns is None:
        return ParseResult.failed(ImportFileType.EXCEL, missing_columns_message(present_headers))

    expenses: list[RawExpenseInput] = []
    errors: list[RowError] = []
    for row_number, row in rows:
        date_text = _date_text(row.get(columns.date)) if columns.date else ""
        out = build_row(row, columns, row_number=row_number, date_text=date_text)
        if isinstance(out, RowError):
            errors.append(out)
        else:
            expenses.append(out)

    return ParseResult(
        expenses=expenses,
        errors=errors,
        total_rows=len(rows),
        file_type=ImportFileType.EXCEL,
    )


def _normalize_headers(header_row: tuple[object, ...]) -> list[str]:
    return ["" if cell is None else str(cell).strip() for cell in header_row]


def _date_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        # Cells without a date number format come through as raw serials.
        return parse_excel_serial(value) or str(value)
    return str(value).strip()
