from __future__ import annotations

import csv
from io import StringIO

from expensi.modules.imports.models import ImportFileType, ParseResult, RawExpenseInput, RowError
from expensi.modules.imports.parsers.tabular import (
    build_row,
    missing_columns_message,
    resolve_columns,
)


def parse_csv(text: str) -> ParseResult:
    """Parse a comma-delimited export with a header row.

    Row numbers in errors are file line numbers, the header being line 1. A
    quoted field spanning lines reports the line it ends on.
    """
    reader = csv.DictReader(StringIO(text))
    try:
        headers = [h for h in (reader.fieldnames or []) if h is not None]
        rows: list[tuple[int, dict[str | None, object]]] = []
        for row in reader:
            if _has_values(row):
                rows.append((reader.line_num, row))
    except csv.Error as e:
        return ParseResult.failed(ImportFileType.CSV, f"Failed to read CSV file: {e}")

    if not rows or not headers:
        return ParseResult.failed(ImportFileType.CSV, "No data found in CSV")

    columns = resolve_columns(headers)
    if columns is None:
        return ParseResult.failed(ImportFileType.CSV, missing_columns_message(headers))

    expenses: list[RawExpenseInput] = []
    errors: list[RowError] = []
    for row_number, row in rows:
        date_text = str(row.get(columns.date) or "").strip() if columns.date else ""
        out = build_row(row, columns, row_number=row_number, date_text=date_text)
        if isinstance(out, RowError):
            errors.append(out)
        else:
            expenses.append(out)

    return ParseResult(
        expenses=expenses,
        errors=errors,
        total_rows=len(rows),
        file_type=ImportFileType.CSV,
    )


def _has_values(row: dict[str | None, object]) -> bool:
    for value in row.values():
        if isinstance(value, list):
            if any(str(v).strip() for v in value):
                return True
        elif value is not None and str(value).strip():
            return True
    return False
