from __future__ import annotations

import csv
import io
from collections.abc import Sequence
from datetime import date

from openpyxl import Workbook
from openpyxl.styles import Font

from expensi.core.categories import category_label
from expensi.modules.expenses.schemas import StoredExpense

EXPORT_HEADERS = ("Date", "Description", "Amount", "Currency", "Category", "Source", "Notes")


def export_filename(ext: str, today: date | None = None) -> str:
    day = today or date.today()
    return f"expenses-{day.isoformat()}.{ext.lstrip('.')}"


def export_csv(expenses: Sequence[StoredExpense]) -> str:
    """Render expenses as CSV; fields with commas, quotes or newlines are quoted."""
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(EXPORT_HEADERS)
    for e in expenses:
        writer.writerow(
            [
                e.date,
                e.description,
                f"{e.amount:.2f}",
                e.currency or "USD",
                category_label(e.category),
                e.source,
                e.notes or "",
            ]
        )
    return buf.getvalue().rstrip("\n")


def export_xlsx(expenses: Sequence[StoredExpense]) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "Expenses"
    ws.append(list(EXPORT_HEADERS))
    for cell in ws[1]:
        cell.font = Font(bold=True)

    total = 0.0
    for e in expenses:
        ws.append(
            [
                e.date,
                e.description,
                round(e.amount, 2),
                e.currency or "USD",
                category_label(e.category),
                e.source,
                e.notes or "",
            ]
        )
        ws.cell(row=ws.max_row, column=3).number_format = "#,##0.00"
        total += e.amount

    if expenses:
        ws.append(["Total", None, round(total, 2)])
        total_row = ws.max_row
        ws.cell(row=total_row, column=1).font = Font(bold=True)
        amount_cell = ws.cell(row=total_row, column=3)
        amount_cell.font = Font(bold=True)
        amount_cell.number_format = "#,##0.00"

    ws.column_dimensions["A"].width = 12
    ws.column_dimensions["B"].width = 40
    ws.column_dimensions["E"].width = 16
    ws.column_dimensions["G"].width = 30

    out = io.BytesIO()
    wb.save(out)
    return out.getvalue()
