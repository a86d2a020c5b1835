from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from expensi.modules.imports.fields import (
    AMOUNT_COLUMNS,
    CATEGORY_COLUMNS,
    DATE_COLUMNS,
    DESCRIPTION_COLUMNS,
    clean_category,
    find_column,
    parse_amount,
    parse_date,
    today_iso,
)
from expensi.modules.imports.models import RawExpenseInput, RowError


@dataclass(frozen=True)
class ColumnMap:
    amount: str
    description: str
    date: str | None
    category: str | None


def resolve_columns(headers: Sequence[str]) -> ColumnMap | None:
    amount = find_column(headers, AMOUNT_COLUMNS)
    description = find_column(headers, DESCRIPTION_COLUMNS)
    if not amount or not description:
        return None
    return ColumnMap(
        amount=amount,
        description=description,
        date=find_column(headers, DATE_COLUMNS),
        category=find_column(headers, CATEGORY_COLUMNS),
    )


def missing_columns_message(headers: Sequence[str]) -> str:
    return (
        f"Could not find required columns. Found: {', '.join(str(h) for h in headers)}. "
        "Need at least an amount and description column."
    )


def build_row(
    row: dict[str, object],
    columns: ColumnMap,
    *,
    row_number: int,
    date_text: str,
) -> RawExpenseInput | RowError:
    """Turn one header-keyed row into a candidate expense or a row error.

    ``date_text`` is the raw date cell already rendered as text (formats differ
    in how they encode dates); an empty string means "no date, use today".
    """
    raw_amount = row.get(columns.amount)
    amount = parse_amount(raw_amount)
    raw_desc = row.get(columns.description)
    description = str(raw_desc).strip() if raw_desc not in (None, "") else ""
    date = parse_date(date_text) if date_text else today_iso()
    category = clean_category(row.get(columns.category)) if columns.category else None

    if amount is None or amount == 0:
        shown = "" if raw_amount is None else raw_amount
        return RowError(row=row_number, message=f'Invalid amount: "{shown}"')
    if not description:
        return RowError(row=row_number, message="Empty description")
    if date_text and not date:
        return RowError(row=row_number, message=f'Invalid date: "{date_text}"')

    return RawExpenseInput(
        description=description,
        amount=amount,
        date=date or today_iso(),
        category=category,
    )
