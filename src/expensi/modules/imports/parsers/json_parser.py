from __future__ import annotations

import json

from expensi.modules.imports.fields import (
    JSON_AMOUNT_KEYS,
    JSON_DATE_KEYS,
    JSON_DESCRIPTION_KEYS,
    clean_category,
    first_present,
    parse_amount,
    parse_date,
    today_iso,
)
from expensi.modules.imports.models import ImportFileType, ParseResult, RawExpenseInput, RowError

CONTAINER_KEYS = ("expenses", "transactions", "data", "items")


def parse_json(text: str) -> ParseResult:
    """Parse a bare array of expense objects, or an object wrapping one.

    Items are read with per-role fallback keys; errors use 1-based item indices.
    """
    try:
        data = json.loads(text)
    except ValueError:
        return ParseResult.failed(
            ImportFileType.JSON, "Invalid JSON file. Could not parse contents."
        )

    if isinstance(data, list):
        items = data
    elif isinstance(data, dict):
        arr = first_present(data, CONTAINER_KEYS)
        if not isinstance(arr, list):
            return ParseResult.failed(
                ImportFileType.JSON,
                'JSON must be an array of expenses or an object with an "expenses", '
                '"transactions", "data", or "items" array.',
            )
        items = arr
    else:
        return ParseResult.failed(
            ImportFileType.JSON, "JSON must be an array or object containing expense data."
        )

    if not items:
        return ParseResult.failed(ImportFileType.JSON, "No expense entries found in JSON.")

    expenses: list[RawExpenseInput] = []
    errors: list[RowError] = []
    for row_number, item in enumerate(items, start=1):
        if not isinstance(item, dict):
            errors.append(RowError(row=row_number, message="Entry is not an object"))
            continue

        raw_desc = first_present(item, JSON_DESCRIPTION_KEYS)
        raw_amount = first_present(item, JSON_AMOUNT_KEYS)
        raw_date = first_present(item, JSON_DATE_KEYS)

        description = raw_desc.strip() if isinstance(raw_desc, str) else ""
        amount = parse_amount(raw_amount)
        # Unreadable dates fall back to today rather than rejecting the item.
        date = (parse_date(str(raw_date)) if raw_date else None) or today_iso()
        notes = item.get("notes") if isinstance(item.get("notes"), str) else None
        category = clean_category(item["category"]) if isinstance(item.get("category"), str) else None

        if not description:
            errors.append(RowError(row=row_number, message="Missing description"))
            continue
        if amount is None or amount == 0:
            shown = "" if raw_amount is None else raw_amount
            errors.append(RowError(row=row_number, message=f'Invalid amount: "{shown}"'))
            continue

        expenses.append(
            RawExpenseInput(
                description=description,
                amount=amount,
                date=date,
                category=category,
                notes=notes,
            )
        )

    return ParseResult(
        expenses=expenses,
        errors=errors,
        total_rows=len(items),
        file_type=ImportFileType.JSON,
    )
