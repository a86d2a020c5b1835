from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from expensi.modules.imports.models import CategorizedRow, RawExpenseInput
from expensi.modules.validation.amounts import AmountWarning, validate_amount
from expensi.modules.validation.duplicates import DuplicateMatch, find_duplicates


@dataclass(frozen=True)
class RowReview:
    index: int
    row: RawExpenseInput | CategorizedRow
    warnings: list[AmountWarning] = field(default_factory=list)
    duplicates: list[DuplicateMatch] = field(default_factory=list)

    @property
    def needs_attention(self) -> bool:
        return bool(self.warnings or self.duplicates)


def review_rows(
    rows: Sequence[RawExpenseInput | CategorizedRow], existing_expenses: Sequence[Any]
) -> list[RowReview]:
    """Run the amount checks and the duplicate check on every parsed row."""
    return [
        RowReview(
            index=idx,
            row=row,
            warnings=validate_amount(row.amount),
            duplicates=find_duplicates(row, existing_expenses),
        )
        for idx, row in enumerate(rows)
    ]
