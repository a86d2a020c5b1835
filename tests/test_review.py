from __future__ import annotations

from expensi.modules.imports.models import CategorizedRow, RawExpenseInput
from expensi.modules.validation.amounts import AmountWarningType
from expensi.modules.validation.review import review_rows


def test_review_rows_flags_warnings_and_duplicates():
    rows = [
        RawExpenseInput(description="Coffee", amount=4.5, date="2024-01-01"),
        CategorizedRow(expense=RawExpenseInput(description="Laptop", amount=2000, date="2024-01-02")),
        RawExpenseInput(description="Rent", amount=1200.5, date="2024-01-03"),
    ]
    existing = [{"description": "coffee", "amount": 4.5, "date": "2024-01-01"}]

    reviews = review_rows(rows, existing)

    assert [r.index for r in reviews] == [0, 1, 2]
    assert reviews[0].duplicates and not reviews[0].warnings
    assert [w.type for w in reviews[1].warnings] == [AmountWarningType.POSSIBLE_DECIMAL_ERROR]
    assert reviews[2].needs_attention is False
