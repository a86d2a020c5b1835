from __future__ import annotations

from expensi.modules.imports import ai
from expensi.modules.imports.categorize import CATEGORIZE_FAILED_MESSAGE, categorize_rows
from expensi.modules.imports.models import CategorizedRow, RawExpenseInput


def _rows(n: int) -> list[RawExpenseInput]:
    return [
        RawExpenseInput(description=f"Item {i}", amount=float(i + 1), date="2024-01-01")
        for i in range(n)
    ]


def test_categorize_without_ai_leaves_rows_uncategorized():
    result = categorize_rows(_rows(3))

    assert result.complete is False
    assert result.categorized == 0
    assert all(isinstance(r, CategorizedRow) and r.ai_category is None for r in result.rows)


def test_categorize_batches_and_merges_by_batch_offset():
    sizes: list[int] = []

    def _categorizer(batch):
        sizes.append(len(batch))
        return [
            {"index": i, "category": "food" if item["amount"] > 40 else "travel", "confidence": 0.9}
            for i, item in enumerate(batch)
        ]

    result = categorize_rows(_rows(65), categorizer=_categorizer, batch_size=30)

    assert sizes == [30, 30, 5]
    assert result.complete is True
    assert result.categorized == 65
    assert result.rows[0].ai_category == "travel"
    assert result.rows[64].ai_category == "food"
    assert result.rows[64].description == "Item 64"


def test_categorize_failure_keeps_earlier_batches_and_stops():
    calls: list[int] = []

    def _categorizer(batch):
        calls.append(len(batch))
        if len(calls) == 2:
            raise ai.AICapabilityError("AI request failed with status 503")
        return [{"index": i, "category": "shopping", "confidence": 0.7} for i in range(len(batch))]

    result = categorize_rows(_rows(70), categorizer=_categorizer, batch_size=30)

    assert calls == [30, 30]
    assert result.complete is False
    assert result.message == CATEGORIZE_FAILED_MESSAGE
    assert result.categorized == 30
    assert {r.ai_category for r in result.rows[:30]} == {"shopping"}
    assert {r.ai_category for r in result.rows[30:]} == {None}


def test_categorize_ignores_out_of_batch_indices_and_coerces_labels():
    def _categorizer(batch):
        return [
            {"index": 0, "category": "Groceries", "confidence": 1.7},
            {"index": 1, "category": " TRAVEL ", "confidence": -2},
            {"index": 5, "category": "food", "confidence": 0.5},
            {"category": "food"},
        ]

    result = categorize_rows(_rows(5), categorizer=_categorizer, batch_size=2)

    # Each batch of two gets labels for its own rows only.
    assert [r.ai_category for r in result.rows] == ["other", "travel", "other", "travel", "other"]
    assert result.rows[0].ai_confidence == 1.0
    assert result.rows[1].ai_confidence == 0.0


def test_categorize_uses_ai_capability_when_configured(monkeypatch, enable_ai):
    monkeypatch.setattr(
        ai,
        "categorize_expenses",
        lambda batch: [{"index": i, "category": "utilities", "confidence": 0.8} for i in range(len(batch))],
    )

    result = categorize_rows(_rows(2))

    assert result.complete is True
    assert [r.ai_category for r in result.rows] == ["utilities", "utilities"]
