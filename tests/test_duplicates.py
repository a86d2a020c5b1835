from __future__ import annotations

from expensi.modules.expenses.schemas import StoredExpense
from expensi.modules.imports.models import RawExpenseInput
from expensi.modules.validation.duplicates import (
    DUPLICATE_SIMILARITY_THRESHOLD,
    find_duplicates,
    find_duplicates_in_batch,
    levenshtein_distance,
    string_similarity,
)


def test_levenshtein_and_similarity():
    assert levenshtein_distance("kitten", "sitting") == 3
    assert levenshtein_distance("", "abc") == 3
    assert levenshtein_distance("same", "same") == 0
    assert string_similarity("", "") == 1.0
    assert string_similarity("abcd", "abce") == 0.75


def test_truncated_merchant_name_is_a_duplicate():
    candidate = {"description": "Starbucks Coffee", "amount": 5.50, "date": "2024-03-01"}
    existing = [{"description": "Starbucks", "amount": 5.50, "date": "2024-03-01T10:00:00Z"}]

    matches = find_duplicates(candidate, existing)

    assert len(matches) == 1
    assert matches[0].similarity >= DUPLICATE_SIMILARITY_THRESHOLD
    assert matches[0].reason == (
        'Similar duplicate (80% match): "Starbucks" with same amount and date'
    )


def test_amount_and_date_must_both_match():
    candidate = {"description": "Starbucks Coffee", "amount": 5.50, "date": "2024-03-01"}

    assert find_duplicates(
        candidate, [{"description": "Starbucks", "amount": 5.51, "date": "2024-03-01"}]
    ) == []
    assert find_duplicates(
        candidate, [{"description": "Starbucks Coffee", "amount": 5.50, "date": "2024-03-02"}]
    ) == []


def test_exact_duplicate_ranks_first_and_amounts_compare_rounded():
    candidate = RawExpenseInput(description="Coffee  Shop", amount=5.504, date="2024-03-01")
    similar = StoredExpense(description="Coffee Shops", amount=5.5, date="2024-03-01")
    exact = StoredExpense(description=" coffee shop ", amount=5.5, date="2024-03-01")
    unrelated = StoredExpense(description="Shell Gas", amount=5.5, date="2024-03-01")

    matches = find_duplicates(candidate, [similar, unrelated, exact])

    assert [m.expense for m in matches] == [exact, similar]
    assert matches[0].similarity == 1
    assert matches[0].reason == "Exact duplicate: same description, amount ($5.50), and date"
    assert matches[1].reason.startswith("Similar duplicate (92% match)")


def test_find_duplicates_in_batch_omits_clean_rows():
    existing = [{"description": "Rent", "amount": 1200, "date": "2024-02-01"}]
    rows = [
        RawExpenseInput(description="Groceries", amount=20, date="2024-02-01"),
        RawExpenseInput(description="rent", amount=1200, date="2024-02-01"),
    ]

    out = find_duplicates_in_batch(rows, existing)

    assert list(out) == [1]
    assert out[1][0].similarity == 1
