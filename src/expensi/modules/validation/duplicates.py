"""Fuzzy duplicate detection against already-recorded expenses.

A candidate is a possible duplicate of a stored expense when the rounded
amounts are equal, both fall on the same calendar day, and the descriptions
are at least 80% similar by normalized Levenshtein distance. Both hard
conditions must hold, so merely similar-sounding purchases are never flagged.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from expensi.core.currencies import format_currency
from expensi.modules.validation.amounts import round_amount

DUPLICATE_SIMILARITY_THRESHOLD = 0.8

# Shortest leading fragment accepted as a truncated merchant name.
MIN_PREFIX_LENGTH = 4

_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class DuplicateMatch:
    expense: Any
    similarity: float
    reason: str


def levenshtein_distance(a: str, b: str) -> int:
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    prev = list(range(len(b) + 1))
    curr = [0] * (len(b) + 1)
    for i in range(1, len(a) + 1):
        curr[0] = i
        ca = a[i - 1]
        for j in range(1, len(b) + 1):
            cost = 0 if ca == b[j - 1] else 1
            curr[j] = min(
                prev[j] + 1,  # deletion
                curr[j - 1] + 1,  # insertion
                prev[j - 1] + cost,  # substitution
            )
        prev, curr = curr, prev
    return prev[len(b)]


def string_similarity(a: str, b: str) -> float:
    max_len = max(len(a), len(b))
    if max_len == 0:
        return 1.0
    return 1 - levenshtein_distance(a, b) / max_len


def normalize_description(description: str) -> str:
    return _WHITESPACE_RE.sub(" ", description.lower()).strip()


def description_similarity(a: str, b: str) -> float:
    """Similarity of two normalized descriptions.

    Bank exports often cut merchant names after the first word(s) ("starbucks"
    for "starbucks coffee"); a whole-word prefix of at least four characters
    scores at the duplicate threshold even when the edit distance is larger.
    """
    similarity = string_similarity(a, b)
    if similarity >= DUPLICATE_SIMILARITY_THRESHOLD:
        return similarity
    shorter, longer = (a, b) if len(a) <= len(b) else (b, a)
    if (
        len(shorter) >= MIN_PREFIX_LENGTH
        and longer.startswith(shorter)
        and longer[len(shorter)] == " "
    ):
        return DUPLICATE_SIMILARITY_THRESHOLD
    return similarity


def is_same_date(date_a: str, date_b: str) -> bool:
    return str(date_a)[:10] == str(date_b)[:10]


def find_duplicates(candidate: Any, existing_expenses: Sequence[Any]) -> list[DuplicateMatch]:
    """Return stored expenses that look like ``candidate``, best match first.

    ``candidate`` and each stored expense may be objects or mappings exposing
    ``description``, ``amount`` and ``date``.
    """
    normalized_new = normalize_description(str(_field(candidate, "description") or ""))
    rounded_new = round_amount(float(_field(candidate, "amount")))
    new_date = str(_field(candidate, "date") or "")

    matches: list[DuplicateMatch] = []
    for existing in existing_expenses:
        existing_amount = float(_field(existing, "amount"))
        if round_amount(existing_amount) != rounded_new:
            continue
        if not is_same_date(new_date, str(_field(existing, "date") or "")):
            continue

        existing_desc = str(_field(existing, "description") or "")
        similarity = description_similarity(normalized_new, normalize_description(existing_desc))
        if similarity < DUPLICATE_SIMILARITY_THRESHOLD:
            continue

        if similarity == 1:
            reason = (
                "Exact duplicate: same description, amount "
                f"({format_currency(existing_amount, 'USD')}), and date"
            )
        else:
            reason = (
                f'Similar duplicate ({int(similarity * 100 + 0.5)}% match): "{existing_desc}" '
                "with same amount and date"
            )
        matches.append(DuplicateMatch(expense=existing, similarity=similarity, reason=reason))

    # sorted() is stable, so equal scores keep store order.
    return sorted(matches, key=lambda m: m.similarity, reverse=True)


def find_duplicates_in_batch(
    candidates: Sequence[Any], existing_expenses: Sequence[Any]
) -> dict[int, list[DuplicateMatch]]:
    """Map each candidate index to its matches; rows without matches are omitted."""
    out: dict[int, list[DuplicateMatch]] = {}
    for idx, candidate in enumerate(candidates):
        matches = find_duplicates(candidate, existing_expenses)
        if matches:
            out[idx] = matches
    return out


def _field(obj: Any, name: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)
