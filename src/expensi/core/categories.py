from __future__ import annotations

CATEGORIES: tuple[str, ...] = (
    "food",
    "transport",
    "housing",
    "entertainment",
    "utilities",
    "healthcare",
    "education",
    "shopping",
    "subscriptions",
    "travel",
    "personal",
    "other",
)

DEFAULT_CATEGORY = "other"

CATEGORY_LABELS: dict[str, str] = {
    "food": "Food & Dining",
    "transport": "Transport",
    "housing": "Housing",
    "entertainment": "Entertainment",
    "utilities": "Utilities",
    "healthcare": "Healthcare",
    "education": "Education",
    "shopping": "Shopping",
    "subscriptions": "Subscriptions",
    "travel": "Travel",
    "personal": "Personal",
    "other": "Other",
}


def is_canonical_category(value: str | None) -> bool:
    return bool(value) and value in CATEGORIES


def coerce_category(value: object) -> str:
    """Map an arbitrary label onto the closed category set."""
    if not isinstance(value, str):
        return DEFAULT_CATEGORY
    cat = value.strip().lower()
    return cat if cat in CATEGORIES else DEFAULT_CATEGORY


def category_label(value: str) -> str:
    return CATEGORY_LABELS.get(value, value)
