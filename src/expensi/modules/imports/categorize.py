from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from expensi.core.categories import coerce_category
from expensi.core.config import settings
from expensi.core.logging import get_logger, log_event, monotonic_ms
from expensi.modules.imports import ai
from expensi.modules.imports.models import CategorizedRow, RawExpenseInput

logger = get_logger(__name__)

# One batch of {description, amount} in, {index, category, confidence} out.
Categorizer = Callable[[list[dict[str, Any]]], list[dict[str, Any]]]

DEFAULT_BATCH_SIZE = 30

CATEGORIZE_FAILED_MESSAGE = "Failed to categorize. You can still import with default categories."


@dataclass
class CategorizationResult:
    rows: list[CategorizedRow] = field(default_factory=list)
    complete: bool = True
    categorized: int = 0
    message: str | None = None


def categorize_rows(
    rows: Sequence[RawExpenseInput | CategorizedRow],
    *,
    categorizer: Categorizer | None = None,
    batch_size: int | None = None,
) -> CategorizationResult:
    """Send rows to the categorization capability in fixed-size batches.

    Labels are merged back by ``batch start + returned index``. The first
    failing batch stops the dispatch; labels from earlier batches are kept and
    the remaining rows stay uncategorized.
    """
    merged = [r if isinstance(r, CategorizedRow) else CategorizedRow(expense=r) for r in rows]
    if not merged:
        return CategorizationResult(rows=merged)

    call = categorizer
    if call is None:
        if not ai.ai_available():
            log_event(logger, "categorize.skipped", reason="ai_unavailable", rows=len(merged))
            return CategorizationResult(rows=merged, complete=False)
        call = ai.categorize_expenses

    size = batch_size or int(settings.ai_categorize_batch_size or 0) or DEFAULT_BATCH_SIZE
    start = time.monotonic()
    categorized = 0
    complete = True
    for batch_start in range(0, len(merged), size):
        batch = merged[batch_start : batch_start + size]
        payload = [{"description": r.description, "amount": r.amount} for r in batch]
        try:
            results = call(payload)
        except Exception as e:
            log_event(
                logger,
                "categorize.batch_failed",
                batch_start=batch_start,
                batch_size=len(batch),
                error=str(e) or type(e).__name__,
            )
            complete = False
            break

        for item in results or []:
            try:
                local_index = int(item["index"])
            except (KeyError, TypeError, ValueError):
                continue
            if not 0 <= local_index < len(batch):
                continue
            idx = batch_start + local_index
            merged[idx] = CategorizedRow(
                expense=merged[idx].expense,
                ai_category=coerce_category(item.get("category")),
                ai_confidence=_clamp(item.get("confidence")),
            )
            categorized += 1
        log_event(logger, "categorize.batch", batch_start=batch_start, batch_size=len(batch))

    log_event(
        logger,
        "categorize.finish",
        rows=len(merged),
        categorized=categorized,
        complete=complete,
        duration_ms=monotonic_ms(start),
    )
    return CategorizationResult(
        rows=merged,
        complete=complete,
        categorized=categorized,
        message=None if complete else CATEGORIZE_FAILED_MESSAGE,
    )


def _clamp(raw: object) -> float | None:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return min(1.0, max(0.0, value))
