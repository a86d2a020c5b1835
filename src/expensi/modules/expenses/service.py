from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass, field

from pydantic import ValidationError

from expensi.core.categories import DEFAULT_CATEGORY, is_canonical_category
from expensi.core.config import settings
from expensi.core.logging import get_logger, log_event, log_exception, monotonic_ms
from expensi.modules.expenses.schemas import ExpenseCreateIn, StoredExpense
from expensi.modules.imports.models import CategorizedRow, ImportFileType, RawExpenseInput
from expensi.modules.validation.amounts import round_amount

logger = get_logger(__name__)


class ExpenseStoreError(RuntimeError):
    pass


class ExpenseStore:
    """Persistence collaborator. The import pipeline only reads and creates."""

    def list_items(self) -> list[StoredExpense]:  # pragma: no cover
        raise NotImplementedError

    def create(self, expense: ExpenseCreateIn) -> StoredExpense:  # pragma: no cover
        raise NotImplementedError


class InMemoryExpenseStore(ExpenseStore):
    def __init__(self, expenses: Sequence[StoredExpense] | None = None):
        self._expenses: list[StoredExpense] = list(expenses or [])

    def list_items(self) -> list[StoredExpense]:
        return list(self._expenses)

    def create(self, expense: ExpenseCreateIn) -> StoredExpense:
        stored = StoredExpense(**expense.model_dump())
        self._expenses.append(stored)
        return stored


@dataclass(frozen=True)
class CommitFailure:
    index: int
    description: str
    message: str


@dataclass
class CommitResult:
    created: list[StoredExpense] = field(default_factory=list)
    failures: list[CommitFailure] = field(default_factory=list)


def build_expense(
    row: RawExpenseInput | CategorizedRow,
    *,
    source: ImportFileType | str,
    currency: str | None = None,
) -> ExpenseCreateIn:
    """Resolve a reviewed row into a create payload.

    The AI label wins over the file's own category, which is only kept when it
    is one of the canonical categories.
    """
    if isinstance(row, CategorizedRow):
        expense, ai_category = row.expense, row.ai_category
    else:
        expense, ai_category = row, None

    if ai_category:
        category = ai_category
    elif is_canonical_category(expense.category):
        category = expense.category
    else:
        category = DEFAULT_CATEGORY

    return ExpenseCreateIn(
        description=expense.description,
        amount=round_amount(expense.amount),
        date=expense.date,
        category=category,
        currency=(currency or settings.default_currency).upper(),
        is_auto_categorized=bool(ai_category),
        source=source.value if isinstance(source, ImportFileType) else source,
        notes=expense.notes,
    )


def commit_rows(
    store: ExpenseStore,
    rows: Sequence[RawExpenseInput | CategorizedRow],
    *,
    source: ImportFileType | str,
    currency: str | None = None,
) -> CommitResult:
    """Persist accepted rows one by one; a failing row does not stop the rest."""
    start = time.monotonic()
    result = CommitResult()
    for idx, row in enumerate(rows):
        try:
            payload = build_expense(row, source=source, currency=currency)
        except ValidationError as e:
            log_event(logger, "expenses.commit_rejected", level=logging.WARNING, index=idx)
            result.failures.append(
                CommitFailure(index=idx, description=row.description, message=_validation_message(e))
            )
            continue

        try:
            result.created.append(store.create(payload))
        except Exception as e:
            log_exception(logger, "expenses.commit_failed", index=idx)
            result.failures.append(
                CommitFailure(
                    index=idx,
                    description=payload.description,
                    message=str(e) or type(e).__name__,
                )
            )

    log_event(
        logger,
        "expenses.commit",
        source=source.value if isinstance(source, ImportFileType) else source,
        created=len(result.created),
        failed=len(result.failures),
        duration_ms=monotonic_ms(start),
    )
    return result


def _validation_message(e: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
    )
