from __future__ import annotations

import uuid
from datetime import UTC, datetime

from pydantic import BaseModel, Field

from expensi.core.categories import DEFAULT_CATEGORY


class ExpenseCreateIn(BaseModel):
    description: str
    amount: float = Field(gt=0)
    date: str
    category: str = DEFAULT_CATEGORY
    currency: str = "USD"
    is_auto_categorized: bool = False
    source: str = "manual"
    notes: str | None = None


class StoredExpense(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    description: str
    amount: float
    date: str
    category: str = DEFAULT_CATEGORY
    currency: str = "USD"
    is_auto_categorized: bool = False
    source: str = "manual"
    notes: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
