from __future__ import annotations

from pydantic import BaseModel, Field


class ExpensePresetIn(BaseModel):
    name: str = Field(min_length=1)
    description: str
    amount: float = Field(gt=0)
    category: str = "other"
    currency: str = "USD"


class ExpensePreset(ExpensePresetIn):
    id: str
