from __future__ import annotations

import uuid

from expensi.core.categories import coerce_category
from expensi.modules.presets.schemas import ExpensePreset, ExpensePresetIn
from expensi.modules.presets.store import PresetStore, get_preset_store

DEFAULT_PRESETS: tuple[ExpensePreset, ...] = (
    ExpensePreset(id="preset-coffee", name="Coffee", description="Morning coffee", amount=5.00, category="food"),
    ExpensePreset(id="preset-lunch", name="Lunch", description="Lunch meal", amount=15.00, category="food"),
    ExpensePreset(id="preset-gas", name="Gas/Fuel", description="Gas station fill-up", amount=50.00, category="transport"),
    ExpensePreset(id="preset-uber", name="Uber/Rideshare", description="Rideshare trip", amount=12.00, category="transport"),
    ExpensePreset(id="preset-groceries", name="Groceries", description="Weekly groceries", amount=75.00, category="food"),
    ExpensePreset(
        id="preset-netflix",
        name="Netflix",
        description="Monthly Netflix subscription",
        amount=15.99,
        category="subscriptions",
    ),
    ExpensePreset(id="preset-gym", name="Gym Membership", description="Monthly gym membership", amount=30.00, category="personal"),
    ExpensePreset(id="preset-electric", name="Electric Bill", description="Monthly electric bill", amount=120.00, category="utilities"),
    ExpensePreset(id="preset-internet", name="Internet", description="Monthly internet service", amount=60.00, category="utilities"),
)


class PresetService:
    def __init__(self, store: PresetStore | None = None):
        self._store = store or get_preset_store()

    def custom_presets(self) -> list[ExpensePreset]:
        return self._store.get()

    def all_presets(self) -> list[ExpensePreset]:
        return [*DEFAULT_PRESETS, *self._store.get()]

    def add_custom_preset(self, preset: ExpensePresetIn) -> ExpensePreset:
        created = ExpensePreset(
            id=uuid.uuid4().hex,
            name=preset.name.strip(),
            description=preset.description.strip(),
            amount=preset.amount,
            category=coerce_category(preset.category),
            currency=preset.currency.strip().upper() or "USD",
        )
        self._store.save([*self._store.get(), created])
        return created

    def remove_custom_preset(self, preset_id: str) -> bool:
        current = self._store.get()
        remaining = [p for p in current if p.id != preset_id]
        if len(remaining) == len(current):
            return False
        self._store.save(remaining)
        return True
