from __future__ import annotations

import pytest
from pydantic import ValidationError

from expensi.modules.presets.schemas import ExpensePresetIn
from expensi.modules.presets.service import DEFAULT_PRESETS, PresetService
from expensi.modules.presets.store import (
    InMemoryPresetStore,
    JsonFilePresetStore,
    PresetStoreError,
    get_preset_store,
)


def test_default_presets_use_canonical_categories():
    from expensi.core.categories import CATEGORIES

    assert len(DEFAULT_PRESETS) == 9
    assert len({p.id for p in DEFAULT_PRESETS}) == 9
    assert all(p.category in CATEGORIES for p in DEFAULT_PRESETS)


def test_add_and_remove_custom_preset_in_memory():
    service = PresetService(InMemoryPresetStore())

    created = service.add_custom_preset(
        ExpensePresetIn(name=" Parking ", description="Garage", amount=8, category="Transport", currency="eur")
    )

    assert created.name == "Parking"
    assert created.category == "transport"
    assert created.currency == "EUR"
    assert service.all_presets()[-1] == created
    assert len(service.all_presets()) == 10

    assert service.remove_custom_preset(created.id) is True
    assert service.remove_custom_preset(created.id) is False
    assert service.custom_presets() == []


def test_json_file_store_persists_between_instances(tmp_path):
    path = tmp_path / "nested" / "presets.json"
    PresetService(JsonFilePresetStore(path)).add_custom_preset(
        ExpensePresetIn(name="Laundry", description="Laundromat", amount=6.5)
    )

    reloaded = JsonFilePresetStore(path).get()

    assert [p.name for p in reloaded] == ["Laundry"]
    assert reloaded[0].amount == 6.5


def test_json_file_store_reads_corrupt_file_as_empty(tmp_path):
    path = tmp_path / "presets.json"
    path.write_text("{not json", encoding="utf-8")

    assert JsonFilePresetStore(path).get() == []


def test_json_file_store_save_failure_raises(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("file, not a directory", encoding="utf-8")
    store = JsonFilePresetStore(blocker / "presets.json")

    with pytest.raises(PresetStoreError):
        store.save([])


def test_default_service_uses_configured_store(tmp_path):
    store = get_preset_store()

    assert isinstance(store, JsonFilePresetStore)
    assert store.path == tmp_path / "presets.json"
    assert len(PresetService().all_presets()) == len(DEFAULT_PRESETS)


def test_preset_input_validation():
    with pytest.raises(ValidationError):
        ExpensePresetIn(name="", description="x", amount=1)
    with pytest.raises(ValidationError):
        ExpensePresetIn(name="Zero", description="x", amount=0)
