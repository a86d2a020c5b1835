from __future__ import annotations

import json
import os
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from expensi.core.config import settings
from expensi.core.logging import get_logger, log_event, log_exception
from expensi.modules.presets.schemas import ExpensePreset

logger = get_logger(__name__)

_presets_adapter = TypeAdapter(list[ExpensePreset])


class PresetStoreError(RuntimeError):
    pass


class PresetStore:
    def get(self) -> list[ExpensePreset]:  # pragma: no cover
        raise NotImplementedError

    def save(self, presets: list[ExpensePreset]) -> None:  # pragma: no cover
        raise NotImplementedError


class InMemoryPresetStore(PresetStore):
    def __init__(self, presets: list[ExpensePreset] | None = None):
        self._presets = list(presets or [])

    def get(self) -> list[ExpensePreset]:
        return list(self._presets)

    def save(self, presets: list[ExpensePreset]) -> None:
        self._presets = list(presets)


class JsonFilePresetStore(PresetStore):
    """Custom presets in a single JSON file. Missing or corrupt files read as empty."""

    def __init__(self, path: Path):
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def get(self) -> list[ExpensePreset]:
        if not self._path.exists():
            return []
        try:
            return _presets_adapter.validate_json(self._path.read_bytes())
        except (OSError, ValidationError):
            log_event(logger, "presets.read_failed", path=str(self._path))
            return []

    def save(self, presets: list[ExpensePreset]) -> None:
        data = [p.model_dump() for p in presets]
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self._path.with_suffix(self._path.suffix + ".tmp")
            tmp.write_text(json.dumps(data, indent=2), encoding="utf-8")
            tmp.replace(self._path)
        except OSError as e:
            log_exception(logger, "presets.save_failed", path=str(self._path))
            raise PresetStoreError(f"Failed to save custom presets: {e}") from e


_store: PresetStore | None = None


def get_preset_store() -> PresetStore:
    global _store  # noqa: PLW0603
    if _store is None:
        root = settings.preset_storage_path
        if not root.is_absolute():
            root = Path(os.getcwd()) / root
        _store = JsonFilePresetStore(root)
    return _store
