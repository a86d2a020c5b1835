from __future__ import annotations

import os

import pytest

# Set env before any expensi imports (settings are created at import time).
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("AI_ENABLED", "false")
os.environ.setdefault("PRESET_STORAGE_PATH", ".tmp_presets_test/presets.json")


@pytest.fixture(autouse=True)
def _reset_settings_and_stores(monkeypatch, tmp_path) -> None:
    from expensi.core.config import settings
    import expensi.modules.presets.store as store_mod

    # No test may reach a real AI endpoint unless it opts in explicitly.
    monkeypatch.setattr(settings, "ai_enabled", False)
    monkeypatch.setattr(settings, "openai_api_key", None)
    monkeypatch.setattr(settings, "preset_storage_path", tmp_path / "presets.json")
    store_mod._store = None

    yield

    store_mod._store = None


@pytest.fixture
def enable_ai(monkeypatch):
    from expensi.core.config import settings

    monkeypatch.setattr(settings, "ai_enabled", True)
    monkeypatch.setattr(settings, "openai_api_key", "sk-test")
    return settings


@pytest.fixture
def make_file():
    from expensi.modules.imports.models import UploadedFile

    def _make(name: str, body: bytes | str) -> UploadedFile:
        data = body.encode("utf-8") if isinstance(body, str) else body
        return UploadedFile.from_bytes(name, data)

    return _make
