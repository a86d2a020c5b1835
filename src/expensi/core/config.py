from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    environment: str = "dev"
    default_currency: str = "USD"

    openai_api_key: str | None = None
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4o-mini"

    ai_enabled: bool = True
    ai_timeout_seconds: float = 30.0
    ai_categorize_batch_size: int = 30

    pdf_max_chars: int = 8000
    pdf_ai_max_expenses: int = 500

    preset_storage_path: Path = Path(".local_storage/presets.json")


settings = Settings()
