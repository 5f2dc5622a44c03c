from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="NOTICEBOARD_CLIENT_", env_file=".env", extra="ignore")

    base_url: str = "http://localhost:8000"
    timeout: float = 15.0
    # quiet window for free-text search input
    search_debounce_seconds: float = 0.3
