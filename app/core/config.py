from __future__ import annotations

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="NOTICEBOARD_", env_file=".env", extra="ignore")

    # data directory (relative to repo root unless absolute)
    data_dir: str = "data"
    db_filename: str = "noticeboard.db"
    # full SQLAlchemy URL; overrides data_dir/db_filename when set
    database_url: Optional[str] = None
    uploads_dirname: str = "uploads"

    # auth
    jwt_secret_key: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7
    bcrypt_rounds: int = 12

    # notices
    max_images: int = 5
    max_image_bytes: int = 5 * 1024 * 1024
    default_page_size: int = 12
    max_page_size: int = 100

    # logging
    log_level: str = "INFO"
    log_json: bool = False


settings = Settings()
