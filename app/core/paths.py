from __future__ import annotations

from pathlib import Path
from .config import settings


def repo_root() -> Path:
    # assumes app/ is at repo root/app
    return Path(__file__).resolve().parents[2]


def data_root() -> Path:
    p = Path(settings.data_dir)
    return p if p.is_absolute() else repo_root() / p


def uploads_root() -> Path:
    return data_root() / settings.uploads_dirname


def notice_images_dir() -> Path:
    return uploads_root() / "notices"


def db_path() -> Path:
    return data_root() / settings.db_filename


def upload_url_to_path(url: str) -> Path:
    """Map a public ``/uploads/...`` URL back to its file under uploads_root()."""
    rel = url.split("/uploads/", 1)[-1]
    return uploads_root() / rel
