from __future__ import annotations

from .paths import data_root, notice_images_dir


def bootstrap_filesystem() -> None:
    data_root().mkdir(parents=True, exist_ok=True)
    notice_images_dir().mkdir(parents=True, exist_ok=True)
