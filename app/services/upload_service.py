from __future__ import annotations

import logging
import shutil
import uuid
from pathlib import Path
from typing import Iterable, List, Optional

from fastapi import UploadFile

from app.core.config import settings
from app.core.exceptions import NoticeValidationError
from app.core.paths import notice_images_dir, upload_url_to_path

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


def real_uploads(files: Optional[Iterable[UploadFile]]) -> List[UploadFile]:
    # browsers post an empty part when no file was picked
    return [f for f in (files or []) if f is not None and f.filename]


def validate_images(files: List[UploadFile]) -> None:
    if len(files) > settings.max_images:
        raise NoticeValidationError(f"At most {settings.max_images} images are allowed", field="images")
    for f in files:
        if (f.content_type or "").lower() not in ALLOWED_IMAGE_TYPES:
            raise NoticeValidationError(f"Only image files are allowed: {f.filename}", field="images")


def save_images(files: List[UploadFile]) -> List[str]:
    """Store uploads under uploads/notices and return their public URL paths.

    Files are validated first; if any file turns out too large, or a write
    fails, every file written by this call is removed again.
    """
    validate_images(files)

    dest_dir = notice_images_dir()
    dest_dir.mkdir(parents=True, exist_ok=True)

    written: List[Path] = []
    try:
        for f in files:
            ext = ALLOWED_IMAGE_TYPES[(f.content_type or "").lower()]
            dest_path = dest_dir / f"{uuid.uuid4().hex}{ext}"
            written.append(dest_path)
            with dest_path.open("wb") as out:
                shutil.copyfileobj(f.file, out)
            if dest_path.stat().st_size > settings.max_image_bytes:
                raise NoticeValidationError(
                    f"Image too large: {f.filename} (max {settings.max_image_bytes // (1024 * 1024)} MB)",
                    field="images",
                )
    except Exception:
        _unlink(written)
        raise

    logger.info("Stored %d notice image(s)", len(written))
    return [f"/uploads/notices/{p.name}" for p in written]


def delete_images(urls: Iterable[str]) -> None:
    _unlink(upload_url_to_path(u) for u in urls)


def _unlink(paths: Iterable[Path]) -> None:
    for p in paths:
        try:
            p.unlink(missing_ok=True)
        except OSError:
            logger.warning("Could not remove image file %s", p, exc_info=True)
