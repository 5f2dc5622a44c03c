from __future__ import annotations

import logging

from sqlalchemy import text

from app.core.database import engine
from .base import Base

# Ensure ORM models are imported so Base.metadata is populated before create_all().
from . import models  # noqa: F401

logger = logging.getLogger(__name__)


def init_db() -> None:
    Base.metadata.create_all(bind=engine)
    if engine.dialect.name == "sqlite":
        # Enforce FK constraints for sqlite
        with engine.connect() as conn:
            conn.execute(text("PRAGMA foreign_keys = ON"))
            conn.commit()
    logger.info("Database ready at %s", engine.url.render_as_string(hide_password=True))
