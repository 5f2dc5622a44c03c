from __future__ import annotations

import json

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from .bootstrap import bootstrap_filesystem
from .config import settings
from .paths import db_path


bootstrap_filesystem()


def _json_dumps(obj) -> str:
    # keep non-ASCII tags searchable with LIKE
    return json.dumps(obj, ensure_ascii=False)


def make_engine(url: str) -> Engine:
    kwargs = {"json_serializer": _json_dumps}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


SQLALCHEMY_DATABASE_URL = settings.database_url or f"sqlite:///{db_path().as_posix()}"

engine = make_engine(SQLALCHEMY_DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
