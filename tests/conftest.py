import os
import sys
import tempfile
from datetime import datetime, timedelta
from pathlib import Path


# Ensure `app` package is importable when running pytest from repo root.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Settings are read at import time; point them at throwaway locations first.
os.environ.setdefault("NOTICEBOARD_DATA_DIR", tempfile.mkdtemp(prefix="noticeboard-test-"))
os.environ.setdefault("NOTICEBOARD_DATABASE_URL", "sqlite://")
os.environ.setdefault("NOTICEBOARD_JWT_SECRET_KEY", "test-jwt-secret")
os.environ.setdefault("NOTICEBOARD_BCRYPT_ROUNDS", "4")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from app.api.deps import get_db  # noqa: E402
from app.core.database import make_engine  # noqa: E402
from app.core.security import create_access_token, get_password_hash  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.db.models import Admin, Notice  # noqa: E402
from app.main import app  # noqa: E402

ADMIN_EMAIL = "admin@college.edu"
ADMIN_PASSWORD = "admin123"


@pytest.fixture
def session_factory():
    engine = make_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False)
    engine.dispose()


@pytest.fixture
def override_db(session_factory):
    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(override_db):
    with TestClient(override_db) as c:
        yield c


@pytest.fixture
def admin(session_factory) -> Admin:
    with session_factory() as db:
        a = Admin(
            name="College Administrator",
            email=ADMIN_EMAIL,
            hashed_password=get_password_hash(ADMIN_PASSWORD),
            role="admin",
        )
        db.add(a)
        db.commit()
        db.refresh(a)
        db.expunge(a)
        return a


@pytest.fixture
def auth_headers(admin) -> dict:
    return {"Authorization": f"Bearer {create_access_token(str(admin.id))}"}


@pytest.fixture
def make_notice(session_factory, admin):
    """Insert a notice straight into the store and return its id."""

    def _make(
        title: str = "Notice",
        description: str = "Details",
        audience: str = "All",
        priority: str = "Medium",
        expires_in: timedelta = timedelta(days=7),
        tags=None,
        is_active: bool = True,
        images=None,
    ) -> int:
        with session_factory() as db:
            n = Notice(
                title=title,
                description=description,
                target_audience=audience,
                priority=priority,
                expiry_date=datetime.utcnow() + expires_in,
                tags=list(tags or []),
                images=list(images or []),
                is_active=is_active,
                created_by_id=admin.id,
            )
            db.add(n)
            db.commit()
            return n.id

    return _make


@pytest.fixture
def future_iso() -> str:
    return (datetime.utcnow() + timedelta(days=10)).replace(microsecond=0).isoformat() + "Z"
