from __future__ import annotations

import logging
from typing import Generator, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.database import SessionLocal
from app.core.exceptions import AuthenticationError
from app.core.security import decode_access_token
from app.db.models import Admin
from app.repositories.admin_repo import get_admin

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Generator:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_optional_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[Admin]:
    """The admin behind the bearer token, or None when no token was sent.

    A token that is present but invalid is still an error.
    """
    if credentials is None:
        return None
    payload = decode_access_token(credentials.credentials)
    try:
        admin_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise AuthenticationError("Invalid token subject")
    admin = get_admin(db, admin_id)
    if admin is None or not admin.is_active:
        logger.warning("Token for unknown or inactive admin id=%s", admin_id)
        raise AuthenticationError("Admin account not found or disabled")
    return admin


def get_current_admin(admin: Optional[Admin] = Depends(get_optional_admin)) -> Admin:
    if admin is None:
        raise AuthenticationError("Not authenticated")
    return admin
