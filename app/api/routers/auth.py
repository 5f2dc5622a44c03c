from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_current_admin, get_db, get_optional_admin
from app.core.exceptions import AuthenticationError, NoticeValidationError
from app.core.security import create_access_token, get_password_hash, verify_password
from app.db.models import Admin
from app.repositories.admin_repo import count_admins, create_admin, get_admin_by_email
from app.schemas.auth import AuthOut, LoginIn, MeOut, RegisterIn

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=AuthOut)
def api_login(payload: LoginIn, db: Session = Depends(get_db)):
    admin = get_admin_by_email(db, payload.email)
    if admin is None or not admin.is_active or not verify_password(payload.password, admin.hashed_password):
        logger.warning("Login failed for %s", payload.email)
        raise AuthenticationError("Invalid email or password")
    logger.info("Login succeeded for %s", admin.email)
    return {"token": create_access_token(str(admin.id)), "admin": admin}


@router.post("/register", response_model=AuthOut, status_code=201)
def api_register(
    payload: RegisterIn,
    caller: Optional[Admin] = Depends(get_optional_admin),
    db: Session = Depends(get_db),
):
    # open only until the first admin exists
    if caller is None and count_admins(db) > 0:
        raise AuthenticationError("Only an administrator can register new administrators")
    if get_admin_by_email(db, payload.email):
        raise NoticeValidationError("Email already registered", field="email")

    admin = create_admin(
        db,
        payload.name,
        payload.email,
        get_password_hash(payload.password),
        actor=caller.email if caller else "system",
    )
    db.commit()
    logger.info("Registered admin %s", admin.email)
    return {"token": create_access_token(str(admin.id)), "admin": admin}


@router.get("/me", response_model=MeOut)
def api_me(admin: Admin = Depends(get_current_admin)):
    return {"admin": admin}
