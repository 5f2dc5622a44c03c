from __future__ import annotations

from fastapi import APIRouter

from app.api.routers.auth import router as auth
from app.api.routers.notices import router as notices
from app.api.routers.audit import router as audit

api_router = APIRouter(prefix="/api")
api_router.include_router(auth)
api_router.include_router(notices)
api_router.include_router(audit)
