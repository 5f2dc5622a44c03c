from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session

from app.api.deps import get_current_admin, get_db
from app.core.config import settings
from app.core.exceptions import NoticeNotFoundError, NoticeValidationError
from app.db.models import AUDIENCES, Admin
from app.repositories.notice_repo import create_notice, delete_notice, get_notice, update_notice
from app.schemas.notice import (
    FilterSpec,
    MessageOut,
    NoticeEnvelope,
    NoticeListOut,
    NoticeStatsOut,
)
from app.services.notice_service import (
    notice_stats,
    query_notice_page,
    validate_new_notice,
    validate_notice_changes,
)
from app.services.upload_service import delete_images, real_uploads, save_images, validate_images

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notices", tags=["notices"])


def filter_spec(
    audience: str = Query("All"),
    search: str = Query(""),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1),
    include_expired: bool = Query(False, alias="includeExpired"),
) -> FilterSpec:
    if audience not in AUDIENCES:
        raise NoticeValidationError(f"Invalid audience: {audience}", field="audience")
    return FilterSpec(audience=audience, search=search, page=page, limit=limit, include_expired=include_expired)


@router.get("", response_model=NoticeListOut)
def api_list_notices(spec: FilterSpec = Depends(filter_spec), db: Session = Depends(get_db)):
    return query_notice_page(db, spec)


@router.get("/admin", response_model=NoticeListOut, dependencies=[Depends(get_current_admin)])
def api_list_admin_notices(spec: FilterSpec = Depends(filter_spec), db: Session = Depends(get_db)):
    # every author's notices, still restricted to active ones
    return query_notice_page(db, spec)


@router.get("/stats/overview", response_model=NoticeStatsOut, dependencies=[Depends(get_current_admin)])
def api_notice_stats(db: Session = Depends(get_db)):
    return {"stats": notice_stats(db)}


@router.get("/{notice_id}", response_model=NoticeEnvelope)
def api_get_notice(notice_id: int, db: Session = Depends(get_db)):
    n = get_notice(db, notice_id)
    if n is None or not n.is_active:
        raise NoticeNotFoundError(notice_id)
    return {"notice": n}


@router.post("", response_model=NoticeEnvelope, status_code=201)
def api_create_notice(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    target_audience: Optional[str] = Form(None, alias="targetAudience"),
    priority: Optional[str] = Form(None),
    expiry_date: Optional[str] = Form(None, alias="expiryDate"),
    tags: Optional[List[str]] = Form(None),
    images: Optional[List[UploadFile]] = File(None),
    image: Optional[UploadFile] = File(None),
    admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    fields = validate_new_notice(
        title=title,
        description=description,
        target_audience=target_audience,
        priority=priority,
        expiry_date=expiry_date,
        tags=tags,
    )
    uploads = real_uploads(images) + real_uploads([image])
    validate_images(uploads)

    urls = save_images(uploads)
    try:
        n = create_notice(db, **fields, images=urls, created_by_id=admin.id, actor=admin.email)
        db.commit()
    except Exception:
        db.rollback()
        delete_images(urls)
        raise

    logger.info("Notice %s created by %s", n.id, admin.email)
    return {"notice": n}


@router.put("/{notice_id}", response_model=NoticeEnvelope)
def api_update_notice(
    notice_id: int,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    target_audience: Optional[str] = Form(None, alias="targetAudience"),
    priority: Optional[str] = Form(None),
    expiry_date: Optional[str] = Form(None, alias="expiryDate"),
    tags: Optional[List[str]] = Form(None),
    is_active: Optional[bool] = Form(None, alias="isActive"),
    images: Optional[List[UploadFile]] = File(None),
    image: Optional[UploadFile] = File(None),
    admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    existing = get_notice(db, notice_id)
    if existing is None:
        raise NoticeNotFoundError(notice_id)

    changes = validate_notice_changes(
        title=title,
        description=description,
        target_audience=target_audience,
        priority=priority,
        expiry_date=expiry_date,
        tags=tags,
        is_active=is_active,
    )
    uploads = real_uploads(images) + real_uploads([image])
    validate_images(uploads)

    old_images: List[str] = []
    new_images: List[str] = []
    if uploads:
        # new uploads replace the whole set
        old_images = list(existing.images or [])
        new_images = save_images(uploads)
        changes["images"] = new_images

    try:
        n = update_notice(db, notice_id, changes, actor=admin.email)
        db.commit()
    except Exception:
        db.rollback()
        delete_images(new_images)
        raise

    delete_images(old_images)
    logger.info("Notice %s updated by %s (%s)", n.id, admin.email, ", ".join(sorted(changes)) or "no changes")
    return {"notice": n}


@router.delete("/{notice_id}", response_model=MessageOut)
def api_delete_notice(notice_id: int, admin: Admin = Depends(get_current_admin), db: Session = Depends(get_db)):
    images = delete_notice(db, notice_id, actor=admin.email)
    db.commit()
    delete_images(images)
    logger.info("Notice %s deleted by %s", notice_id, admin.email)
    return {"message": "Notice deleted successfully"}
