from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Query, Session, joinedload

from app.db.models import Notice
from app.core.exceptions import NoticeNotFoundError
from app.repositories.audit_repo import log_event


def _like(term: str) -> str:
    esc = term.lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{esc}%"


def filtered_query(
    db: Session,
    *,
    audience: str = "All",
    search: str = "",
    include_expired: bool = False,
    now: Optional[datetime] = None,
) -> Query:
    """Active notices matching audience/search/expiry, newest first."""
    q = db.query(Notice).options(joinedload(Notice.created_by)).filter(Notice.is_active == True)  # noqa: E712

    if audience and audience != "All":
        q = q.filter(Notice.target_audience == audience)

    term = (search or "").strip()
    if term:
        like = _like(term)
        # match tag values, not the JSON text they are stored as
        tag = func.json_each(Notice.tags).table_valued("value").alias("tag")
        tag_hit = select(1).select_from(tag).where(func.lower(tag.c.value).like(like, escape="\\")).exists()
        q = q.filter(
            or_(
                func.lower(Notice.title).like(like, escape="\\"),
                func.lower(Notice.description).like(like, escape="\\"),
                tag_hit,
            )
        )

    if not include_expired:
        q = q.filter(Notice.expiry_date >= (now or datetime.utcnow()))

    return q.order_by(Notice.created_at.desc(), Notice.id.desc())


def page_window(q: Query, page: int, limit: int) -> Tuple[List[Notice], int, int, int]:
    """Return (rows, total, pages, current) for a 1-indexed page.

    A page past the end is clamped to the last page so that
    ``current <= max(pages, 1)`` always holds.
    """
    total = int(q.order_by(None).count())
    pages = math.ceil(total / limit) if total else 0
    current = max(1, min(page, max(pages, 1)))
    rows = q.offset((current - 1) * limit).limit(limit).all()
    return rows, total, pages, current


def get_notice(db: Session, notice_id: int) -> Optional[Notice]:
    return db.query(Notice).options(joinedload(Notice.created_by)).filter(Notice.id == notice_id).first()


def create_notice(
    db: Session,
    *,
    title: str,
    description: str,
    target_audience: str,
    priority: str,
    expiry_date: datetime,
    tags: List[str],
    images: List[str],
    created_by_id: Optional[int],
    actor: Optional[str] = "system",
) -> Notice:
    n = Notice(
        title=title,
        description=description,
        target_audience=target_audience,
        priority=priority,
        expiry_date=expiry_date,
        tags=tags,
        images=images,
        created_by_id=created_by_id,
        is_active=True,
    )
    db.add(n)
    db.flush()

    log_event(
        db,
        action="notice.created",
        entity_type="notice",
        entity_id=str(n.id),
        actor=actor,
        payload={"title": title, "target_audience": target_audience, "priority": priority, "images": len(images)},
    )

    db.flush()
    db.refresh(n)
    return n


def update_notice(db: Session, notice_id: int, changes: Dict[str, Any], *, actor: Optional[str] = "system") -> Notice:
    n = get_notice(db, notice_id)
    if n is None:
        raise NoticeNotFoundError(notice_id)

    before = {k: _jsonable(getattr(n, k)) for k in changes}
    for k, v in changes.items():
        setattr(n, k, v)

    log_event(
        db,
        action="notice.updated",
        entity_type="notice",
        entity_id=str(n.id),
        actor=actor,
        payload={"before": before, "after": {k: _jsonable(v) for k, v in changes.items()}},
    )

    db.flush()
    db.refresh(n)
    return n


def delete_notice(db: Session, notice_id: int, *, actor: Optional[str] = "system") -> List[str]:
    """Remove the notice row; returns its image URLs so the caller can drop the files."""
    n = get_notice(db, notice_id)
    if n is None:
        raise NoticeNotFoundError(notice_id)

    images = list(n.images or [])
    log_event(
        db,
        action="notice.deleted",
        entity_type="notice",
        entity_id=str(n.id),
        actor=actor,
        payload={"title": n.title, "images": images},
    )
    db.delete(n)
    db.flush()
    return images


def _jsonable(v: Any) -> Any:
    if isinstance(v, datetime):
        return v.isoformat()
    return v
