from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import NoticeValidationError
from app.db.models import AUDIENCES, PRIORITIES, Notice
from app.repositories.notice_repo import filtered_query, page_window
from app.schemas.notice import FilterSpec

logger = logging.getLogger(__name__)

TITLE_MAX = 200
DESCRIPTION_MAX = 5000


def query_notice_page(db: Session, spec: FilterSpec, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Run a FilterSpec against the store and return ``{notices, pagination}``.

    Public and admin listings share this; both only see active notices.
    """
    limit = max(1, min(spec.limit, settings.max_page_size))
    q = filtered_query(
        db,
        audience=spec.audience,
        search=spec.search,
        include_expired=spec.include_expired,
        now=now,
    )
    rows, total, pages, current = page_window(q, spec.page, limit)
    logger.debug(
        "notice query audience=%s search=%r include_expired=%s page=%s/%s total=%s",
        spec.audience, spec.search, spec.include_expired, current, pages, total,
    )
    return {
        "notices": rows,
        "pagination": {"current": current, "pages": pages, "total": total},
    }


def notice_stats(db: Session, now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or datetime.utcnow()

    total = db.query(func.count(Notice.id)).scalar() or 0
    active = db.query(func.count(Notice.id))\
        .filter(Notice.is_active == True, Notice.expiry_date >= now).scalar() or 0  # noqa: E712
    expired = db.query(func.count(Notice.id)).filter(Notice.expiry_date < now).scalar() or 0

    by_audience = db.query(Notice.target_audience, func.count(Notice.id))\
        .group_by(Notice.target_audience)\
        .order_by(func.count(Notice.id).desc(), Notice.target_audience.asc()).all()
    by_priority = db.query(Notice.priority, func.count(Notice.id))\
        .group_by(Notice.priority)\
        .order_by(func.count(Notice.id).desc(), Notice.priority.asc()).all()

    return {
        "total": int(total),
        "active": int(active),
        "expired": int(expired),
        "byAudience": [{"_id": k, "count": int(c)} for k, c in by_audience],
        "byPriority": [{"_id": k, "count": int(c)} for k, c in by_priority],
    }


def parse_expiry(value: Optional[str]) -> datetime:
    """ISO-8601 date or datetime -> naive UTC datetime."""
    raw = (value or "").strip()
    if not raw:
        raise NoticeValidationError("Expiry date is required", field="expiryDate")
    try:
        dt = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        raise NoticeValidationError("Expiry date must be an ISO-8601 date", field="expiryDate")
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def clean_tags(tags: Optional[Iterable[str]]) -> List[str]:
    out: List[str] = []
    for t in tags or []:
        t = (t or "").strip()
        if t and t not in out:
            out.append(t)
    return out


def _clean_title(title: Optional[str]) -> str:
    title = (title or "").strip()
    if not title:
        raise NoticeValidationError("Title is required", field="title")
    if len(title) > TITLE_MAX:
        raise NoticeValidationError(f"Title cannot exceed {TITLE_MAX} characters", field="title")
    return title


def _clean_description(description: Optional[str]) -> str:
    description = (description or "").strip()
    if not description:
        raise NoticeValidationError("Description is required", field="description")
    if len(description) > DESCRIPTION_MAX:
        raise NoticeValidationError(f"Description cannot exceed {DESCRIPTION_MAX} characters", field="description")
    return description


def _check_audience(audience: str) -> str:
    if audience not in AUDIENCES:
        raise NoticeValidationError(f"Invalid target audience: {audience}", field="targetAudience")
    return audience


def _check_priority(priority: str) -> str:
    if priority not in PRIORITIES:
        raise NoticeValidationError(f"Invalid priority: {priority}", field="priority")
    return priority


def validate_new_notice(
    *,
    title: Optional[str],
    description: Optional[str],
    target_audience: Optional[str],
    priority: Optional[str],
    expiry_date: Optional[str],
    tags: Optional[Iterable[str]],
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Validate create-form fields; returns kwargs for notice_repo.create_notice."""
    fields = {
        "title": _clean_title(title),
        "description": _clean_description(description),
        "target_audience": _check_audience(target_audience or "All"),
        "priority": _check_priority(priority or "Medium"),
        "expiry_date": parse_expiry(expiry_date),
        "tags": clean_tags(tags),
    }
    if fields["expiry_date"] <= (now or datetime.utcnow()):
        raise NoticeValidationError("Expiry date must be in the future", field="expiryDate")
    return fields


def validate_notice_changes(
    *,
    title: Optional[str] = None,
    description: Optional[str] = None,
    target_audience: Optional[str] = None,
    priority: Optional[str] = None,
    expiry_date: Optional[str] = None,
    tags: Optional[Iterable[str]] = None,
    is_active: Optional[bool] = None,
) -> Dict[str, Any]:
    """Validate a partial update; omitted (None) fields are left out of the result."""
    changes: Dict[str, Any] = {}
    if title is not None:
        changes["title"] = _clean_title(title)
    if description is not None:
        changes["description"] = _clean_description(description)
    if target_audience is not None:
        changes["target_audience"] = _check_audience(target_audience)
    if priority is not None:
        changes["priority"] = _check_priority(priority)
    if expiry_date is not None:
        changes["expiry_date"] = parse_expiry(expiry_date)
    if tags is not None:
        changes["tags"] = clean_tags(tags)
    if is_active is not None:
        changes["is_active"] = bool(is_active)
    return changes
