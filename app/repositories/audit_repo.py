from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.db.models import AuditEvent


def log_event(
    db: Session,
    *,
    action: str,
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
    actor: Optional[str] = "system",
    payload: Optional[Dict[str, Any]] = None,
) -> AuditEvent:
    ev = AuditEvent(
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        actor=actor,
        payload=payload or {},
    )
    db.add(ev)
    db.flush()
    return ev


def list_events(
    db: Session,
    *,
    action: Optional[str] = None,
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
    limit: int = 200,
) -> List[AuditEvent]:
    q = db.query(AuditEvent)
    if action:
        q = q.filter(AuditEvent.action.ilike(f"%{action}%"))
    if entity_type:
        q = q.filter(AuditEvent.entity_type == entity_type)
    if entity_id:
        q = q.filter(AuditEvent.entity_id == entity_id)
    return q.order_by(AuditEvent.created_at.desc(), AuditEvent.id.desc()).limit(min(limit, 1000)).all()
