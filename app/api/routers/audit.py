from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_current_admin, get_db
from app.repositories.audit_repo import list_events
from app.schemas.audit import AuditEventOut

router = APIRouter(prefix="/audit", tags=["audit"], dependencies=[Depends(get_current_admin)])


@router.get("", response_model=List[AuditEventOut])
def list_audit(
    action: Optional[str] = None,
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
    limit: int = 200,
    db: Session = Depends(get_db),
):
    return list_events(db, action=action, entity_type=entity_type, entity_id=entity_id, limit=limit)
