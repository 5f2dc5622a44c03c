from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from app.db.models import Admin
from app.repositories.audit_repo import log_event


def get_admin(db: Session, admin_id: int) -> Optional[Admin]:
    return db.query(Admin).filter(Admin.id == admin_id).first()


def get_admin_by_email(db: Session, email: str) -> Optional[Admin]:
    return db.query(Admin).filter(Admin.email == email.strip().lower()).first()


def count_admins(db: Session) -> int:
    return db.query(Admin).count()


def create_admin(db: Session, name: str, email: str, hashed_password: str, *, actor: Optional[str] = "system") -> Admin:
    a = Admin(name=name.strip(), email=email.strip().lower(), hashed_password=hashed_password, role="admin")
    db.add(a)
    db.flush()

    log_event(
        db,
        action="admin.registered",
        entity_type="admin",
        entity_id=str(a.id),
        actor=actor,
        payload={"email": a.email, "name": a.name},
    )

    db.flush()
    db.refresh(a)
    return a
