from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    JSON,
    Boolean,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


AUDIENCES = ("All", "CSE", "ECE", "Mechanical", "Civil", "IT", "Hostel", "Library", "Sports", "Cultural")
PRIORITIES = ("Low", "Medium", "High", "Urgent")


class Admin(Base):
    __tablename__ = "admins"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str] = mapped_column(String, nullable=False, unique=True, index=True)
    hashed_password: Mapped[str] = mapped_column(String, nullable=False)
    role: Mapped[str] = mapped_column(String, default="admin")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    notices: Mapped[list["Notice"]] = relationship("Notice", back_populates="created_by")


class Notice(Base):
    __tablename__ = "notices"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    # public URL paths under /uploads, first one doubles as the legacy single image
    images: Mapped[list] = mapped_column(JSON, default=list)

    target_audience: Mapped[str] = mapped_column(String, default="All", index=True)
    priority: Mapped[str] = mapped_column(String, default="Medium", index=True)
    # naive UTC
    expiry_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    tags: Mapped[list] = mapped_column(JSON, default=list)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)

    created_by_id: Mapped[Optional[int]] = mapped_column(ForeignKey("admins.id"), nullable=True, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    created_by: Mapped[Optional[Admin]] = relationship("Admin", back_populates="notices")

    @property
    def image(self) -> Optional[str]:
        return self.images[0] if self.images else None

    @property
    def is_expired(self) -> bool:
        return self.expiry_date < datetime.utcnow()


class AuditEvent(Base):
    __tablename__ = "audit_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    actor: Mapped[Optional[str]] = mapped_column(String, nullable=True)  # admin email or "system"
    action: Mapped[str] = mapped_column(String, nullable=False)  # e.g. "notice.created"

    entity_type: Mapped[Optional[str]] = mapped_column(String, nullable=True)  # notice/admin
    entity_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    payload: Mapped[dict] = mapped_column(JSON, default=dict)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
