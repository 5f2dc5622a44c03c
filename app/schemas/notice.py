from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from app.db.models import AUDIENCES, PRIORITIES


class FilterSpec(BaseModel):
    """Everything that determines which page of notices is shown.

    Instances are immutable. The ``with_*`` helpers return a new spec; every
    change other than the page number sends the view back to page 1.
    """

    audience: str = "All"
    search: str = ""
    page: int = Field(1, ge=1)
    limit: int = Field(12, ge=1)
    include_expired: bool = False

    class Config:
        frozen = True

    @field_validator("audience")
    @classmethod
    def _known_audience(cls, v: str) -> str:
        if v not in AUDIENCES:
            raise ValueError(f"Unknown audience: {v}")
        return v

    def _replace(self, **changes: Any) -> "FilterSpec":
        return type(self)(**{**self.model_dump(), **changes})

    def with_search(self, search: str) -> "FilterSpec":
        return self._replace(search=search, page=1)

    def with_audience(self, audience: str) -> "FilterSpec":
        return self._replace(audience=audience, page=1)

    def with_include_expired(self, include_expired: bool) -> "FilterSpec":
        return self._replace(include_expired=include_expired, page=1)

    def with_page(self, page: int) -> "FilterSpec":
        return self._replace(page=page)

    def to_query_params(self) -> Dict[str, str]:
        """Query string for GET /api/notices (all values string-encoded)."""
        params = {
            "audience": self.audience,
            "page": str(self.page),
            "limit": str(self.limit),
            "includeExpired": "true" if self.include_expired else "false",
        }
        if self.search:
            params["search"] = self.search
        return params


class CreatorOut(BaseModel):
    id: int
    name: str
    email: str

    class Config:
        from_attributes = True


class NoticeOut(BaseModel):
    id: int
    title: str
    description: str
    image: Optional[str] = None
    images: List[str] = []
    target_audience: str = Field(alias="targetAudience")
    priority: str
    expiry_date: datetime = Field(alias="expiryDate")
    tags: List[str] = []
    is_active: bool = Field(alias="isActive")
    is_expired: bool = Field(alias="isExpired")
    created_by: Optional[CreatorOut] = Field(None, alias="createdBy")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    class Config:
        from_attributes = True
        populate_by_name = True


class PaginationOut(BaseModel):
    current: int = 1
    pages: int = 1
    total: int = 0


class NoticeListOut(BaseModel):
    success: bool = True
    notices: List[NoticeOut] = []
    pagination: PaginationOut = PaginationOut()


class NoticeEnvelope(BaseModel):
    success: bool = True
    notice: NoticeOut


class GroupCount(BaseModel):
    id: str = Field(alias="_id")
    count: int

    class Config:
        populate_by_name = True


class NoticeStats(BaseModel):
    total: int
    active: int
    expired: int
    by_audience: List[GroupCount] = Field(alias="byAudience")
    by_priority: List[GroupCount] = Field(alias="byPriority")

    class Config:
        populate_by_name = True


class NoticeStatsOut(BaseModel):
    success: bool = True
    stats: NoticeStats


class MessageOut(BaseModel):
    success: bool = True
    message: str


__all__ = [
    "AUDIENCES",
    "PRIORITIES",
    "FilterSpec",
    "NoticeOut",
    "NoticeListOut",
    "NoticeEnvelope",
    "NoticeStatsOut",
    "PaginationOut",
    "MessageOut",
]
