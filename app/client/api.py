"""Async HTTP client for the notice board API.

The session (bearer token + admin) is an explicit object handed to the
client; nothing is kept in module state. Every failure, network or HTTP,
surfaces as ``NoticeBoardAPIError`` carrying a displayable message.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from app.client.config import ClientSettings
from app.core.exceptions import NoticeBoardAPIError
from app.schemas.auth import AdminOut
from app.schemas.notice import FilterSpec, NoticeListOut, NoticeOut, NoticeStats

logger = logging.getLogger(__name__)

BAD_RESPONSE = "Unexpected response from server"

M = TypeVar("M", bound=BaseModel)


class ClientSession:
    """Who the client is acting as. Token storage is up to the caller."""

    def __init__(self, token: Optional[str] = None, admin: Optional[AdminOut] = None):
        self.token = token
        self.admin = admin

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def clear(self) -> None:
        self.token = None
        self.admin = None

    def auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}


@dataclass
class ImageUpload:
    filename: str
    content: bytes
    content_type: str = "image/jpeg"


@dataclass
class NoticeForm:
    """Fields for create/update. ``None`` means "not sent" (keeps the value on update)."""

    title: Optional[str] = None
    description: Optional[str] = None
    target_audience: Optional[str] = None
    priority: Optional[str] = None
    expiry_date: Optional[Any] = None  # datetime or ISO-8601 string
    tags: Optional[List[str]] = None
    is_active: Optional[bool] = None
    images: List[ImageUpload] = field(default_factory=list)

    def to_multipart(self) -> Tuple[Dict[str, Any], List[Tuple[str, Tuple[str, bytes, str]]]]:
        data: Dict[str, Any] = {}
        if self.title is not None:
            data["title"] = self.title
        if self.description is not None:
            data["description"] = self.description
        if self.target_audience is not None:
            data["targetAudience"] = self.target_audience
        if self.priority is not None:
            data["priority"] = self.priority
        if self.expiry_date is not None:
            exp = self.expiry_date
            data["expiryDate"] = exp.isoformat() if isinstance(exp, datetime) else str(exp)
        if self.tags is not None:
            # a single empty value clears the tags on update
            data["tags"] = list(self.tags) or [""]
        if self.is_active is not None:
            data["isActive"] = "true" if self.is_active else "false"
        files = [("images", (img.filename, img.content, img.content_type)) for img in self.images]
        return data, files


class NoticeBoardClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        session: Optional[ClientSession] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
    ):
        cfg = ClientSettings()
        self.session = session or ClientSession()
        self._http = httpx.AsyncClient(
            base_url=(base_url or cfg.base_url).rstrip("/") + "/api",
            timeout=timeout if timeout is not None else cfg.timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "NoticeBoardClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        headers = {**self.session.auth_headers(), **kwargs.pop("headers", {})}
        try:
            resp = await self._http.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise NoticeBoardAPIError("Network error - please check your connection") from exc

        if resp.is_error:
            raise NoticeBoardAPIError(_error_message(resp), status_code=resp.status_code)
        try:
            return resp.json()
        except ValueError as exc:
            logger.warning("%s %s returned a non-JSON body (%s)", method, path, resp.headers.get("content-type"))
            raise NoticeBoardAPIError(BAD_RESPONSE, status_code=resp.status_code) from exc

    # auth

    async def login(self, email: str, password: str) -> AdminOut:
        body = await self._request("POST", "/auth/login", json={"email": email, "password": password})
        admin = _parse(AdminOut, body, "admin")
        token = body.get("token") if isinstance(body, dict) else None
        if not token:
            raise NoticeBoardAPIError(BAD_RESPONSE)
        self.session.token = token
        self.session.admin = admin
        return admin

    def logout(self) -> None:
        self.session.clear()

    async def me(self) -> AdminOut:
        body = await self._request("GET", "/auth/me")
        return _parse(AdminOut, body, "admin")

    async def check_session(self) -> Optional[AdminOut]:
        """Validate a restored token at startup.

        A rejected token is dropped silently; network trouble leaves the
        token in place for a later retry. Either way the caller gets None.
        """
        if not self.session.is_authenticated:
            return None
        try:
            admin = await self.me()
        except NoticeBoardAPIError as exc:
            if exc.status_code in (401, 403):
                logger.info("Stored token rejected, clearing session")
                self.session.clear()
            return None
        self.session.admin = admin
        return admin

    # queries

    async def list_notices(self, spec: FilterSpec) -> NoticeListOut:
        body = await self._request("GET", "/notices", params=spec.to_query_params())
        return _parse(NoticeListOut, body)

    async def list_admin_notices(self, spec: FilterSpec) -> NoticeListOut:
        body = await self._request("GET", "/notices/admin", params=spec.to_query_params())
        return _parse(NoticeListOut, body)

    async def get_notice(self, notice_id: int) -> NoticeOut:
        body = await self._request("GET", f"/notices/{notice_id}")
        return _parse(NoticeOut, body, "notice")

    async def notice_stats(self) -> NoticeStats:
        body = await self._request("GET", "/notices/stats/overview")
        return _parse(NoticeStats, body, "stats")

    # mutations; callers refresh their NoticeCache afterwards

    async def create_notice(self, form: NoticeForm) -> NoticeOut:
        data, files = form.to_multipart()
        body = await self._request("POST", "/notices", data=data, files=files or None)
        return _parse(NoticeOut, body, "notice")

    async def update_notice(self, notice_id: int, form: NoticeForm) -> NoticeOut:
        data, files = form.to_multipart()
        body = await self._request("PUT", f"/notices/{notice_id}", data=data, files=files or None)
        return _parse(NoticeOut, body, "notice")

    async def delete_notice(self, notice_id: int) -> None:
        await self._request("DELETE", f"/notices/{notice_id}")


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        msg = body.get("message") or body.get("detail")
        if isinstance(msg, str) and msg:
            return msg
    return f"Request failed with status {resp.status_code}"


def _parse(model: Type[M], body: Any, key: Optional[str] = None) -> M:
    """Validate a 2xx body (or ``body[key]``) against ``model``."""
    try:
        data = body[key] if key is not None else body
        return model.model_validate(data)
    except (KeyError, TypeError, ValidationError) as exc:
        logger.warning("Unexpected %s payload: %s", model.__name__, exc)
        raise NoticeBoardAPIError(BAD_RESPONSE) from exc
