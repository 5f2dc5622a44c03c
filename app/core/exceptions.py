"""
Exceptions for the notice board.

Repositories and services raise these; the API layer turns any
``NoticeBoardError`` into ``{"success": false, "message": ..., "code": ...}``
with the matching HTTP status. The client raises ``NoticeBoardAPIError`` for
transport failures and non-2xx responses.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class NoticeBoardError(Exception):
    """Base exception for all notice board errors"""

    status_code = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"success": False, "message": self.message, "code": self.code}
        if self.details:
            out["details"] = self.details
        return out


class NoticeValidationError(NoticeBoardError):
    """A write was rejected (missing field, bad enum value, bad upload)"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, code="VALIDATION_ERROR", details={"field": field} if field else None)


class AuthenticationError(NoticeBoardError):
    """Missing, invalid or expired credentials"""

    status_code = 401

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message, code="AUTH_FAILED")


class AuthorizationError(NoticeBoardError):
    """Authenticated but not allowed"""

    status_code = 403

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, code="NOT_AUTHORIZED")


class NoticeNotFoundError(NoticeBoardError):
    status_code = 404

    def __init__(self, notice_id: Any):
        super().__init__("Notice not found", code="NOTICE_NOT_FOUND", details={"notice_id": notice_id})


class NoticeBoardAPIError(NoticeBoardError):
    """Raised by the HTTP client; ``status_code`` is None for network failures."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message, code="API_ERROR")
        self.status_code = status_code
