# cryptofolio/errors.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

INVALID_CREDENTIALS = "Invalid credentials"
INVALID_CREDENTIALS_MESSAGE = "The email or password is incorrect. Please check your credentials."


class ApiError(Exception):
    """Base error rendered as ``{"error": ..., "details": [...]}``."""

    status_code = 500

    def __init__(self, message: str, details: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def body(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"error": self.message}
        if self.details:
            out["details"] = list(self.details)
        return out

    def headers(self) -> Optional[Dict[str, str]]:
        return None


class BadRequest(ApiError):
    status_code = 400


class NotFound(ApiError):
    status_code = 404


class Conflict(ApiError):
    status_code = 409


class Unauthorized(ApiError):
    """Every auth failure looks the same to the caller.

    Unknown email, wrong password, missing token and expired token all
    produce this body so callers cannot probe which accounts exist.
    """

    status_code = 401

    def __init__(self, reason: str = ""):
        super().__init__(INVALID_CREDENTIALS)
        self.reason = reason

    def body(self) -> Dict[str, Any]:
        return {"error": INVALID_CREDENTIALS, "message": INVALID_CREDENTIALS_MESSAGE}

    def headers(self) -> Optional[Dict[str, str]]:
        return {"WWW-Authenticate": "Bearer"}
