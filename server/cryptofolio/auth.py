# cryptofolio/auth.py
from __future__ import annotations

import base64
import hashlib
import hmac
import json
import logging
import os
import time
from typing import Any, Dict

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from cryptofolio.errors import Unauthorized

logger = logging.getLogger(__name__)


# ===== Password hashing (stdlib PBKDF2) =====
_PBKDF2_ITERS = int(os.getenv("PBKDF2_ITERS", "200000"))


def hash_password(password: str) -> str:
    salt = os.urandom(16)
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, _PBKDF2_ITERS, dklen=32)
    return f"pbkdf2_sha256${_PBKDF2_ITERS}${_pad_free(salt)}${_pad_free(dk)}"


def verify_password(password: str, stored: str) -> bool:
    try:
        algo, iters_s, salt_b64, dk_b64 = stored.split("$", 3)
    except ValueError:
        return False
    if algo != "pbkdf2_sha256":
        return False
    salt = _unpad(salt_b64)
    dk_expected = _unpad(dk_b64)
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, int(iters_s), dklen=len(dk_expected))
    return hmac.compare_digest(dk, dk_expected)


# ===== JWT HS256 (stdlib) =====
JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret-change-me")
JWT_EXPIRE_MINUTES = int(os.getenv("JWT_EXPIRE_MINUTES", "60"))


_JWT_HEADER = {"alg": "HS256", "typ": "JWT"}


def create_access_token(user_id: int, email: str) -> tuple[str, int]:
    """Signed token for ``user_id``; returns it with its unix expiry."""
    issued = int(time.time())
    expires = issued + JWT_EXPIRE_MINUTES * 60
    claims = {"sub": str(user_id), "email": email, "iat": issued, "exp": expires}
    head_and_body = ".".join((_json_segment(_JWT_HEADER), _json_segment(claims)))
    return f"{head_and_body}.{_sign(head_and_body)}", expires


def decode_access_token(token: str) -> Dict[str, Any]:
    """Verify signature and expiry; raises ValueError on any defect."""
    head_and_body, dot, signature = token.rpartition(".")
    if not dot or head_and_body.count(".") != 1:
        raise ValueError("bad token")
    if not hmac.compare_digest(signature, _sign(head_and_body)):
        raise ValueError("bad signature")

    claims = json.loads(_unpad(head_and_body.split(".")[1]))
    if not isinstance(claims, dict):
        raise ValueError("bad token payload")
    if int(claims.get("exp", 0)) <= int(time.time()):
        raise ValueError("token expired")
    if not str(claims.get("sub", "")).isdigit():
        raise ValueError("bad token payload")
    return claims


def _json_segment(obj: Dict[str, Any]) -> str:
    return _pad_free(json.dumps(obj, separators=(",", ":")).encode("utf-8"))


def _sign(head_and_body: str) -> str:
    digest = hmac.new(JWT_SECRET.encode("utf-8"), head_and_body.encode("ascii"), hashlib.sha256)
    return _pad_free(digest.digest())


def _pad_free(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _unpad(segment: str) -> bytes:
    return base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))

# ===== Middleware =====
class AuthMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request.state.user = None
        request.state.auth_error = None

        auth = request.headers.get("authorization")
        if auth and auth.lower().startswith("bearer "):
            token = auth.split(" ", 1)[1].strip()
            try:
                request.state.user = decode_access_token(token)
            except (ValueError, TypeError, AttributeError) as e:
                request.state.auth_error = str(e)

        return await call_next(request)


def require_user(request: Request) -> Dict[str, Any]:
    user = getattr(request.state, "user", None)
    if user is None:
        reason = getattr(request.state, "auth_error", None) or "missing token"
        logger.info("auth_rejected path=%s reason=%s", request.url.path, reason)
        raise Unauthorized(reason)
    return user


def current_user_id(request: Request) -> int:
    """Identity of the caller, passed explicitly into every service call."""
    return int(require_user(request)["sub"])
