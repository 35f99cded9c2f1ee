"""
Capability checks for mutating endpoints.

Callers present a signed access token (Authorization: Bearer <token>, or the
`access_token` cookie for the browser dashboard). The token's role maps to a
set of capabilities; endpoints declare the capability they need with
`require_capability(...)`.
"""

from __future__ import annotations

import os
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

import jwt
from fastapi import Cookie, Depends, Header

from archive_cms import messages
from archive_cms.db import load_env_once
from archive_cms.errors import Forbidden, Unauthorized

ARCHIVES_WRITE = "archives:write"
CONTENT_DELETE = "content:delete"

ROLE_CAPABILITIES: dict[str, frozenset[str]] = {
    "admin": frozenset({ARCHIVES_WRITE, CONTENT_DELETE}),
    "editor": frozenset({ARCHIVES_WRITE}),
}


class AuthSecurityError(RuntimeError):
    pass


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def jwt_secret() -> str:
    load_env_once()
    # In production, set JWT_SECRET in environment.
    return os.environ.get("JWT_SECRET", "dev-change-this-secret").strip() or "dev-change-this-secret"


def jwt_algorithm() -> str:
    return os.environ.get("JWT_ALG", "HS256").strip() or "HS256"


def access_token_expire_minutes() -> int:
    return _env_int("ACCESS_TOKEN_EXPIRE_MIN", 60)


@dataclass(frozen=True)
class Principal:
    subject: str
    role: str
    token: str

    @property
    def capabilities(self) -> frozenset[str]:
        return ROLE_CAPABILITIES.get(self.role, frozenset())

    def can(self, capability: str) -> bool:
        return capability in self.capabilities


def build_access_token(*, subject: str, role: str) -> str:
    issued_at = int(time.time())
    payload = {
        "sub": str(subject),
        "role": role,
        "type": "access",
        "iat": issued_at,
        "exp": issued_at + (access_token_expire_minutes() * 60),
    }
    return jwt.encode(payload, jwt_secret(), algorithm=jwt_algorithm())


def decode_access_token(token: str) -> dict[str, Any]:
    raw = (token or "").strip()
    if not raw:
        raise AuthSecurityError("Access token is empty.")

    try:
        payload = jwt.decode(raw, jwt_secret(), algorithms=[jwt_algorithm()])
    except jwt.InvalidTokenError as exc:
        raise AuthSecurityError("Invalid access token.") from exc

    if str(payload.get("type") or "").strip().lower() != "access":
        raise AuthSecurityError("Token is not an access token.")
    if not payload.get("sub"):
        raise AuthSecurityError("Token has no subject.")

    return payload


def _extract_bearer_token(authorization: str | None) -> str | None:
    raw = (authorization or "").strip()
    if not raw:
        return None

    parts = raw.split(" ", 1)
    if len(parts) != 2 or parts[0].strip().lower() != "bearer" or not parts[1].strip():
        raise Unauthorized(messages.INVALID_TOKEN)
    return parts[1].strip()


def _principal_from_token(token: str) -> Principal:
    try:
        payload = decode_access_token(token)
    except AuthSecurityError as exc:
        raise Unauthorized(messages.INVALID_TOKEN) from exc

    role = str(payload.get("role") or "").strip().lower()
    return Principal(subject=str(payload["sub"]), role=role, token=token)


async def get_optional_principal(
    authorization: str | None = Header(default=None),
    access_token: str | None = Cookie(default=None),
) -> Optional[Principal]:
    """
    Header wins over cookie. A bad header is an error; a bad cookie is
    treated as anonymous so a stale browser session still sees the page.
    """
    token = _extract_bearer_token(authorization)
    if token:
        return _principal_from_token(token)
    if access_token:
        try:
            return _principal_from_token(access_token)
        except Unauthorized:
            return None
    return None


async def get_current_principal(
    principal: Optional[Principal] = Depends(get_optional_principal),
) -> Principal:
    if principal is None:
        raise Unauthorized(messages.LOGIN_REQUIRED)
    return principal


def require_capability(capability: str) -> Callable[..., Any]:
    async def _dependency(principal: Principal = Depends(get_current_principal)) -> Principal:
        if not principal.can(capability):
            raise Forbidden(messages.PERMISSION_DENIED)
        return principal

    return _dependency
