"""Authentication for web API: admin password check, JWT, admin gate."""
from __future__ import annotations

import hmac
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

import config
from league.engine import LeagueEngine
from web.api.utils import get_engine

logger = logging.getLogger("asl.api")

http_bearer = HTTPBearer(auto_error=False)

ADMIN_SUBJECT = "admin"


def verify_admin_password(password: str) -> bool:
    """Constant-time compare against ADMIN_PASSWORD. An unset password never matches."""
    if not config.ADMIN_PASSWORD:
        return False
    return hmac.compare_digest(password.encode("utf-8"), config.ADMIN_PASSWORD.encode("utf-8"))


def create_access_token(subject: str = ADMIN_SUBJECT) -> str:
    expire = datetime.now(timezone.utc) + timedelta(days=config.JWT_EXPIRE_DAYS)
    payload = {"sub": subject, "role": "admin", "exp": expire}
    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    try:
        return jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
    except jwt.InvalidTokenError:
        return None


async def get_current_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(http_bearer),
    x_auth_token: Optional[str] = Header(None, alias="X-Auth-Token"),
    engine: LeagueEngine = Depends(get_engine),
) -> Optional[str]:
    """Return the admin subject, or None. Accepts Authorization: Bearer or X-Auth-Token.

    A valid token only counts while the stored admin flag is set, so logging
    out invalidates every issued token at once.
    """
    token = None
    if credentials and credentials.credentials:
        token = credentials.credentials
    elif x_auth_token:
        token = x_auth_token
    if not token:
        return None
    payload = decode_token(token)
    if not payload or payload.get("role") != "admin":
        return None
    if not await engine.session.is_logged_in():
        return None
    return payload.get("sub") or ADMIN_SUBJECT


async def require_admin(admin: Optional[str] = Depends(get_current_admin)) -> str:
    """Require an authenticated admin. Raises 401 otherwise."""
    if not admin:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return admin
