"""Caller identity and anti-forgery tokens.

Both are HS256 JWTs signed with the configured secret key. Access tokens carry
the caller identity in `sub`; anti-forgery tokens are bound to the same identity
and marked with `purpose`, so one can never be used in place of the other.
"""

from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import uuid4

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from src.config.settings import settings

ANTIFORGERY_HEADER = "X-CSRF-Token"
ANTIFORGERY_PURPOSE = "antiforgery"

security = HTTPBearer(auto_error=False)


def _encode(claims: dict[str, Any], expires_minutes: int) -> str:
    claims = {**claims, "exp": datetime.now(UTC) + timedelta(minutes=expires_minutes)}
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def _decode(token: str) -> dict[str, Any]:
    return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])


def create_access_token(
    identity: str, expires_minutes: int = settings.access_token_expire_minutes
) -> str:
    return _encode({"sub": identity}, expires_minutes)


def issue_antiforgery_token(identity: str) -> str:
    return _encode(
        {"sub": identity, "purpose": ANTIFORGERY_PURPOSE, "jti": uuid4().hex},
        settings.antiforgery_token_expire_minutes,
    )


async def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str:
    """Resolve the caller identity from the bearer token, 401 when missing or invalid."""
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Authentication required",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise unauthorized
    try:
        claims = _decode(credentials.credentials)
    except JWTError:
        raise unauthorized

    identity = claims.get("sub")
    if not identity or claims.get("purpose") is not None:
        raise unauthorized
    return identity


async def require_antiforgery_token(
    identity: str = Depends(get_current_identity),
    token: str | None = Header(default=None, alias=ANTIFORGERY_HEADER),
) -> str:
    """Check the anti-forgery token of a state-mutating request, returns the identity."""
    invalid = HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid anti-forgery token"
    )
    if not token:
        raise invalid
    try:
        claims = _decode(token)
    except JWTError:
        raise invalid

    if claims.get("purpose") != ANTIFORGERY_PURPOSE or claims.get("sub") != identity:
        raise invalid
    return identity
