"""
Request Authentication

Search is open to anonymous callers. When a bearer token is supplied and a
JWT secret is configured, the token is verified and turned into a
``CallerIdentity`` that travels with the request context.

Admin endpoints require the configured admin API key.
"""

from __future__ import annotations

import jwt
from typing import Optional

from fastapi import Depends, Header, HTTPException, Query, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from ..config import get_settings
from .models import CallerIdentity


# ---------------------------------------------------------------------
# Security Scheme
# ---------------------------------------------------------------------

security = HTTPBearer(auto_error=False)


# ---------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------

def _decode_token(token: str, secret: str, algo: str) -> dict:
    return jwt.decode(
        token,
        secret,
        algorithms=[algo],
        options={"require": ["exp", "user"]},
    )


# ---------------------------------------------------------------------
# Public Dependency
# ---------------------------------------------------------------------

def optional_caller(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[CallerIdentity]:
    """
    Resolve the caller identity from an optional bearer token.

    Returns
    -------
    Optional[CallerIdentity]
        ``None`` for anonymous requests or when no secret is configured.

    Raises
    ------
    HTTPException(401) for expired, malformed or incomplete tokens.
    """
    if creds is None:
        return None

    settings = get_settings()
    if not settings.jwt_secret:
        return None

    try:
        payload = _decode_token(creds.credentials, settings.jwt_secret, settings.jwt_algo)
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired.",
        )
    except jwt.InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or malformed token.",
        )

    username = payload.get("user")
    if not username or not isinstance(username, str):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token missing 'user' claim.",
        )

    roles = payload.get("roles", [])
    if not isinstance(roles, list):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="'roles' claim must be a list.",
        )

    return CallerIdentity(username=username, roles=roles)


# ---------------------------------------------------------------------
# Admin Dependency
# ---------------------------------------------------------------------

def verify_admin(
    x_admin_key: Optional[str] = Header(None, alias="x-admin-key"),
    key: Optional[str] = Query(None),
) -> None:
    """
    Verify the request carries the configured admin API key.

    Checks the ``x-admin-key`` header first, then the ``key`` query parameter.
    Admin access is refused outright when no key is configured.
    """
    settings = get_settings()
    expected_key = settings.admin_api_key.get_secret_value() if settings.admin_api_key else None

    if not expected_key:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access is not configured (admin_api_key missing)",
        )

    provided_key = x_admin_key or key
    if not provided_key or provided_key != expected_key:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or missing admin API key",
        )
