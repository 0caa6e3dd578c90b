"""
FastAPI dependencies for authentication and authorization.

The session token is read from the session cookie, falling back to an
``Authorization: Bearer`` header for API clients.
"""

from __future__ import annotations

import dataclasses
from typing import Optional

from fastapi import Depends, HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from realty_portal.core.database import get_session
from realty_portal.core.database.repositories.users import UserRepository
from realty_portal.core.logging_config import get_logger
from realty_portal.core.models.domain.enums import UserRole
from realty_portal.server.core.config import settings

from .session_tokens import (
    InvalidSessionError,
    SessionClaims,
    SessionExpiredError,
    decode_session_token,
    refresh_activity,
)

logger = get_logger(__name__)


def set_session_cookie(response: Response, token: str) -> None:
    config = settings.session
    response.set_cookie(
        key=config.cookie_name,
        value=token,
        max_age=config.max_age_seconds,
        httponly=True,
        secure=config.cookie_secure,
        samesite="lax",
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=settings.session.cookie_name, path="/")


def read_session_token(request: Request) -> Optional[str]:
    token = request.cookies.get(settings.session.cookie_name)
    if token:
        return token
    authorization = request.headers.get("authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials.strip()
    return None


def _resolve(request: Request, response: Response) -> tuple[Optional[SessionClaims], Optional[str]]:
    """Decode the request's session, sliding its activity window when due.

    Returns:
        ``(claims, failure_reason)``; exactly one of them is None unless no
        token was sent at all
    """
    token = read_session_token(request)
    if not token:
        return None, None
    try:
        claims = decode_session_token(token)
    except SessionExpiredError as e:
        logger.info(f"Rejected expired session: {e.reason}")
        clear_session_cookie(response)
        return None, e.reason
    except InvalidSessionError as e:
        logger.warning(f"Rejected invalid session token: {e}")
        clear_session_cookie(response)
        return None, "invalid"

    refreshed = refresh_activity(claims)
    if refreshed:
        set_session_cookie(response, refreshed)
    return claims, None


async def get_optional_user(request: Request, response: Response) -> Optional[SessionClaims]:
    """The signed-in user's claims, or None for anonymous visitors."""
    claims, _ = _resolve(request, response)
    return claims


async def require_user(request: Request, response: Response) -> SessionClaims:
    """Claims of the signed-in user; 401 when there is no usable session."""
    claims, reason = _resolve(request, response)
    if claims is None:
        detail = "Unauthorized" if reason in (None, "invalid") else f"Session expired ({reason})"
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)
    return claims


async def require_admin(
    claims: SessionClaims = Depends(require_user),
    session: AsyncSession = Depends(get_session),
) -> SessionClaims:
    """Claims of a signed-in admin; 403 for any other role.

    A token that already says ADMIN is trusted. Otherwise the role is
    re-read from the database, since it may have been raised after sign-in.
    """
    if claims.role == UserRole.ADMIN.value:
        return claims

    user = await UserRepository(session).get_by_id(claims.user_id)
    if user is not None and user.role == UserRole.ADMIN.value:
        return dataclasses.replace(claims, role=user.role)
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden: admin access required")
