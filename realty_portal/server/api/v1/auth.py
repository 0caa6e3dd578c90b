"""
Authentication Endpoints.

Email/password sign-in issuing a signed session cookie, sign-out, and
session inspection/refresh for clients that keep the session alive.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from realty_portal.auth.deps import clear_session_cookie, require_user, set_session_cookie
from realty_portal.auth.security import verify_password
from realty_portal.auth.session_tokens import SessionClaims, issue_session_token
from realty_portal.core.database import get_session
from realty_portal.core.database.repositories import UserRepository
from realty_portal.core.logging_config import get_logger
from realty_portal.core.models.domain.enums import ActivityAction
from realty_portal.core.models.io.auth import LoginRequest, LoginResponse, SessionInfo, SessionUser
from realty_portal.server.core.config import settings
from realty_portal.services.activity_logger import log_auth_activity

logger = get_logger(__name__)

router = APIRouter(tags=["auth"])


def _as_datetime(epoch: int) -> datetime:
    return datetime.fromtimestamp(epoch, tz=timezone.utc)


def _session_info(claims: SessionClaims) -> SessionInfo:
    return SessionInfo(
        user=SessionUser(id=claims.user_id, email=claims.email, name=claims.name, role=claims.role),
        issued_at=_as_datetime(claims.issued_at),
        last_activity=_as_datetime(claims.last_activity),
        expires_at=_as_datetime(claims.issued_at + settings.session.max_age_seconds),
        inactivity_timeout_seconds=settings.session.inactivity_timeout_seconds,
    )


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Sign In",
    description="Verify email and password and start a session.",
    response_description="The signed-in user; the session cookie is set on the response.",
    responses={
        200: {"description": "Signed in"},
        401: {"description": "Invalid email or password"},
    },
)
async def login(
    credentials: LoginRequest,
    request: Request,
    response: Response,
    session: AsyncSession = Depends(get_session),
) -> LoginResponse:
    """
    Sign in with email and password.

    - **email**: account email, case-insensitive
    - **password**: account password
    """
    user = await UserRepository(session).get_by_email(credentials.email)
    if user is None or not verify_password(credentials.password, user.password):
        logger.info(f"Failed sign-in for {credentials.email}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")

    token = issue_session_token(user)
    set_session_cookie(response, token)
    await log_auth_activity(session, user.id, ActivityAction.LOGIN, request)
    logger.info(f"User {user.id} signed in")
    return LoginResponse(
        user=SessionUser(id=user.id, email=user.email, name=user.name, role=user.role),
        token=token,
    )


@router.post(
    "/logout",
    summary="Sign Out",
    description="End the current session and clear the session cookie.",
    response_description="Success flag.",
)
async def logout(
    request: Request,
    response: Response,
    claims: SessionClaims = Depends(require_user),
    session: AsyncSession = Depends(get_session),
):
    """
    Sign out.

    The cookie is cleared; the token itself stays valid until it expires,
    so API clients should discard it too.
    """
    clear_session_cookie(response)
    await log_auth_activity(session, claims.user_id, ActivityAction.LOGOUT, request)
    return {"success": True}


@router.get(
    "/session",
    response_model=SessionInfo,
    summary="Current Session",
    description="Return the signed-in user and the session timestamps.",
    responses={401: {"description": "No valid session"}},
)
async def current_session(claims: SessionClaims = Depends(require_user)) -> SessionInfo:
    """
    Inspect the current session.

    Reading the session counts as activity, so it also slides the
    inactivity window.
    """
    return _session_info(claims)


@router.post(
    "/session/refresh",
    response_model=SessionInfo,
    summary="Refresh Session",
    description="Record client activity; the cookie is re-issued once the refresh interval has passed.",
    responses={401: {"description": "No valid session"}},
)
async def refresh_session(claims: SessionClaims = Depends(require_user)) -> SessionInfo:
    """
    Keep the session alive.

    Called by clients on user interaction; the refreshed cookie (if any) is
    set by the authentication dependency.
    """
    return _session_info(claims)
