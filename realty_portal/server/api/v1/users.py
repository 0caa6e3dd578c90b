"""
Signed-in User Endpoints.

The author dashboard (personal statistics and recent activity) and the
password change form.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from realty_portal.auth.deps import require_user
from realty_portal.auth.security import MIN_PASSWORD_LENGTH, hash_password, verify_password
from realty_portal.auth.session_tokens import SessionClaims
from realty_portal.core.database import get_session
from realty_portal.core.database.repositories import ActivityRepository, UserRepository
from realty_portal.core.logging_config import get_logger
from realty_portal.core.models.domain.enums import ActivityAction
from realty_portal.core.models.io.activities import ActivityListResponse
from realty_portal.core.models.io.common import SuccessResponse
from realty_portal.core.models.io.dashboard import DashboardResponse, PersonalStats, SystemStats
from realty_portal.core.models.io.users import ChangePasswordRequest
from realty_portal.services.activity_logger import log_user_activity
from realty_portal.services.dashboard import personal_stats, recent_activity, system_stats

from .common import activity_read, bad_request

logger = get_logger(__name__)

router = APIRouter(tags=["dashboard"])


@router.get(
    "/dashboard",
    response_model=DashboardResponse,
    summary="Dashboard",
    description="Personal content statistics and the 10 latest activities; admins also get the system overview.",
)
async def dashboard(
    claims: SessionClaims = Depends(require_user),
    session: AsyncSession = Depends(get_session),
) -> DashboardResponse:
    """
    Dashboard overview for the signed-in user.
    """
    stats = PersonalStats(**await personal_stats(session, claims.user_id))
    activities = [activity_read(activity, user) for activity, user in await recent_activity(session, claims.user_id)]
    system = SystemStats(**await system_stats(session)) if claims.is_admin else None
    return DashboardResponse(stats=stats, recent_activity=activities, system=system)


@router.get(
    "/dashboard/activity",
    response_model=ActivityListResponse,
    summary="My Activity",
    description="The signed-in user's own activity log, newest first.",
)
async def my_activity(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    claims: SessionClaims = Depends(require_user),
    session: AsyncSession = Depends(get_session),
) -> ActivityListResponse:
    rows = await recent_activity(session, claims.user_id, limit=limit, offset=offset)
    return ActivityListResponse(
        activities=[activity_read(activity, user) for activity, user in rows],
        total=await ActivityRepository(session).count({"user_id": claims.user_id}),
        limit=limit,
        offset=offset,
    )


@router.post(
    "/user/change-password",
    response_model=SuccessResponse,
    summary="Change Password",
    description="Change the signed-in user's password.",
    responses={
        400: {"description": "Missing fields, mismatch, too short or unchanged"},
        401: {"description": "Current password is incorrect"},
        404: {"description": "User not found"},
    },
)
async def change_password(
    payload: ChangePasswordRequest,
    request: Request,
    claims: SessionClaims = Depends(require_user),
    session: AsyncSession = Depends(get_session),
) -> SuccessResponse:
    """
    Change password.

    - **current_password**: must match the stored password
    - **new_password**: at least 8 characters and different from the current one
    - **confirm_password**: must equal new_password
    """
    if not payload.current_password or not payload.new_password or not payload.confirm_password:
        raise bad_request("All fields are required")
    if payload.new_password != payload.confirm_password:
        raise bad_request("New password and confirmation do not match")
    if len(payload.new_password) < MIN_PASSWORD_LENGTH:
        raise bad_request(f"New password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if payload.current_password == payload.new_password:
        raise bad_request("New password must be different from current password")

    repository = UserRepository(session)
    user = await repository.get_by_id(claims.user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    if not verify_password(payload.current_password, user.password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Current password is incorrect")

    user.password = hash_password(payload.new_password)
    await repository.update(user)
    await log_user_activity(
        session, claims.user_id, ActivityAction.UPDATE, claims.user_id, {"action": "password_change"}, request
    )
    logger.info(f"User {claims.user_id} changed their password")
    return SuccessResponse(message="Password changed successfully")
