"""
Activity audit logging.

Recording an activity is a side effect of the request that triggered it
and must never fail that request: every error is logged and swallowed.
Which actions are recorded is controlled by the activity log settings:

- content creation, deletion and moderation are always recorded,
- sign-in/sign-out only with ``LOG_AUTH_ACTIONS``,
- edits only with ``LOG_UPDATE_ACTIONS``,
- nothing at all with ``ENABLE_ACTIVITY_LOGGING=false``.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Type, Union

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from realty_portal.core.database.entities.activities import Activity
from realty_portal.core.database.entities.blog_posts import BlogPost
from realty_portal.core.database.entities.listings import Listing
from realty_portal.core.database.entities.users import User
from realty_portal.core.logging_config import get_logger
from realty_portal.core.models.domain.enums import ActivityAction, ActivityItemType
from realty_portal.server.core.config import ActivityLogConfig, settings

logger = get_logger(__name__)

ALWAYS_LOGGED = frozenset(
    {ActivityAction.APPROVE, ActivityAction.REJECT, ActivityAction.DELETE, ActivityAction.CREATE}
)
AUTH_ACTIONS = frozenset({ActivityAction.LOGIN, ActivityAction.LOGOUT})

ActionLike = Union[ActivityAction, str]


def should_log_activity(action: ActionLike, config: Optional[ActivityLogConfig] = None) -> bool:
    config = config or settings.activity_log
    action = ActivityAction(action)
    if not config.enabled:
        return False
    if action in ALWAYS_LOGGED:
        return True
    if action in AUTH_ACTIONS:
        return config.log_auth_actions
    if action == ActivityAction.UPDATE:
        return config.log_update_actions
    return True


def client_details(request: Optional[Request]) -> tuple[Optional[str], Optional[str]]:
    """``(ip_address, user_agent)`` of the request, proxy headers first."""
    if request is None:
        return None, None
    ip_address = request.headers.get("x-forwarded-for") or request.headers.get("x-real-ip")
    return ip_address or None, request.headers.get("user-agent") or None


async def log_activity(
    session: AsyncSession,
    *,
    user_id: str,
    action: ActionLike,
    item_type: Union[ActivityItemType, str],
    item_id: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
    request: Optional[Request] = None,
) -> Optional[Activity]:
    """Record one activity if the settings call for it.

    Returns:
        The stored Activity, or None when skipped or when storing failed
    """
    if not should_log_activity(action):
        return None

    ip_address, user_agent = (None, None)
    if not settings.activity_log.minimal_data:
        ip_address, user_agent = client_details(request)

    action_value = ActivityAction(action).value
    activity = Activity(
        user_id=user_id,
        action=action_value,
        item_type=ActivityItemType(item_type).value,
        item_id=item_id,
        details=metadata or {},
        ip_address=ip_address,
        user_agent=user_agent,
    )
    # The savepoint keeps a failed insert from expiring the caller's loaded objects
    try:
        async with session.begin_nested():
            session.add(activity)
    except Exception as e:
        logger.error(f"Failed to log activity {action_value} for user {user_id}: {e}", exc_info=True)
        activity = None

    try:
        await session.commit()
    except Exception as e:
        logger.error(f"Failed to commit activity log for user {user_id}: {e}", exc_info=True)
        try:
            await session.rollback()
        except Exception:
            logger.debug("Rollback after failed activity log also failed", exc_info=True)
        return None
    return activity


async def _content_metadata(
    session: AsyncSession,
    model: Type[Union[Listing, BlogPost]],
    item_id: str,
    metadata: Optional[Dict[str, Any]],
) -> Dict[str, Any]:
    """Add uploader and approver names/emails unless the caller already did."""
    enriched = dict(metadata or {})
    if enriched.get("uploadedBy") and enriched.get("uploadedByName"):
        return enriched
    try:
        item = await session.get(model, item_id)
        if item is None:
            return enriched
        uploader = await session.get(User, item.user_id)
        approver = await session.get(User, item.approved_by) if item.approved_by else None
        enriched.update(
            {
                "uploadedBy": item.user_id,
                "uploadedByName": uploader.name if uploader else None,
                "uploadedByEmail": uploader.email if uploader else None,
                "approvedBy": item.approved_by,
                "approvedByName": approver.name if approver else None,
                "approvedByEmail": approver.email if approver else None,
            }
        )
    except Exception as e:
        logger.error(f"Failed to fetch {model.__name__} {item_id} for activity metadata: {e}")
    return enriched


async def log_listing_activity(
    session: AsyncSession,
    user_id: str,
    action: ActionLike,
    listing_id: str,
    metadata: Optional[Dict[str, Any]] = None,
    request: Optional[Request] = None,
) -> Optional[Activity]:
    if not should_log_activity(action):
        return None
    enriched = await _content_metadata(session, Listing, listing_id, metadata)
    return await log_activity(
        session,
        user_id=user_id,
        action=action,
        item_type=ActivityItemType.LISTING,
        item_id=listing_id,
        metadata=enriched,
        request=request,
    )


async def log_blog_activity(
    session: AsyncSession,
    user_id: str,
    action: ActionLike,
    blog_id: str,
    metadata: Optional[Dict[str, Any]] = None,
    request: Optional[Request] = None,
) -> Optional[Activity]:
    if not should_log_activity(action):
        return None
    enriched = await _content_metadata(session, BlogPost, blog_id, metadata)
    return await log_activity(
        session,
        user_id=user_id,
        action=action,
        item_type=ActivityItemType.BLOG,
        item_id=blog_id,
        metadata=enriched,
        request=request,
    )


async def log_user_activity(
    session: AsyncSession,
    user_id: str,
    action: ActionLike,
    target_user_id: str,
    metadata: Optional[Dict[str, Any]] = None,
    request: Optional[Request] = None,
) -> Optional[Activity]:
    return await log_activity(
        session,
        user_id=user_id,
        action=action,
        item_type=ActivityItemType.USER,
        item_id=target_user_id,
        metadata=metadata,
        request=request,
    )


async def log_auth_activity(
    session: AsyncSession,
    user_id: str,
    action: ActionLike,
    request: Optional[Request] = None,
) -> Optional[Activity]:
    return await log_activity(
        session,
        user_id=user_id,
        action=action,
        item_type=ActivityItemType.AUTH,
        request=request,
    )
