"""
Retry policy for transient database failures.

Pooled connections to a hosted Postgres are occasionally dropped between
requests. Operations wrapped with :func:`db_retry` are re-run a fixed
number of times, with a fixed pause, when the failure looks like a lost
connection; anything else propagates on the first attempt.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar

from sqlalchemy.exc import DBAPIError, InterfaceError
from sqlalchemy.ext.asyncio import AsyncSession
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_fixed,
)

from realty_portal.core.logging_config import get_logger
from realty_portal.server.core.config import settings

logger = get_logger(__name__)

T = TypeVar("T")

_CONNECTION_MARKERS = (
    "connection",
    "could not connect",
    "closed",
    "terminating",
    "timeout",
    "timed out",
    "server has gone away",
    "database is locked",
)


def is_transient_db_error(exc: BaseException) -> bool:
    """Return True when ``exc`` looks like a dropped or unavailable connection.

    ``OperationalError`` also covers permanent faults such as a missing table,
    so it only counts when the driver message names a connection problem.
    """
    if isinstance(exc, ConnectionError):
        return True
    if not isinstance(exc, DBAPIError):
        return False
    if exc.connection_invalidated or isinstance(exc, InterfaceError):
        return True
    message = str(exc.orig if exc.orig is not None else exc).lower()
    return any(marker in message for marker in _CONNECTION_MARKERS)


async def run_with_retry(
    operation: Callable[[], Awaitable[T]],
    *,
    session: Optional[AsyncSession] = None,
    attempts: Optional[int] = None,
    wait_seconds: Optional[float] = None,
) -> T:
    """Run ``operation`` and retry it on transient connection errors.

    Args:
        operation: Zero-argument coroutine function performing the database work
        session: Session to roll back before each retry, so the next attempt
            starts from a clean transaction
        attempts: Total attempts (defaults to ``DATABASE_RETRY_ATTEMPTS``)
        wait_seconds: Pause between attempts (defaults to ``DATABASE_RETRY_WAIT_SECONDS``)

    Returns:
        Whatever ``operation`` returns
    """
    db_config = settings.database
    retrying = AsyncRetrying(
        stop=stop_after_attempt(attempts or db_config.retry_attempts),
        wait=wait_fixed(db_config.retry_wait_seconds if wait_seconds is None else wait_seconds),
        retry=retry_if_exception(is_transient_db_error),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async for attempt in retrying:
        with attempt:
            if session is not None and attempt.retry_state.attempt_number > 1:
                await session.rollback()
            return await operation()
    raise RuntimeError("unreachable")  # pragma: no cover


def db_retry(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    """Decorator applying :func:`run_with_retry` to a repository method.

    The decorated method's ``self.session`` (when present) is rolled back
    between attempts.
    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        session = getattr(args[0], "session", None) if args else None
        return await run_with_retry(lambda: func(*args, **kwargs), session=session)

    return wrapper
