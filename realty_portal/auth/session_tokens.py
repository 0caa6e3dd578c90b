"""
Signed session tokens.

Sessions are HS256 JWTs carried in an HTTP-only cookie. Besides the
signature, a token is only accepted while all of these hold:

- the holder was active within the inactivity timeout (``last_activity``),
- the token is younger than the absolute max age (``iat``),
- the token was issued after the current server process started, so a
  restart signs everyone out.

``last_activity`` slides forward as the user keeps making requests; the
cookie is re-issued at most once per refresh interval.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import jwt

from realty_portal.core.logging_config import get_logger
from realty_portal.server.core.config import SessionConfig, settings

logger = get_logger(__name__)

ALGORITHM = "HS256"

_server_start_time: Optional[int] = None


def server_start_time() -> int:
    """Epoch second at which this server process started accepting sessions."""
    global _server_start_time
    if _server_start_time is None:
        _server_start_time = int(time.time())
    return _server_start_time


def mark_server_start(now: Optional[float] = None) -> int:
    """Reset the server start epoch (called from the application lifespan)."""
    global _server_start_time
    _server_start_time = int(now if now is not None else time.time())
    return _server_start_time


class InsecureSessionSecretError(RuntimeError):
    """Sessions would be signed with the publicly known placeholder secret."""


def check_session_secret(config: Optional[SessionConfig] = None, database_url: Optional[str] = None) -> None:
    """Refuse to sign sessions with the placeholder secret against a real database.

    Local SQLite databases only get an error in the log so a fresh checkout
    still starts.

    Raises:
        InsecureSessionSecretError: placeholder secret with a non-SQLite database
    """
    config = config or settings.session
    database_url = database_url or settings.database.url
    if not config.uses_default_secret:
        return
    logger.error("SESSION_SECRET is the placeholder value; anyone can forge session tokens until it is changed")
    if not database_url.startswith("sqlite"):
        raise InsecureSessionSecretError("Set SESSION_SECRET to a private value before serving a non-SQLite database")


class InvalidSessionError(Exception):
    """The token is malformed, tampered with, or missing required claims."""


class SessionExpiredError(Exception):
    """The token is authentic but no longer acceptable."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Session expired ({reason})")


@dataclass(frozen=True)
class SessionClaims:
    user_id: str
    email: str
    name: str
    role: str
    issued_at: int
    last_activity: int

    @property
    def is_admin(self) -> bool:
        return self.role == "ADMIN"


def _encode(claims: SessionClaims) -> str:
    payload: Dict[str, Any] = {
        "sub": claims.user_id,
        "email": claims.email,
        "name": claims.name,
        "role": claims.role,
        "iat": claims.issued_at,
        "last_activity": claims.last_activity,
        "exp": claims.issued_at + settings.session.max_age_seconds,
    }
    return jwt.encode(payload, settings.session.secret, algorithm=ALGORITHM)


def issue_session_token(user: Any, now: Optional[float] = None) -> str:
    """Sign a fresh session token for ``user``.

    Args:
        user: Any object with ``id``, ``email``, ``name`` and ``role`` attributes
        now: Current epoch seconds (defaults to the wall clock)

    Returns:
        Encoded JWT
    """
    server_start_time()
    issued_at = int(now if now is not None else time.time())
    role = getattr(user.role, "value", user.role)
    claims = SessionClaims(
        user_id=str(user.id),
        email=user.email,
        name=user.name,
        role=role,
        issued_at=issued_at,
        last_activity=issued_at,
    )
    return _encode(claims)


def decode_session_token(token: str, now: Optional[float] = None) -> SessionClaims:
    """Verify ``token`` and apply the session lifetime rules.

    Raises:
        InvalidSessionError: bad signature, malformed token or missing claims
        SessionExpiredError: ``reason`` is ``inactive``, ``max_age`` or ``server_restart``
    """
    config = settings.session
    current = now if now is not None else time.time()
    try:
        payload = jwt.decode(
            token,
            config.secret,
            algorithms=[ALGORITHM],
            options={"verify_exp": False, "verify_iat": False, "require": ["sub", "iat"]},
        )
    except jwt.InvalidTokenError as e:
        raise InvalidSessionError(str(e)) from e

    try:
        claims = SessionClaims(
            user_id=str(payload["sub"]),
            email=payload.get("email", ""),
            name=payload.get("name", ""),
            role=payload.get("role", ""),
            issued_at=int(payload["iat"]),
            last_activity=int(payload.get("last_activity", payload["iat"])),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidSessionError(f"Malformed session claims: {e}") from e

    if current - claims.last_activity > config.inactivity_timeout_seconds:
        raise SessionExpiredError("inactive")
    if current - claims.issued_at > config.max_age_seconds:
        raise SessionExpiredError("max_age")
    if config.invalidate_on_restart and claims.issued_at < server_start_time():
        raise SessionExpiredError("server_restart")
    return claims


def refresh_activity(claims: SessionClaims, now: Optional[float] = None) -> Optional[str]:
    """Re-issue the token with a newer ``last_activity``.

    ``iat`` is preserved so the max-age limit still counts from sign-in.

    Returns:
        The new token, or None while the previous refresh is recent enough
    """
    current = int(now if now is not None else time.time())
    if current - claims.last_activity < settings.session.activity_refresh_seconds:
        return None
    refreshed = SessionClaims(
        user_id=claims.user_id,
        email=claims.email,
        name=claims.name,
        role=claims.role,
        issued_at=claims.issued_at,
        last_activity=current,
    )
    logger.debug(f"Refreshing session activity for user {claims.user_id}")
    return _encode(refreshed)
