"""
Authentication: password hashing, signed session tokens and FastAPI dependencies.
"""

from .security import generate_temporary_password, hash_password, verify_password
from .session_tokens import (
    InvalidSessionError,
    SessionClaims,
    SessionExpiredError,
    decode_session_token,
    issue_session_token,
    mark_server_start,
    refresh_activity,
    server_start_time,
)

__all__ = [
    "InvalidSessionError",
    "SessionClaims",
    "SessionExpiredError",
    "decode_session_token",
    "generate_temporary_password",
    "hash_password",
    "issue_session_token",
    "mark_server_start",
    "refresh_activity",
    "server_start_time",
    "verify_password",
]
