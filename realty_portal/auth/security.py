"""
Password hashing and temporary password generation.
"""

from __future__ import annotations

import secrets
import string

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

LOWERCASE = string.ascii_lowercase
UPPERCASE = string.ascii_uppercase
DIGITS = string.digits
SPECIAL = "!@#$%^&*"

MIN_PASSWORD_LENGTH = 8


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check ``plain_password`` against a stored hash; malformed hashes never match."""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        return False


def generate_temporary_password(length: int = 12) -> str:
    """Random password with at least one lowercase, uppercase, digit and special character.

    Args:
        length: Total length, at least 4

    Returns:
        The generated password
    """
    if length < 4:
        raise ValueError("Temporary passwords need at least 4 characters")

    alphabet = LOWERCASE + UPPERCASE + DIGITS + SPECIAL
    chars = [
        secrets.choice(LOWERCASE),
        secrets.choice(UPPERCASE),
        secrets.choice(DIGITS),
        secrets.choice(SPECIAL),
    ]
    chars.extend(secrets.choice(alphabet) for _ in range(length - len(chars)))
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)
