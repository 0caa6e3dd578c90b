"""
Contact form and reCAPTCHA I/O models.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class RecaptchaVerifyRequest(BaseModel):
    token: Optional[str] = None


class RecaptchaVerifyResponse(BaseModel):
    success: bool
    score: Optional[float] = None
    error: Optional[str] = None
    error_codes: List[str] = Field(default_factory=list)


class ContactRequest(BaseModel):
    """A message sent from the public contact form."""

    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    interest: Optional[str] = None
    message: Optional[str] = None
    recaptcha_token: Optional[str] = None
