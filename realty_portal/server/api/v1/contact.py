"""
Contact Endpoints.

reCAPTCHA verification for public forms and the contact form relay to
EmailJS. Both are rate limited per client address.
"""

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from realty_portal.core.logging_config import get_logger
from realty_portal.core.models.io.common import SuccessResponse
from realty_portal.core.models.io.contact import ContactRequest, RecaptchaVerifyRequest, RecaptchaVerifyResponse
from realty_portal.integrations.emailjs import send_contact_email
from realty_portal.integrations.recaptcha import verify_recaptcha
from realty_portal.server.core.config import settings
from realty_portal.services.rate_limit import limiter

from .common import bad_request, client_ip

logger = get_logger(__name__)

router = APIRouter(tags=["contact"])

_REQUIRED_FIELDS = (("full_name", "Full name"), ("email", "Email"), ("message", "Message"))


def _rate_limit(request: Request, scope: str) -> str:
    ip = client_ip(request)
    limiter.hit(
        key=f"{scope}:{ip}",
        limit=settings.contact_rate_limit,
        window_seconds=settings.contact_rate_window_seconds,
        detail="Too many requests. Please try again later.",
    )
    return ip


@router.post(
    "/verify-recaptcha",
    response_model=RecaptchaVerifyResponse,
    summary="Verify reCAPTCHA",
    description="Check a reCAPTCHA v3 token; a score of at least 0.5 is required.",
    responses={
        400: {"description": "Missing token or verification failed"},
        429: {"description": "Rate limited"},
        503: {"description": "reCAPTCHA not configured or unreachable"},
    },
)
async def verify_recaptcha_token(payload: RecaptchaVerifyRequest, request: Request):
    """
    Verify a reCAPTCHA token.

    - **token**: the token produced by the browser widget
    """
    ip = _rate_limit(request, "recaptcha")
    if not payload.token:
        raise bad_request("reCAPTCHA token is required")

    result = await verify_recaptcha(payload.token, ip)
    body = RecaptchaVerifyResponse(
        success=result.success, score=result.score, error=result.error, error_codes=result.error_codes
    )
    if not result.success:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body.model_dump())
    return body


@router.post(
    "/contact",
    response_model=SuccessResponse,
    summary="Send Contact Message",
    description="Relay a contact form message by email. A reCAPTCHA token is required when reCAPTCHA is configured.",
    responses={
        400: {"description": "Missing fields or failed reCAPTCHA"},
        429: {"description": "Rate limited"},
        502: {"description": "Email relay failed"},
    },
)
async def send_contact_message(payload: ContactRequest, request: Request) -> SuccessResponse:
    """
    Send a contact message.

    - **full_name** / **email** / **message**: required
    - **phone** / **interest**: optional
    - **recaptcha_token**: required when the server has a reCAPTCHA secret
    """
    ip = _rate_limit(request, "contact")
    for field_name, label in _REQUIRED_FIELDS:
        value = getattr(payload, field_name)
        if not value or not value.strip():
            raise bad_request(f"{label} is required")

    if settings.recaptcha.secret_key:
        if not payload.recaptcha_token:
            raise bad_request("reCAPTCHA token is required")
        result = await verify_recaptcha(payload.recaptcha_token, ip)
        if not result.success:
            raise bad_request(result.error or "reCAPTCHA verification failed")

    await send_contact_email(payload)
    logger.info(f"Contact message from {payload.email} relayed")
    return SuccessResponse(message="Message sent successfully")
