"""
Exception handlers for the FastAPI application.

Integration errors (image storage, email relay, reCAPTCHA) are mapped to
specific status codes; anything else becomes a 500 carrying an error ID
that clients can quote when reporting the problem.
"""

import traceback

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from realty_portal.core.logging_config import get_logger
from realty_portal.core.monitoring import log_error
from realty_portal.integrations.emailjs import EmailRelayError
from realty_portal.integrations.media import InvalidImageError, MediaUploadError
from realty_portal.integrations.recaptcha import RecaptchaError

logger = get_logger(__name__)


async def invalid_image_handler(request: Request, exc: InvalidImageError) -> JSONResponse:
    logger.info(f"Rejected unreadable image on {request.url.path}: {exc}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": "File must be an image"})


async def media_upload_handler(request: Request, exc: MediaUploadError) -> JSONResponse:
    logger.error(f"Image upload failed on {request.url.path}: {exc}")
    log_error("MediaUploadError", str(exc), {"path": request.url.path})
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": "Failed to upload image", "error": str(exc)},
    )


async def email_relay_handler(request: Request, exc: EmailRelayError) -> JSONResponse:
    logger.error(f"Email relay failed on {request.url.path}: {exc}")
    log_error("EmailRelayError", str(exc), {"path": request.url.path})
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": "Failed to send message. Please try again later.", "error": str(exc)},
    )


async def recaptcha_handler(request: Request, exc: RecaptchaError) -> JSONResponse:
    logger.error(f"reCAPTCHA unavailable on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "reCAPTCHA verification is unavailable", "error": str(exc)},
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler to log detailed error information.

    This handler is called for any unhandled exception in the application.

    Args:
        request: The HTTP request that caused the exception
        exc: The exception that was raised

    Returns:
        JSONResponse with error details and error ID
    """
    error_id = id(exc)

    logger.error(
        f"Unhandled exception [{error_id}] in {request.method} {request.url.path}: {str(exc)}",
        exc_info=True,
        extra={
            "error_id": error_id,
            "method": request.method,
            "path": request.url.path,
            "query_params": dict(request.query_params),
            "client": request.client.host if request.client else "unknown",
            "error_type": type(exc).__name__,
            "traceback": traceback.format_exc(),
        },
    )
    log_error(type(exc).__name__, str(exc), {"error_id": error_id, "path": request.url.path})

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Internal server error",
            "error_id": error_id,
            "error_type": type(exc).__name__,
        },
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(InvalidImageError, invalid_image_handler)
    app.add_exception_handler(MediaUploadError, media_upload_handler)
    app.add_exception_handler(EmailRelayError, email_relay_handler)
    app.add_exception_handler(RecaptchaError, recaptcha_handler)
    app.add_exception_handler(Exception, global_exception_handler)
    logger.debug("Exception handlers registered successfully")
