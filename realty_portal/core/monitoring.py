"""
Monitoring and Tracing Configuration Module.

Optional Logfire integration for the Realty Portal backend:
- FastAPI endpoint tracing
- SQLAlchemy query tracing
- HTTPX tracing of the outbound reCAPTCHA / EmailJS calls
- Structured events for API requests, content moderation and uploads

Everything here is a no-op unless ``LOGFIRE_ENABLED`` and ``LOGFIRE_TOKEN``
are set; the plain ``logging`` output is always produced.
"""

import logging
import os
from typing import Any, Optional

import logfire
from fastapi import FastAPI

logger = logging.getLogger(__name__)

LOGFIRE_ENABLED = os.getenv("LOGFIRE_ENABLED", "false").lower() in ("true", "1", "yes")
LOGFIRE_TOKEN = os.getenv("LOGFIRE_TOKEN", "")
LOGFIRE_ENVIRONMENT = os.getenv("LOGFIRE_ENVIRONMENT", "development")
LOGFIRE_SERVICE_NAME = os.getenv("LOGFIRE_SERVICE_NAME", "realty-portal")
LOGFIRE_SERVICE_VERSION = os.getenv("LOGFIRE_SERVICE_VERSION", "1.0.0")

LOGFIRE_TRACE_SQLALCHEMY = os.getenv("LOGFIRE_TRACE_SQLALCHEMY", "true").lower() in ("true", "1", "yes")
LOGFIRE_TRACE_HTTPX = os.getenv("LOGFIRE_TRACE_HTTPX", "true").lower() in ("true", "1", "yes")
LOGFIRE_TRACE_FASTAPI = os.getenv("LOGFIRE_TRACE_FASTAPI", "true").lower() in ("true", "1", "yes")

_logfire_ready = False


def is_logfire_ready() -> bool:
    return _logfire_ready


def initialize_logfire(app: FastAPI | None = None) -> bool:
    """
    Initialize Logfire monitoring and tracing.

    Args:
        app: FastAPI application to instrument (optional).

    Returns:
        True when Logfire was configured, False when it stays disabled.
    """
    global _logfire_ready

    if not LOGFIRE_ENABLED:
        logger.info("Logfire monitoring is disabled. Set LOGFIRE_ENABLED=true to enable.")
        return False

    if not LOGFIRE_TOKEN:
        logger.warning("Logfire is enabled but LOGFIRE_TOKEN is not set. Monitoring will not work.")
        return False

    try:
        logfire.configure(
            token=LOGFIRE_TOKEN,
            service_name=LOGFIRE_SERVICE_NAME,
            service_version=LOGFIRE_SERVICE_VERSION,
            environment=LOGFIRE_ENVIRONMENT,
        )
    except Exception as e:
        logger.error(f"Failed to initialize Logfire: {e}", exc_info=True)
        return False

    if LOGFIRE_TRACE_SQLALCHEMY:
        try:
            logfire.instrument_sqlalchemy()
            logger.info("Logfire: SQLAlchemy instrumentation enabled")
        except Exception as e:
            logger.warning(f"Failed to instrument SQLAlchemy: {e}")

    if LOGFIRE_TRACE_HTTPX:
        try:
            logfire.instrument_httpx()
            logger.info("Logfire: HTTPX instrumentation enabled")
        except Exception as e:
            logger.warning(f"Failed to instrument HTTPX: {e}")

    if LOGFIRE_TRACE_FASTAPI and app is not None:
        try:
            logfire.instrument_fastapi(app=app)
            logger.info("Logfire: FastAPI instrumentation enabled")
        except Exception as e:
            logger.warning(f"Failed to instrument FastAPI: {e}")

    _logfire_ready = True
    logger.info(f"Logfire monitoring initialized: environment={LOGFIRE_ENVIRONMENT}, service={LOGFIRE_SERVICE_NAME}")
    return True


def _emit(message: str, level: str = "info", **attributes: Any) -> None:
    if not _logfire_ready:
        return
    try:
        getattr(logfire, level)(message, **attributes)
    except Exception:
        logger.debug(f"Could not send event to Logfire: {message}")


def log_api_request(method: str, path: str, status_code: int, duration_ms: float) -> None:
    """
    Log an API request with performance metrics.

    Args:
        method: HTTP method
        path: Request path
        status_code: HTTP status code
        duration_ms: Request duration in milliseconds
    """
    logger.debug(f"{method} {path} -> {status_code} ({duration_ms:.2f}ms)")
    _emit("API request completed", method=method, path=path, status_code=status_code, duration_ms=duration_ms)


def log_moderation(item_type: str, item_id: str, decision: str, admin_id: str) -> None:
    """Record an approval or rejection made in the admin panel."""
    _emit("Content moderated", item_type=item_type, item_id=item_id, decision=decision, admin_id=admin_id)


def log_upload(storage: str, original_size: int, processed_size: int) -> None:
    """Record an image upload and how much the processing step saved."""
    _emit("Image uploaded", storage=storage, original_size=original_size, processed_size=processed_size)


def log_error(error_type: str, error_message: str, context: Optional[dict] = None) -> None:
    """
    Log an error with context for debugging.

    Args:
        error_type: Type of error
        error_message: Error message
        context: Additional context dictionary
    """
    _emit(f"{error_type}: {error_message}", level="error", **(context or {}))
