"""
Middleware modules for the Realty Portal server.

This package contains custom middleware for request/response logging and
monitoring.
"""

from .request_logging import RequestLoggingMiddleware

__all__ = ["RequestLoggingMiddleware"]
