"""
Exception handlers for the Realty Portal server.

This package contains the handlers that turn integration failures and
unexpected exceptions into JSON responses, and a setup function to
register them with the FastAPI application.
"""

from .global_handler import setup_exception_handlers

__all__ = ["setup_exception_handlers"]
