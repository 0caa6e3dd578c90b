"""
Core utilities shared by the API server and the operator CLI.

Logging configuration, monitoring hooks, the database layer and the
request/response models live here.
"""

from realty_portal.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
