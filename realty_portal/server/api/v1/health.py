"""
Health Check Endpoints.

This module provides basic system status endpoints (health, version,
database connectivity) used for monitoring and deployment verification.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from realty_portal.core.database import check_connection, get_session
from realty_portal.core.logging_config import get_logger
from realty_portal.server.core import constant

logger = get_logger(__name__)

router = APIRouter()


@router.get(
    "/health",
    summary="Health Check",
    description="Check the operational status of the API server.",
    response_description="Status object.",
)
async def health_check():
    """
    Health check endpoint.

    Returns a simple status indicator to confirm the server is running and reachable.
    """
    return {"status": "ok"}


@router.get(
    "/version",
    summary="Get Version",
    description="Retrieve version information for the API server.",
    response_description="Version object.",
)
async def version():
    """
    Get API version.

    Returns the current semantic version of the API.
    """
    return {"version": constant.API_VERSION, "name": constant.PROJECT_NAME}


@router.get(
    f"{constant.API_STR}/health/database",
    summary="Database Health Check",
    description="Run a trivial query against the database and report its latency.",
    response_description="Database health object.",
    responses={
        200: {"description": "Database reachable"},
        503: {"description": "Database unreachable"},
    },
)
async def database_health(session: AsyncSession = Depends(get_session)) -> JSONResponse:
    """
    Database health endpoint.

    - **healthy**: whether ``SELECT 1`` succeeded
    - **message**: human readable status
    - **latency_ms**: round trip time of the probe
    """
    health = await check_connection(session)
    if not health["healthy"]:
        logger.warning(health["message"])
    return JSONResponse(status_code=200 if health["healthy"] else 503, content=health)
