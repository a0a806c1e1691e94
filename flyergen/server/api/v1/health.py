"""
Health Check Endpoints.

This module provides basic system status endpoints (health, version)
used for monitoring and deployment verification.
"""

from fastapi import APIRouter

from flyergen.core.database import check_database_health
from flyergen.server.core import constant
from flyergen.server.services.deps import SessionDep

router = APIRouter()


@router.get(
    "/health",
    summary="Health Check",
    description="Check the operational status of the API server and its database connection.",
    response_description="Status object.",
)
async def health_check(session: SessionDep):
    """
    Health check endpoint.

    Returns ``ok`` when the database answers, ``degraded`` otherwise. The
    server itself is reachable in both cases.
    """
    database_ok = await check_database_health(session)
    return {"status": "ok" if database_ok else "degraded", "database": "ok" if database_ok else "unavailable"}


@router.get(
    "/version",
    summary="Get Version",
    description="Retrieve version information for the API server.",
    response_description="Version object.",
)
async def version():
    """
    Get API version.

    Returns the service name, its semantic version and the API schema version.
    """
    return {"name": constant.PROJECT_NAME, "version": constant.VERSION, "schema_version": "v1"}
