"""
Global Exception Handler for the FlyerGen API.

Catches every exception no other handler claimed, logs it with the request
context under a generated error id, and answers with a generic 500 that
carries the same id so users can quote it.
"""

import traceback
from uuid import uuid4

from fastapi import Request
from fastapi.responses import JSONResponse

from flyergen.core.logging_config import get_logger

logger = get_logger(__name__)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Log an unhandled exception and return a 500 response.

    Args:
        request: The HTTP request that caused the exception
        exc: The exception that was raised

    Returns:
        JSONResponse with a generic message, the error id and the error type
    """
    error_id = uuid4().hex

    logger.error(
        f"Unhandled exception [{error_id}] in {request.method} {request.url.path}: {exc}",
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

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error_id": error_id,
            "error_type": type(exc).__name__,
        },
    )
