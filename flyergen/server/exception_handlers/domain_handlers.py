"""
Handlers for the domain errors raised by the services.

Provider failures become HTTP errors with the message shown to users, a
missing credit balance becomes ``402 Payment Required`` and invalid requests
become ``400 Bad Request``.
"""

from typing import Dict

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from flyergen.billing import BillingError
from flyergen.core.logging_config import get_logger
from flyergen.providers import ErrorCode, ImageGenerationError
from flyergen.server.services.errors import InsufficientCreditsError, MissingEventDetailsError
from flyergen.server.services.image_generation import user_facing_message

logger = get_logger(__name__)

ERROR_STATUS: Dict[ErrorCode, int] = {
    ErrorCode.INVALID_PARAMETERS: status.HTTP_400_BAD_REQUEST,
    ErrorCode.PROMPT_TOO_LONG: status.HTTP_400_BAD_REQUEST,
    ErrorCode.UNSUPPORTED_ASPECT_RATIO: status.HTTP_400_BAD_REQUEST,
    # Our credentials were rejected upstream; not the caller's fault
    ErrorCode.INVALID_API_KEY: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.UNAUTHORIZED: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.QUOTA_EXCEEDED: status.HTTP_429_TOO_MANY_REQUESTS,
    ErrorCode.RATE_LIMITED: status.HTTP_429_TOO_MANY_REQUESTS,
    ErrorCode.INSUFFICIENT_CREDITS: status.HTTP_402_PAYMENT_REQUIRED,
    ErrorCode.SERVICE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.TIMEOUT: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_for(error: ImageGenerationError) -> int:
    return ERROR_STATUS.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR)


async def image_generation_exception_handler(request: Request, exc: ImageGenerationError) -> JSONResponse:
    logger.error(
        f"Image generation failed in {request.method} {request.url.path}: {exc!r}",
        extra={"provider": exc.provider, "error_code": exc.code.value},
    )
    return JSONResponse(
        status_code=status_for(exc),
        content={"detail": user_facing_message(exc), "code": exc.code.value, "provider": exc.provider},
    )


async def insufficient_credits_exception_handler(request: Request, exc: InsufficientCreditsError) -> JSONResponse:
    logger.info(f"Insufficient credits for {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_402_PAYMENT_REQUIRED,
        content={"detail": exc.message, "code": ErrorCode.INSUFFICIENT_CREDITS.value},
    )


async def missing_event_details_exception_handler(request: Request, exc: MissingEventDetailsError) -> JSONResponse:
    logger.info(f"Rejected {exc.event_type} request {request.method} {request.url.path}: missing {exc.missing}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": exc.message, "missing": exc.missing},
    )


async def billing_exception_handler(request: Request, exc: BillingError) -> JSONResponse:
    logger.error(f"Billing error in {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY, content={"detail": str(exc)})


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Invalid request bodies and parameters are answered with 400."""
    errors = jsonable_encoder(exc.errors())
    logger.info(f"Rejected invalid request {request.method} {request.url.path}: {len(errors)} error(s)")
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": f"{field}: {message}" if field else message, "errors": errors},
    )
