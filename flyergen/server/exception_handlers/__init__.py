"""
Exception handlers for the FlyerGen server.

This package contains the handlers for the domain errors, the catch-all
handler, and a setup function to register them with the FastAPI application.
"""

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from flyergen.billing import BillingError
from flyergen.core.logging_config import get_logger
from flyergen.providers import ImageGenerationError
from flyergen.server.services.errors import InsufficientCreditsError, MissingEventDetailsError

from .domain_handlers import (
    billing_exception_handler,
    image_generation_exception_handler,
    insufficient_credits_exception_handler,
    missing_event_details_exception_handler,
    validation_exception_handler,
)
from .global_handler import global_exception_handler

logger = get_logger(__name__)


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(ImageGenerationError, image_generation_exception_handler)
    app.add_exception_handler(InsufficientCreditsError, insufficient_credits_exception_handler)
    app.add_exception_handler(MissingEventDetailsError, missing_event_details_exception_handler)
    app.add_exception_handler(BillingError, billing_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
    logger.debug("Exception handlers registered successfully")


__all__ = ["setup_exception_handlers"]
