"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS)
and exception handlers, and includes all API routers. It serves as the root
of the web server.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from flyergen.core.database import init_db
from flyergen.core.logging_config import get_logger, setup_logging

from .api.v1 import (
    admin_users,
    auth,
    billing,
    contact,
    health,
    images,
    provider_settings,
    system_prompts,
    users,
    webhooks,
)
from .core import constant
from .core.config import settings
from .exception_handlers import setup_exception_handlers
from .services.deps import close_shared_clients, get_provider_manager

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    On startup the database is initialized and the image providers are
    built; on shutdown the shared HTTP client is closed.
    """
    # Startup
    try:
        logger.info("Starting up FlyerGen Server...")
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    validation = get_provider_manager().registry.validate_provider_setup()
    if validation["valid"]:
        logger.info(f"Image providers ready: {validation['available_providers']}")
    else:
        logger.warning(f"Image provider setup has problems: {validation['errors']}")

    yield

    # Shutdown
    logger.info("Shutting down FlyerGen Server...")
    await close_shared_clients()


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    FlyerGen Server API

    This API provides the backend services for the FlyerGen AI flyer and image generator.
    It supports user accounts, credit based image generation through pluggable providers,
    Stripe subscriptions, and the admin tools for prompts, provider presets and users.
    """,
    version=constant.VERSION,
    openapi_url=f"{constant.API_V1_STR}/openapi.json",
    docs_url=f"{constant.API_V1_STR}/docs",
    redoc_url=f"{constant.API_V1_STR}/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.origins,
    allow_credentials=settings.cors.allow_credentials,
    allow_methods=settings.cors.allow_methods,
    allow_headers=settings.cors.allow_headers,
)

setup_exception_handlers(app)

app.include_router(health.router, tags=["health"])
app.include_router(auth.router, prefix=f"{constant.API_V1_STR}/auth", tags=["auth"])
app.include_router(users.router, prefix=f"{constant.API_V1_STR}/users", tags=["users"])
app.include_router(images.router, prefix=f"{constant.API_V1_STR}/images", tags=["images"])
app.include_router(billing.router, prefix=f"{constant.API_V1_STR}/billing", tags=["billing"])
app.include_router(webhooks.router, prefix=f"{constant.API_V1_STR}/webhooks", tags=["webhooks"])
app.include_router(contact.router, prefix=f"{constant.API_V1_STR}/contact", tags=["contact"])
app.include_router(
    provider_settings.public_router, prefix=f"{constant.API_V1_STR}/provider-settings", tags=["provider-settings"]
)
app.include_router(admin_users.router, prefix=f"{constant.API_V1_STR}/admin/users", tags=["admin"])
app.include_router(system_prompts.router, prefix=f"{constant.API_V1_STR}/admin/system-prompts", tags=["admin"])
app.include_router(
    provider_settings.router, prefix=f"{constant.API_V1_STR}/admin/provider-settings", tags=["admin"]
)
app.include_router(provider_settings.status_router, prefix=f"{constant.API_V1_STR}/admin/providers", tags=["admin"])


def run() -> None:
    """Serve the application with uvicorn on the configured host and port."""
    import uvicorn

    uvicorn.run(app, host=settings.server_host, port=settings.server_port, log_config=None)
