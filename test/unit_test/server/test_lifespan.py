"""
Unit tests for FastAPI application lifespan management.

Tests verify that startup initializes the database and checks the image
provider setup, and that shutdown closes the shared HTTP client.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import FastAPI

from flyergen.server.main import app, lifespan

pytestmark = pytest.mark.asyncio


@pytest.fixture
def provider_manager():
    manager = MagicMock()
    manager.registry.validate_provider_setup.return_value = {
        "valid": True,
        "available_providers": ["ideogram"],
        "errors": [],
    }
    return manager


class TestLifespanStartup:
    """Test application startup lifespan events."""

    async def test_startup_initializes_database(self, provider_manager):
        with (
            patch("flyergen.server.main.init_db", new_callable=AsyncMock) as mock_init_db,
            patch("flyergen.server.main.get_provider_manager", return_value=provider_manager),
            patch("flyergen.server.main.close_shared_clients", new_callable=AsyncMock),
        ):
            async with lifespan(FastAPI()):
                mock_init_db.assert_awaited_once()
                provider_manager.registry.validate_provider_setup.assert_called_once()

    async def test_database_failure_does_not_stop_startup(self, provider_manager):
        with (
            patch("flyergen.server.main.init_db", new_callable=AsyncMock, side_effect=RuntimeError("db down")),
            patch("flyergen.server.main.get_provider_manager", return_value=provider_manager),
            patch("flyergen.server.main.close_shared_clients", new_callable=AsyncMock),
            patch("flyergen.server.main.logger") as mock_logger,
        ):
            async with lifespan(FastAPI()):
                pass

        assert "Database initialization failed" in mock_logger.error.call_args[0][0]

    async def test_provider_problems_are_logged(self, provider_manager):
        provider_manager.registry.validate_provider_setup.return_value = {
            "valid": False,
            "available_providers": [],
            "errors": ["No image generation providers are configured"],
        }
        with (
            patch("flyergen.server.main.init_db", new_callable=AsyncMock),
            patch("flyergen.server.main.get_provider_manager", return_value=provider_manager),
            patch("flyergen.server.main.close_shared_clients", new_callable=AsyncMock),
            patch("flyergen.server.main.logger") as mock_logger,
        ):
            async with lifespan(FastAPI()):
                pass

        assert "No image generation providers are configured" in mock_logger.warning.call_args[0][0]


class TestLifespanShutdown:
    """Test application shutdown lifespan events."""

    async def test_shutdown_closes_shared_clients(self, provider_manager):
        with (
            patch("flyergen.server.main.init_db", new_callable=AsyncMock),
            patch("flyergen.server.main.get_provider_manager", return_value=provider_manager),
            patch("flyergen.server.main.close_shared_clients", new_callable=AsyncMock) as mock_close,
        ):
            async with lifespan(FastAPI()):
                mock_close.assert_not_awaited()
            mock_close.assert_awaited_once()


class TestApplication:
    """Test the assembled application."""

    def test_routes_are_mounted(self):
        paths = {route.path for route in app.routes}
        for path in (
            "/health",
            "/api/v1/auth/login",
            "/api/v1/images/generate",
            "/api/v1/billing/checkout",
            "/api/v1/webhooks/stripe",
            "/api/v1/contact",
            "/api/v1/provider-settings/default",
            "/api/v1/admin/users",
            "/api/v1/admin/system-prompts",
            "/api/v1/admin/provider-settings",
            "/api/v1/admin/providers/status",
        ):
            assert path in paths, path

    def test_openapi_under_api_prefix(self):
        assert app.openapi_url == "/api/v1/openapi.json"


def test_run_serves_with_configured_host_and_port():
    from flyergen.server import main

    with patch("uvicorn.run") as uvicorn_run:
        main.run()

    uvicorn_run.assert_called_once_with(
        main.app, host=main.settings.server_host, port=main.settings.server_port, log_config=None
    )
