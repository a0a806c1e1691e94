"""
Shared dependencies for API endpoints.

Application wide singletons (provider manager, Stripe gateway, billing
service, upscaler) are built lazily from the settings, and the request
scoped ones (database session, current user) come from FastAPI's dependency
injection. Endpoints use the ``Annotated`` aliases defined at the bottom.
"""

from __future__ import annotations

from typing import Annotated, Optional

import httpx
from fastapi import Cookie, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from flyergen.billing import BillingService, StripeGateway, build_pricing_data
from flyergen.core.database import get_session
from flyergen.core.database.entities.users import User
from flyergen.core.database.repositories import UserRepository
from flyergen.core.logging_config import get_logger
from flyergen.providers import ProviderConfigManager, ProviderManager, create_default_registry
from flyergen.server.core import constant
from flyergen.server.core.config import settings

from .permissions import is_admin_role
from .security import InvalidTokenError, decode_access_token
from .upscale import ImageUpscaler

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

_http_client: Optional[httpx.AsyncClient] = None
_provider_manager: Optional[ProviderManager] = None
_stripe_gateway: Optional[StripeGateway] = None
_billing_service: Optional[BillingService] = None


def get_http_client() -> httpx.AsyncClient:
    global _http_client
    if _http_client is None:
        _http_client = httpx.AsyncClient(timeout=120.0, follow_redirects=True)
    return _http_client


def get_provider_manager() -> ProviderManager:
    global _provider_manager
    if _provider_manager is None:
        config_manager = ProviderConfigManager(settings.image_providers)
        registry = create_default_registry(config_manager, client=get_http_client())
        _provider_manager = ProviderManager(registry)
    return _provider_manager


def get_stripe_gateway() -> StripeGateway:
    global _stripe_gateway
    if _stripe_gateway is None:
        _stripe_gateway = StripeGateway(settings.stripe.api_key, settings.stripe.webhook_secret)
    return _stripe_gateway


def get_billing_service() -> BillingService:
    global _billing_service
    if _billing_service is None:
        _billing_service = BillingService(
            get_stripe_gateway(),
            build_pricing_data(settings.stripe),
            billing_url=f"{settings.app_url.rstrip('/')}/dashboard/billing",
        )
    return _billing_service


def get_upscaler() -> ImageUpscaler:
    return ImageUpscaler(settings.image_providers.fal_key, get_http_client())


async def close_shared_clients() -> None:
    """Close the shared HTTP client and forget the singletons built on it."""
    global _http_client, _provider_manager
    if _http_client is not None:
        await _http_client.aclose()
    _http_client = None
    _provider_manager = None


SessionDep = Annotated[AsyncSession, Depends(get_session)]


async def get_current_user(
    session: SessionDep,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session_cookie: Optional[str] = Cookie(default=None, alias=constant.SESSION_COOKIE_NAME),
) -> User:
    """Resolve the user from a Bearer token or the session cookie.

    Raises:
        HTTPException: 401 when no valid token is presented or the user no longer exists.
    """
    token = credentials.credentials if credentials else session_cookie
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    try:
        user_id = decode_access_token(token)
    except InvalidTokenError as e:
        logger.debug(f"Rejected session token: {e}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid session token") from e

    user = await UserRepository(session).get_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return user


CurrentUserDep = Annotated[User, Depends(get_current_user)]


async def get_admin_user(user: CurrentUserDep) -> User:
    """Require an ADMIN or HERO user (403 otherwise)."""
    if not is_admin_role(user.role):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return user


AdminUserDep = Annotated[User, Depends(get_admin_user)]
ProviderManagerDep = Annotated[ProviderManager, Depends(get_provider_manager)]
BillingServiceDep = Annotated[BillingService, Depends(get_billing_service)]
UpscalerDep = Annotated[ImageUpscaler, Depends(get_upscaler)]
