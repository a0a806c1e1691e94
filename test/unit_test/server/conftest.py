from types import SimpleNamespace
from typing import AsyncGenerator, Awaitable, Callable, Dict, List, Optional
from unittest.mock import AsyncMock, Mock, patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.pool import StaticPool

from flyergen.core.database.entities.users import User, UserRole
from flyergen.providers import (
    AspectRatio,
    GenerationParams,
    GenerationResult,
    ImageGenerationError,
    ImageProvider,
    ImageQuality,
    ProviderCapabilities,
    ProviderConfigManager,
    ProviderManager,
    ProviderRegistry,
    ProviderType,
)
from flyergen.providers.types import ImageMetadata
from flyergen.server.services.security import create_access_token, hash_password

# Use in-memory SQLite for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_PASSWORD = "correct-horse-battery"


@pytest_asyncio.fixture
async def test_engine():
    """Create a fresh in-memory database for each test."""
    # Importing the entities registers their tables on the metadata
    import flyergen.core.database.entities  # noqa: F401

    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(name="session")
async def session_fixture(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a new session for each test."""
    session_maker = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def other_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """A second session on the same database, standing in for a concurrent request."""
    session_maker = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture(name="client")
async def client_fixture(session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client with mocked lifespan and overridden dependencies."""
    from flyergen.core.database import get_session
    from flyergen.server.main import app

    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        yield session

    app.dependency_overrides[get_session] = get_session_override

    # Mock the lifespan to prevent database initialization during tests
    async def mock_lifespan(app):
        yield

    with patch("flyergen.server.main.lifespan", mock_lifespan):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
            yield client

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Factory persisting a user; the password is ``TEST_PASSWORD``."""

    async def _make_user(
        username: str = "alice",
        email: str = None,
        role: UserRole = UserRole.USER,
        credits: int = 3,
        **fields,
    ) -> User:
        user = User(
            username=username,
            email=email or f"{username}@example.com",
            role=role,
            credits=credits,
            password_hash=hash_password(TEST_PASSWORD),
            **fields,
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user

    return _make_user


def auth_headers(user: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture(name="auth_headers")
def auth_headers_fixture() -> Callable[[User], Dict[str, str]]:
    return auth_headers


@pytest.fixture
def password() -> str:
    """Password of the users created by ``make_user``."""
    return TEST_PASSWORD


class FakeProvider(ImageProvider):
    """In-memory provider; set ``error`` to make every generation fail."""

    provider_type = ProviderType.IDEOGRAM
    supports_seeds = True
    error: Optional[ImageGenerationError] = None

    def __init__(self, config, *, client=None) -> None:
        super().__init__(config, client=client)
        self.calls: List[GenerationParams] = []

    def get_capabilities(self) -> ProviderCapabilities:
        return ProviderCapabilities(
            supported_aspect_ratios=list(AspectRatio),
            supported_qualities=list(ImageQuality),
            max_prompt_length=2000,
            supports_seeds=self.supports_seeds,
            supports_style_images=False,
            supports_image_editing=False,
        )

    async def generate_image(self, params: GenerationParams) -> GenerationResult:
        self.calls.append(params)
        if self.error is not None:
            raise self.error
        return GenerationResult(
            image_data=f"https://mock.images/{len(self.calls)}.png",
            seed=params.seed,
            provider=self.provider_type,
            cost=0.08,
            generation_time=5,
            metadata=ImageMetadata(width=1024, height=1024, aspect_ratio=params.aspect_ratio, prompt=params.prompt),
        )


@pytest.fixture
def provider_manager() -> ProviderManager:
    """A provider manager whose only provider is a ``FakeProvider``."""
    settings = SimpleNamespace(
        ideogram_api_key="mock-key", hugging_face_api_token=None, fal_key=None, default_provider=None
    )
    registry = ProviderRegistry(ProviderConfigManager(settings))
    registry.register(ProviderType.IDEOGRAM, FakeProvider)
    registry.initialize()
    return ProviderManager(registry, sleep=AsyncMock())


@pytest.fixture
def fake_provider(provider_manager: ProviderManager) -> FakeProvider:
    return provider_manager.registry.get_provider(ProviderType.IDEOGRAM)


@pytest.fixture
def override_provider_manager(client, provider_manager: ProviderManager) -> ProviderManager:
    """Serve ``provider_manager`` to the endpoints of ``client``."""
    from flyergen.server.main import app
    from flyergen.server.services.deps import get_provider_manager

    app.dependency_overrides[get_provider_manager] = lambda: provider_manager
    return provider_manager


STRIPE_IDS = SimpleNamespace(
    starter_monthly_plan_id="price_starter_m",
    starter_yearly_plan_id="price_starter_y",
    pro_monthly_plan_id="price_pro_m",
    pro_yearly_plan_id="price_pro_y",
    business_monthly_plan_id="price_business_m",
    business_yearly_plan_id="price_business_y",
)


@pytest.fixture
def stripe_gateway() -> Mock:
    """A ``StripeGateway`` double; the async methods are ``AsyncMock``."""
    from flyergen.billing import StripeGateway

    gateway = Mock(spec=StripeGateway)
    gateway.retrieve_subscription = AsyncMock()
    gateway.create_checkout_session = AsyncMock(return_value={"url": "https://checkout.stripe.test/session"})
    gateway.create_billing_portal_session = AsyncMock(return_value={"url": "https://billing.stripe.test/portal"})
    gateway.is_subscription_canceled = AsyncMock(return_value=False)
    return gateway


@pytest.fixture
def billing_service(stripe_gateway: Mock):
    from flyergen.billing import BillingService, build_pricing_data

    return BillingService(stripe_gateway, build_pricing_data(STRIPE_IDS), billing_url="http://localhost/dashboard/billing")


@pytest.fixture
def override_billing_service(client, billing_service):
    """Serve ``billing_service`` to the endpoints of ``client``."""
    from flyergen.server.main import app
    from flyergen.server.services.deps import get_billing_service

    app.dependency_overrides[get_billing_service] = lambda: billing_service
    return billing_service
