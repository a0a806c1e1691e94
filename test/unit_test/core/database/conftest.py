"""Test configuration for database unit tests.

Repositories run against an in-memory SQLite database that is created fresh
for every test.
"""

from __future__ import annotations

from typing import AsyncGenerator, Awaitable, Callable

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlmodel.pool import StaticPool

from flyergen.core.database import create_all, create_sessionmaker
from flyergen.core.database.entities import ProviderSettings, SystemPrompt, User, UserRole
from flyergen.core.database.repositories import (
    ProviderSettingsRepository,
    SystemPromptRepository,
    UserRepository,
)


@pytest.fixture
async def in_memory_engine() -> AsyncGenerator:
    """Create in-memory SQLite engine with every table."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_all(engine)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
async def in_memory_session(in_memory_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create in-memory SQLite session for testing."""
    async with create_sessionmaker(in_memory_engine)() as session:
        yield session


@pytest.fixture
async def second_session(in_memory_engine) -> AsyncGenerator[AsyncSession, None]:
    """Another session on the same database, as a concurrent request would hold."""
    async with create_sessionmaker(in_memory_engine)() as session:
        yield session


@pytest.fixture
def create_user(in_memory_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Factory persisting a user; keyword arguments override the defaults."""
    counter = {"n": 0}

    async def _create(**overrides) -> User:
        counter["n"] += 1
        n = counter["n"]
        fields = {"username": f"user{n}", "email": f"user{n}@example.com", "role": UserRole.USER}
        fields.update(overrides)
        return await UserRepository(in_memory_session).create(User(**fields))

    return _create


@pytest.fixture
def create_prompt(in_memory_session: AsyncSession) -> Callable[..., Awaitable[SystemPrompt]]:
    async def _create(category: str, subcategory=None, version: int = 1, is_active: bool = True, text: str = "p"):
        prompt = SystemPrompt(
            category=category,
            subcategory=subcategory,
            name=f"{category}/{subcategory} v{version}",
            prompt_text=text,
            version=version,
            is_active=is_active,
        )
        return await SystemPromptRepository(in_memory_session).create(prompt)

    return _create


@pytest.fixture
def create_preset(in_memory_session: AsyncSession) -> Callable[..., Awaitable[ProviderSettings]]:
    async def _create(provider_id: str, name: str, **fields) -> ProviderSettings:
        preset = ProviderSettings(provider_id=provider_id, name=name, **fields)
        return await ProviderSettingsRepository(in_memory_session).create(preset)

    return _create
