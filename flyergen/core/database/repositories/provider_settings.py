"""Provider settings repository."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.provider_settings import ProviderSettings
from .base import AsyncSQLModelRepository


class ProviderSettingsRepository(AsyncSQLModelRepository[ProviderSettings]):
    """Repository for provider settings presets."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ProviderSettings)

    async def get_default(self) -> Optional[ProviderSettings]:
        """Newest preset flagged default and active, across providers."""
        stmt = (
            select(ProviderSettings)
            .where(ProviderSettings.is_default == True)  # noqa: E712
            .where(ProviderSettings.is_active == True)  # noqa: E712
            .order_by(ProviderSettings.created_at.desc())  # type: ignore[attr-defined]
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_active_for_provider(self, provider_id: str) -> Optional[ProviderSettings]:
        """Newest active preset of a provider."""
        stmt = (
            select(ProviderSettings)
            .where(ProviderSettings.provider_id == provider_id)
            .where(ProviderSettings.is_active == True)  # noqa: E712
            .order_by(ProviderSettings.created_at.desc())  # type: ignore[attr-defined]
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_by_name(self, provider_id: str, name: str) -> Optional[ProviderSettings]:
        stmt = (
            select(ProviderSettings)
            .where(ProviderSettings.provider_id == provider_id)
            .where(ProviderSettings.name == name)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def search(
        self, provider_id: Optional[str] = None, is_active: Optional[bool] = None
    ) -> List[ProviderSettings]:
        """Presets ordered by provider, defaults first, newest first."""
        stmt = select(ProviderSettings)
        if provider_id:
            stmt = stmt.where(ProviderSettings.provider_id == provider_id)
        if is_active is not None:
            stmt = stmt.where(ProviderSettings.is_active == is_active)
        stmt = stmt.order_by(
            ProviderSettings.provider_id.asc(),  # type: ignore[attr-defined]
            ProviderSettings.is_default.desc(),  # type: ignore[attr-defined]
            ProviderSettings.created_at.desc(),  # type: ignore[attr-defined]
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def clear_default(self, provider_id: str, exclude_id: Optional[str] = None) -> None:
        """Unset the default flag on the provider's presets, except ``exclude_id``.

        The change is flushed but not committed; the caller commits it together
        with the preset it is saving.
        """
        stmt = (
            update(ProviderSettings)
            .where(ProviderSettings.provider_id == provider_id)
            .where(ProviderSettings.is_default == True)  # noqa: E712
        )
        if exclude_id is not None:
            stmt = stmt.where(ProviderSettings.id != exclude_id)
        await self.session.execute(stmt.values(is_default=False))
