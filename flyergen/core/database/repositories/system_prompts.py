"""
System prompt repository.

Prompts are versioned per (category, subcategory). The active prompt is the
highest active version.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.system_prompts import SystemPrompt
from .base import AsyncSQLModelRepository


def _subcategory_clause(subcategory: Optional[str]):
    if subcategory is None:
        return SystemPrompt.subcategory.is_(None)  # type: ignore[union-attr]
    return SystemPrompt.subcategory == subcategory


class SystemPromptRepository(AsyncSQLModelRepository[SystemPrompt]):
    """Repository for versioned system prompts."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, SystemPrompt)

    async def get_active(self, category: str, subcategory: Optional[str] = None) -> Optional[SystemPrompt]:
        """Get the highest active version for a category/subcategory."""
        stmt = (
            select(SystemPrompt)
            .where(SystemPrompt.category == category)
            .where(_subcategory_clause(subcategory))
            .where(SystemPrompt.is_active == True)  # noqa: E712
            .order_by(SystemPrompt.version.desc())  # type: ignore[attr-defined]
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list_active_by_category(self, category: str) -> List[SystemPrompt]:
        """Active prompts of a category ordered by subcategory, newest version first."""
        stmt = (
            select(SystemPrompt)
            .where(SystemPrompt.category == category)
            .where(SystemPrompt.is_active == True)  # noqa: E712
            .order_by(SystemPrompt.subcategory.asc(), SystemPrompt.version.desc())  # type: ignore[union-attr]
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_history(self, category: str, subcategory: Optional[str] = None) -> List[SystemPrompt]:
        """All versions for a category/subcategory, newest first."""
        stmt = (
            select(SystemPrompt)
            .where(SystemPrompt.category == category)
            .where(_subcategory_clause(subcategory))
            .order_by(SystemPrompt.version.desc())  # type: ignore[attr-defined]
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_latest_version(self, category: str, subcategory: Optional[str] = None) -> int:
        """Highest version number in use, 0 when none exist."""
        stmt = (
            select(func.max(SystemPrompt.version))
            .where(SystemPrompt.category == category)
            .where(_subcategory_clause(subcategory))
        )
        result = await self.session.execute(stmt)
        return int(result.scalar_one_or_none() or 0)

    async def get_by_name(self, category: str, subcategory: Optional[str], name: str) -> Optional[SystemPrompt]:
        """Newest version carrying ``name`` in a category/subcategory."""
        stmt = (
            select(SystemPrompt)
            .where(SystemPrompt.category == category)
            .where(_subcategory_clause(subcategory))
            .where(SystemPrompt.name == name)
            .order_by(SystemPrompt.version.desc())  # type: ignore[attr-defined]
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()
