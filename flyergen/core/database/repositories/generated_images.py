"""Generated image repository."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..entities.generated_images import GeneratedImage
from .base import AsyncSQLModelRepository


class GeneratedImageRepository(AsyncSQLModelRepository[GeneratedImage]):
    """Repository for generated images."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, GeneratedImage)

    async def list_for_user(
        self, user_id: str, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> List[GeneratedImage]:
        """List a user's images, newest first."""
        return await self.list(limit=limit, offset=offset, filters={"user_id": user_id})

    async def count_for_user(self, user_id: str) -> int:
        return await self.count(filters={"user_id": user_id})
