"""Contact message repository."""

from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.contact_messages import ContactMessage, ContactStatus
from .base import AsyncSQLModelRepository, QueryBuilder


class ContactMessageRepository(AsyncSQLModelRepository[ContactMessage]):
    """Repository for contact form messages."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ContactMessage)

    async def search(
        self,
        status: Optional[ContactStatus] = None,
        search: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Tuple[List[ContactMessage], int]:
        """Filter by status and a case-insensitive search over the text fields.

        Returns:
            The requested page (newest first) and the total number of matches
        """
        conditions = []
        if status is not None:
            conditions.append(ContactMessage.status == status)
        if search:
            pattern = f"%{search.lower()}%"
            conditions.append(
                or_(
                    func.lower(ContactMessage.first_name).like(pattern),
                    func.lower(ContactMessage.last_name).like(pattern),
                    func.lower(ContactMessage.email).like(pattern),
                    func.lower(ContactMessage.subject).like(pattern),
                    func.lower(ContactMessage.message).like(pattern),
                )
            )

        stmt = select(ContactMessage)
        count_stmt = select(func.count()).select_from(ContactMessage)
        if conditions:
            stmt = stmt.where(*conditions)
            count_stmt = count_stmt.where(*conditions)
        stmt = stmt.order_by(ContactMessage.created_at.desc())  # type: ignore[attr-defined]
        stmt = QueryBuilder.apply_pagination(stmt, limit, offset)
        result = await self.session.execute(stmt)

        total = (await self.session.execute(count_stmt)).scalar_one()
        return list(result.scalars().all()), int(total)
