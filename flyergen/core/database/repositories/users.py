"""
User repository.

Lookups by login identifiers and Stripe identifiers, and the credit
operations used by generation, upscaling and billing.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import delete, func, or_, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.generated_images import GeneratedImage
from ..entities.users import User, UserRole
from .base import AsyncSQLModelRepository, QueryBuilder


class UserRepository(AsyncSQLModelRepository[User]):
    """Repository for user accounts."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, User)

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalars().first()

    async def get_by_username(self, username: str) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.username == username))
        return result.scalars().first()

    async def get_by_login(self, identifier: str) -> Optional[User]:
        """Find a user by e-mail or username."""
        stmt = select(User).where(or_(User.email == identifier, User.username == identifier))
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_by_subscription_id(self, subscription_id: str) -> Optional[User]:
        stmt = select(User).where(User.stripe_subscription_id == subscription_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def deduct_credit(self, user: User, amount: int = 1) -> Optional[User]:
        """Atomically debit ``amount`` credits from the stored balance.

        The decrement runs in the database, so writes committed by other
        sessions since ``user`` was loaded are kept.

        Returns:
            ``user`` refreshed with the new balance, or None when the stored
            balance is below ``amount`` (nothing is debited)
        """
        stmt = (
            update(User)
            .where(User.id == user.id)
            .where(User.credits >= amount)
            .values(credits=User.credits - amount)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        await self.session.refresh(user)
        if result.rowcount == 0:
            return None
        return user

    async def search(
        self,
        search: Optional[str] = None,
        role: Optional[UserRole] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Tuple[List[User], int]:
        """Filter by role and a case-insensitive search over name and e-mail.

        Returns:
            The requested page (newest first) and the total number of matches
        """
        conditions = []
        if role is not None:
            conditions.append(User.role == role)
        if search:
            pattern = f"%{search.lower()}%"
            conditions.append(or_(func.lower(User.name).like(pattern), func.lower(User.email).like(pattern)))

        stmt = select(User)
        count_stmt = select(func.count()).select_from(User)
        if conditions:
            stmt = stmt.where(*conditions)
            count_stmt = count_stmt.where(*conditions)
        stmt = stmt.order_by(User.created_at.desc())  # type: ignore[attr-defined]
        stmt = QueryBuilder.apply_pagination(stmt, limit, offset)
        result = await self.session.execute(stmt)

        total = (await self.session.execute(count_stmt)).scalar_one()
        return list(result.scalars().all()), int(total)

    async def delete_account(self, user: User) -> None:
        """Delete a user together with the images they own."""
        await self.session.execute(delete(GeneratedImage).where(GeneratedImage.user_id == user.id))
        await self.session.delete(user)
        await self.session.commit()
