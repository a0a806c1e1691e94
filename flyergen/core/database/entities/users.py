"""
User entity models.

A user owns generated images, holds a credit balance that is debited per
generation or upscale, and carries the Stripe subscription fields that the
billing webhook keeps in sync.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import uuid4

from sqlmodel import Field

from ..base import Base, utc_now

DEFAULT_CREDITS = 3


class UserRole(str, Enum):
    """Role tiers used for authorization checks."""

    USER = "USER"
    ADMIN = "ADMIN"
    HERO = "HERO"


class UserBase(Base):
    """Base fields for users."""

    name: Optional[str] = Field(default=None, description="Display name")
    username: str = Field(unique=True, index=True, description="Unique login handle")
    email: str = Field(unique=True, index=True, description="Unique e-mail address")
    role: UserRole = Field(default=UserRole.USER, description="Role tier")
    credits: int = Field(default=DEFAULT_CREDITS, ge=0, description="Remaining generation credits")
    watermark_enabled: bool = Field(default=True, description="Whether generated images are watermarked")


class User(UserBase, table=True):
    """Persistent user account.

    Table: users
    """

    __tablename__ = "users"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=lambda: uuid4().hex, primary_key=True)
    password_hash: Optional[str] = Field(default=None, description="Password hash")

    # Stripe subscription state
    stripe_customer_id: Optional[str] = Field(default=None, unique=True)
    stripe_subscription_id: Optional[str] = Field(default=None, unique=True)
    stripe_price_id: Optional[str] = Field(default=None)
    stripe_current_period_end: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username}, role={self.role})>"
