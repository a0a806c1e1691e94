"""
User and authentication I/O models for API requests and responses.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

from flyergen.core.database.entities.users import UserRole

USERNAME_PATTERN = r"^[a-zA-Z0-9_-]+$"


class RegisterRequest(BaseModel):
    """Schema for creating an account."""

    name: Optional[str] = Field(default=None, max_length=100, description="Display name")
    username: str = Field(
        min_length=3,
        max_length=20,
        pattern=USERNAME_PATTERN,
        description="Login handle: letters, digits, underscores and hyphens",
    )
    email: EmailStr = Field(description="E-mail address")
    password: str = Field(min_length=8, description="Password (at least 8 characters)")


class LoginRequest(BaseModel):
    """Schema for logging in with an e-mail address or a username."""

    identifier: str = Field(min_length=1, description="E-mail address or username")
    password: str = Field(min_length=1)


class TokenResponse(BaseModel):
    """Session token issued at login."""

    access_token: str
    token_type: str = "bearer"
    user: "UserRead"


class UserRead(BaseModel):
    """Schema for reading a user account."""

    id: str
    name: Optional[str] = None
    username: str
    email: str
    role: UserRole
    credits: int
    watermark_enabled: bool
    stripe_customer_id: Optional[str] = None
    stripe_price_id: Optional[str] = None
    stripe_current_period_end: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class UserList(BaseModel):
    """A page of users for the admin listing."""

    items: List[UserRead]
    total: int
    limit: int
    offset: int


class WatermarkUpdate(BaseModel):
    """Schema for toggling the watermark on generated images."""

    watermark_enabled: bool


class AdminUserUpdate(BaseModel):
    """Schema for the admin user update; omitted fields are left unchanged."""

    role: Optional[UserRole] = None
    credits: Optional[int] = Field(default=None, description="New credit balance (non-negative)")


TokenResponse.model_rebuild()
