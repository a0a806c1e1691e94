"""
Contact message I/O models for API requests and responses.
"""

from __future__ import annotations

from datetime import datetime
from typing import List

from pydantic import BaseModel, EmailStr, Field

from flyergen.core.database.entities.contact_messages import ContactStatus


class ContactMessageCreate(BaseModel):
    """Schema for the public contact form."""

    first_name: str = Field(min_length=1, max_length=50)
    last_name: str = Field(min_length=1, max_length=50)
    email: EmailStr
    subject: str = Field(min_length=1, max_length=100)
    message: str = Field(min_length=10, max_length=2000)


class ContactMessageRead(BaseModel):
    """Schema for reading a contact message."""

    id: str
    first_name: str
    last_name: str
    email: str
    subject: str
    message: str
    status: ContactStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ContactStatusUpdate(BaseModel):
    status: ContactStatus


class ContactMessageList(BaseModel):
    items: List[ContactMessageRead]
    total: int
    limit: int
    offset: int
