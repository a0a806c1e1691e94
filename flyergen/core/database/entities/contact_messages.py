"""Contact form message entity models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from uuid import uuid4

from sqlmodel import Field

from ..base import Base, utc_now


class ContactStatus(str, Enum):
    """Triage state of a contact message."""

    NEW = "NEW"
    READ = "READ"
    REPLIED = "REPLIED"
    ARCHIVED = "ARCHIVED"


class ContactMessageBase(Base):
    """Base fields for contact messages."""

    first_name: str = Field(max_length=50)
    last_name: str = Field(max_length=50)
    email: str = Field(index=True)
    subject: str = Field(max_length=100)
    message: str = Field(max_length=2000)
    status: ContactStatus = Field(default=ContactStatus.NEW, index=True)


class ContactMessage(ContactMessageBase, table=True):
    """Persistent contact message.

    Table: contact_messages
    """

    __tablename__ = "contact_messages"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=lambda: uuid4().hex, primary_key=True)
    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})
