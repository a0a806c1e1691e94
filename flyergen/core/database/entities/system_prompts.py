"""
System prompt entity models.

System prompts are versioned: an update writes a new row with the next
version number, and lookups pick the highest active version.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import uuid4

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from ..base import Base, utc_now


class SystemPromptBase(Base):
    """Base fields for system prompts."""

    category: str = Field(index=True, description="Prompt category (e.g. event_type)")
    subcategory: Optional[str] = Field(default=None, index=True, description="Subcategory (e.g. WEDDING)")
    name: str = Field(description="Human-readable name")
    description: Optional[str] = Field(default=None, description="What the prompt is for")
    prompt_text: str = Field(description="Prompt text")
    is_active: bool = Field(default=True, description="Whether the prompt is used")


class SystemPrompt(SystemPromptBase, table=True):
    """Persistent system prompt version.

    Table: system_prompts
    """

    __tablename__ = "system_prompts"
    __table_args__ = (
        UniqueConstraint("category", "subcategory", "version", name="uq_system_prompt_version"),
        {"extend_existing": True},
    )

    id: str = Field(default_factory=lambda: uuid4().hex, primary_key=True)
    version: int = Field(default=1, ge=1)
    created_by: Optional[str] = Field(default=None)
    updated_by: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})
