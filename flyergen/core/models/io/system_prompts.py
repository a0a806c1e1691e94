"""
System prompt I/O models for API requests and responses.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class SystemPromptCreate(BaseModel):
    """Schema for creating a system prompt version."""

    category: str = Field(min_length=1, description="Prompt category (e.g. event_type)")
    subcategory: Optional[str] = Field(default=None, description="Subcategory (e.g. WEDDING)")
    name: str = Field(min_length=1)
    description: Optional[str] = None
    prompt_text: str = Field(min_length=1)
    is_active: bool = True


class SystemPromptUpdate(BaseModel):
    """Schema for editing a prompt; the edit is stored as a new version."""

    name: Optional[str] = None
    description: Optional[str] = None
    prompt_text: Optional[str] = None
    is_active: Optional[bool] = None


class SystemPromptRead(BaseModel):
    """Schema for reading a system prompt version."""

    id: str
    category: str
    subcategory: Optional[str] = None
    name: str
    description: Optional[str] = None
    prompt_text: str
    is_active: bool
    version: int
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PromptCategoryRead(BaseModel):
    id: str
    name: str
    description: str
    subcategories: List[str]


class SeedResult(BaseModel):
    created: int


class SystemPromptImport(BaseModel):
    """Bulk import payload, usually an earlier export.

    Rows stay loose dicts so one malformed entry is counted as an error
    instead of rejecting the whole batch.
    """

    prompts: List[Dict[str, Any]]


class ImportResult(BaseModel):
    imported: int
    skipped: int
    errors: int
    total: int
