"""
Provider settings I/O models for API requests and responses.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from flyergen.providers import ProviderType


class ProviderSettingsUpsert(BaseModel):
    """Schema for creating or replacing a preset, matched by provider and name."""

    provider_id: ProviderType
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    base_settings: Dict[str, Any] = Field(default_factory=dict)
    specific_settings: Dict[str, Any] = Field(default_factory=dict)
    is_active: bool = True
    is_default: bool = False


class ProviderSettingsUpdate(BaseModel):
    """Schema for updating a preset by id; omitted fields are left unchanged."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    base_settings: Optional[Dict[str, Any]] = None
    specific_settings: Optional[Dict[str, Any]] = None
    is_active: Optional[bool] = None
    is_default: Optional[bool] = None


class ProviderSettingsRead(BaseModel):
    """Schema for reading a preset."""

    id: str
    provider_id: str
    name: str
    description: Optional[str] = None
    base_settings: Dict[str, Any]
    specific_settings: Dict[str, Any]
    is_active: bool
    is_default: bool
    version: int
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ProviderStatusRead(BaseModel):
    """Provider layer status for administrators."""

    default_provider: str
    available_providers: List[str]
    providers: List[Dict[str, Any]]
    validation: Dict[str, Any]
    health: Dict[str, Dict[str, Any]]
    circuit_breakers: Dict[str, Dict[str, Any]]
