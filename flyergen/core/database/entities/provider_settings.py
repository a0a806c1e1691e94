"""
Provider settings entity models.

Admin-managed tuning presets for an image provider. ``base_settings`` holds
the fields every provider understands (``defaultQuality``, ``inferenceSteps``,
``guidanceScale``...), ``specific_settings`` the provider-only ones.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional
from uuid import uuid4

from sqlalchemy import UniqueConstraint
from sqlmodel import JSON, Field

from ..base import Base, utc_now


class ProviderSettingsBase(Base):
    """Base fields for provider settings."""

    provider_id: str = Field(index=True, description="Provider identifier (e.g. fal-qwen)")
    name: str = Field(description="Preset name")
    description: Optional[str] = Field(default=None)
    base_settings: Dict[str, Any] = Field(default_factory=dict, sa_type=JSON)
    specific_settings: Dict[str, Any] = Field(default_factory=dict, sa_type=JSON)
    is_active: bool = Field(default=True)
    is_default: bool = Field(default=False)


class ProviderSettings(ProviderSettingsBase, table=True):
    """Persistent provider settings preset.

    Table: provider_settings
    """

    __tablename__ = "provider_settings"
    __table_args__ = (
        UniqueConstraint("provider_id", "name", name="uq_provider_settings_name"),
        {"extend_existing": True},
    )

    id: str = Field(default_factory=lambda: uuid4().hex, primary_key=True)
    version: int = Field(default=1, ge=1)
    created_by: Optional[str] = Field(default=None)
    updated_by: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})
