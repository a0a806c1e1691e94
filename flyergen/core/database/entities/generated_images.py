"""
Generated image entity models.

Every successful generation or upscale stores one row. Upscaled images point
back at their source and the source points forward at its upscaled copy.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional
from uuid import uuid4

from sqlmodel import JSON, Field

from ..base import Base, utc_now


class GeneratedImageBase(Base):
    """Base fields for generated images."""

    user_id: str = Field(foreign_key="users.id", index=True, description="Owner of the image")
    prompt: str = Field(description="Final prompt sent to the provider")
    url: str = Field(description="Image URL or data URL returned by the provider")
    event_type: Optional[str] = Field(default=None, description="Event type of a flyer (e.g. WEDDING)")
    event_details: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON, description="Event form fields")
    aspect_ratio: str = Field(default="1:1", description="Aspect ratio (W:H)")
    style_name: Optional[str] = Field(default=None, description="Style preset name")
    custom_style: Optional[str] = Field(default=None, description="Free form style text")
    seed: Optional[int] = Field(default=None, description="Seed used by the provider")
    provider: Optional[str] = Field(default=None, description="Provider that produced the image")
    quality: Optional[str] = Field(default=None, description="Quality tier")
    generation_time_ms: Optional[int] = Field(default=None, description="Provider round trip in ms")
    provider_cost: Optional[float] = Field(default=None, description="Estimated provider cost in USD")


class GeneratedImage(GeneratedImageBase, table=True):
    """Persistent generated image.

    Table: generated_images
    """

    __tablename__ = "generated_images"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=lambda: uuid4().hex, primary_key=True)
    is_upscaled: bool = Field(default=False)
    original_image_id: Optional[str] = Field(default=None, foreign_key="generated_images.id")
    upscaled_image_id: Optional[str] = Field(default=None, foreign_key="generated_images.id")
    created_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"<GeneratedImage(id={self.id}, user_id={self.user_id}, provider={self.provider})>"
