"""
Generated image I/O models for API requests and responses.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from flyergen.providers import ImageQuality, ProviderType


class GenerateImageRequest(BaseModel):
    """Schema for an image generation request."""

    prompt: str = Field(min_length=1, description="Text prompt")
    aspect_ratio: Optional[str] = Field(default="1:1", description="Aspect ratio as W:H or WxH")
    event_type: Optional[str] = Field(default=None, description="Event type of a flyer (e.g. WEDDING)")
    event_details: Optional[Dict[str, Any]] = Field(default=None, description="Answers of the event form")
    style_name: Optional[str] = Field(default=None, description="Style preset name")
    custom_style: Optional[str] = Field(default=None, description="Free form style text")
    provider: Optional[ProviderType] = Field(default=None, description="Preferred provider")
    quality: Optional[ImageQuality] = Field(default=None, description="Quality tier")
    seed: Optional[int] = Field(default=None, ge=0)
    provider_options: Dict[str, Any] = Field(default_factory=dict, description="Provider specific overrides")


class GeneratedImageRead(BaseModel):
    """Schema for reading a generated image."""

    id: str
    user_id: str
    prompt: str
    url: str
    event_type: Optional[str] = None
    event_details: Optional[Dict[str, Any]] = None
    aspect_ratio: str
    style_name: Optional[str] = None
    custom_style: Optional[str] = None
    seed: Optional[int] = None
    provider: Optional[str] = None
    quality: Optional[str] = None
    generation_time_ms: Optional[int] = None
    provider_cost: Optional[float] = None
    is_upscaled: bool = False
    original_image_id: Optional[str] = None
    upscaled_image_id: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class GenerateImageResponse(BaseModel):
    """Result of a successful generation."""

    image: GeneratedImageRead
    credits_remaining: int
    message: str


class GeneratedImageList(BaseModel):
    """A page of the user's images."""

    items: List[GeneratedImageRead]
    total: int
    limit: int
    offset: int


class UpscaleResponse(BaseModel):
    """Result of a successful upscale."""

    image: GeneratedImageRead
    credits_remaining: int
    message: str = "Image upscaled successfully"
