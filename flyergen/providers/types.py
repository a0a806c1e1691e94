"""Data types shared by all image providers.

Pydantic models describe the request (``GenerationParams``), the result
(``GenerationResult``), what a provider can do (``ProviderCapabilities``) and
how it is configured (``ProviderConfig``).
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProviderType(str, Enum):
    """Identifiers of the supported providers."""

    IDEOGRAM = "ideogram"
    HUGGINGFACE = "huggingface"
    QWEN = "qwen"
    FAL_QWEN = "fal-qwen"
    FAL_IDEOGRAM = "fal-ideogram"


class AspectRatio(str, Enum):
    """Aspect ratios as ``W:H``."""

    SQUARE = "1:1"
    LANDSCAPE_16_9 = "16:9"
    PORTRAIT_9_16 = "9:16"
    LANDSCAPE_4_3 = "4:3"
    PORTRAIT_3_4 = "3:4"
    PORTRAIT_4_5 = "4:5"
    PORTRAIT_5_7 = "5:7"
    LANDSCAPE_3_2 = "3:2"
    PORTRAIT_2_3 = "2:3"
    PORTRAIT_10_16 = "10:16"
    LANDSCAPE_16_10 = "16:10"
    PORTRAIT_1_3 = "1:3"
    LANDSCAPE_3_1 = "3:1"


class ImageQuality(str, Enum):
    """Quality tiers, traded against speed and cost."""

    FAST = "fast"
    STANDARD = "standard"
    HIGH = "high"
    ULTRA = "ultra"


ALL_ASPECT_RATIOS: List[AspectRatio] = list(AspectRatio)
ALL_QUALITIES: List[ImageQuality] = list(ImageQuality)

# Ratios taller than wide, which several providers render with extra effort
PORTRAIT_RATIOS = frozenset(
    {AspectRatio.PORTRAIT_9_16, AspectRatio.PORTRAIT_3_4, AspectRatio.PORTRAIT_2_3, AspectRatio.PORTRAIT_5_7}
)

# Dimensions of roughly 1.75 megapixels per ratio, shared by Ideogram and Qwen
STANDARD_DIMENSIONS: Dict[AspectRatio, tuple[int, int]] = {
    AspectRatio.SQUARE: (1320, 1320),
    AspectRatio.LANDSCAPE_16_9: (1768, 992),
    AspectRatio.PORTRAIT_9_16: (992, 1768),
    AspectRatio.LANDSCAPE_4_3: (1528, 1144),
    AspectRatio.PORTRAIT_3_4: (1144, 1528),
    AspectRatio.PORTRAIT_4_5: (1184, 1480),
    AspectRatio.PORTRAIT_5_7: (1120, 1568),
    AspectRatio.LANDSCAPE_3_2: (1624, 1080),
    AspectRatio.PORTRAIT_2_3: (1080, 1624),
    AspectRatio.PORTRAIT_10_16: (1048, 1672),
    AspectRatio.LANDSCAPE_16_10: (1672, 1048),
    AspectRatio.PORTRAIT_1_3: (768, 2288),
    AspectRatio.LANDSCAPE_3_1: (2288, 768),
}


def normalize_aspect_ratio(value: Optional[str]) -> AspectRatio:
    """Parse ``"16:9"`` or ``"16x9"``; anything unsupported becomes ``1:1``."""
    if not value:
        return AspectRatio.SQUARE
    try:
        return AspectRatio(value.strip().replace("x", ":"))
    except ValueError:
        return AspectRatio.SQUARE


class GenerationParams(BaseModel):
    """Parameters of a single image generation request."""

    model_config = ConfigDict(use_enum_values=False)

    prompt: str = Field(description="Text prompt")
    aspect_ratio: AspectRatio = Field(default=AspectRatio.SQUARE)
    quality: Optional[ImageQuality] = Field(default=None)
    seed: Optional[int] = Field(default=None, ge=0)
    randomize_seed: bool = Field(default=False)

    # Event flyer context
    event_type: Optional[str] = Field(default=None)
    event_details: Optional[Dict[str, Any]] = Field(default=None)
    style_name: Optional[str] = Field(default=None)
    custom_style: Optional[str] = Field(default=None)
    style_reference_images: Optional[List[str]] = Field(default=None)

    user_id: Optional[str] = Field(default=None)
    watermark_enabled: bool = Field(default=True)

    # Free-form provider specific overrides (camelCase keys)
    provider_options: Dict[str, Any] = Field(default_factory=dict)


class ImageMetadata(BaseModel):
    """Describes the produced image."""

    width: int
    height: int
    aspect_ratio: AspectRatio
    prompt: str
    quality: Optional[ImageQuality] = None


class GenerationResult(BaseModel):
    """Outcome of a successful generation."""

    image_data: str = Field(description="Image URL or data URL")
    mime_type: str = Field(default="image/png")
    seed: Optional[int] = None
    provider: ProviderType
    cost: Optional[float] = None
    generation_time: int = Field(description="Round trip in milliseconds")
    metadata: ImageMetadata
    provider_data: Dict[str, Any] = Field(default_factory=dict)


class RateLimits(BaseModel):
    requests_per_minute: int
    requests_per_hour: int
    requests_per_day: int


class Pricing(BaseModel):
    cost_per_image: float
    currency: str = "USD"
    free_quota: Optional[int] = None


class ProviderCapabilities(BaseModel):
    """Static description of what a provider supports."""

    supported_aspect_ratios: List[AspectRatio]
    supported_qualities: List[ImageQuality]
    max_prompt_length: int
    supports_seeds: bool
    supports_style_images: bool
    supports_image_editing: bool
    rate_limits: Optional[RateLimits] = None
    pricing: Optional[Pricing] = None


class ProviderConfig(BaseModel):
    """Runtime configuration of one provider."""

    type: ProviderType
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    enabled: bool = True
    priority: int = 0
    options: Dict[str, Any] = Field(default_factory=dict)
