"""Ideogram v3 provider.

Calls ``POST {base_url}/v1/ideogram-v3/generate`` with a multipart form and
the ``Api-Key`` header. The response carries the image URL in
``data[0].url`` (or ``url`` for older responses).
"""

from __future__ import annotations

import time
from typing import Any, Dict, Optional

import httpx

from .base import ImageProvider
from .errors import ErrorCode, ImageGenerationError
from .types import (
    PORTRAIT_RATIOS,
    STANDARD_DIMENSIONS,
    AspectRatio,
    GenerationParams,
    GenerationResult,
    ImageMetadata,
    ImageQuality,
    Pricing,
    ProviderCapabilities,
    ProviderType,
    RateLimits,
)

DEFAULT_BASE_URL = "https://api.ideogram.ai"

SPEED_BY_QUALITY = {
    ImageQuality.FAST: "TURBO",
    ImageQuality.STANDARD: "BALANCED",
    ImageQuality.HIGH: "QUALITY",
    ImageQuality.ULTRA: "QUALITY",
}

# Portrait ratios render one speed level higher
SPEED_UPGRADE = {"TURBO": "BALANCED", "BALANCED": "QUALITY", "QUALITY": "QUALITY"}

COST_MULTIPLIER = {
    ImageQuality.FAST: 0.8,
    ImageQuality.STANDARD: 1.0,
    ImageQuality.HIGH: 1.5,
    ImageQuality.ULTRA: 2.0,
}

CAPABILITIES = ProviderCapabilities(
    supported_aspect_ratios=[
        AspectRatio.SQUARE,
        AspectRatio.LANDSCAPE_16_9,
        AspectRatio.PORTRAIT_9_16,
        AspectRatio.LANDSCAPE_4_3,
        AspectRatio.PORTRAIT_3_4,
        AspectRatio.LANDSCAPE_3_2,
        AspectRatio.PORTRAIT_2_3,
        AspectRatio.PORTRAIT_10_16,
        AspectRatio.LANDSCAPE_16_10,
        AspectRatio.PORTRAIT_1_3,
        AspectRatio.LANDSCAPE_3_1,
    ],
    supported_qualities=[ImageQuality.FAST, ImageQuality.STANDARD, ImageQuality.HIGH],
    max_prompt_length=2000,
    supports_seeds=True,
    supports_style_images=True,
    supports_image_editing=True,
    rate_limits=RateLimits(requests_per_minute=10, requests_per_hour=100, requests_per_day=1000),
    pricing=Pricing(cost_per_image=0.08, currency="USD", free_quota=25),
)


def rendering_speed(quality: ImageQuality, aspect_ratio: AspectRatio) -> str:
    """Map a quality tier to an Ideogram rendering speed."""
    speed = SPEED_BY_QUALITY.get(quality, "BALANCED")
    if aspect_ratio in PORTRAIT_RATIOS:
        speed = SPEED_UPGRADE[speed]
    return speed


class IdeogramProvider(ImageProvider):
    """Client for the Ideogram v3 generate API."""

    provider_type = ProviderType.IDEOGRAM

    @property
    def base_url(self) -> str:
        return (self.config.base_url or DEFAULT_BASE_URL).rstrip("/")

    def get_capabilities(self) -> ProviderCapabilities:
        return CAPABILITIES

    def validate_params(self, params: GenerationParams) -> None:
        """Ideogram only checks prompt and aspect ratio; it maps any quality to a speed."""
        caps = self.get_capabilities()
        if not params.prompt or not params.prompt.strip():
            raise ImageGenerationError("Prompt is required", ErrorCode.INVALID_PARAMETERS, self.name)
        if len(params.prompt) > caps.max_prompt_length:
            raise ImageGenerationError(
                f"Prompt too long. Maximum length is {caps.max_prompt_length} characters",
                ErrorCode.PROMPT_TOO_LONG,
                self.name,
            )
        if params.aspect_ratio not in caps.supported_aspect_ratios:
            raise ImageGenerationError(
                f"Unsupported aspect ratio: {params.aspect_ratio.value}",
                ErrorCode.UNSUPPORTED_ASPECT_RATIO,
                self.name,
            )

    def estimate_cost(self, params: GenerationParams) -> float:
        quality = params.quality or ImageQuality.STANDARD
        return CAPABILITIES.pricing.cost_per_image * COST_MULTIPLIER[quality]  # type: ignore[union-attr]

    async def generate_image(self, params: GenerationParams) -> GenerationResult:
        start = time.monotonic()
        self.validate_params(params)

        quality = params.quality or ImageQuality.STANDARD
        speed = rendering_speed(quality, params.aspect_ratio)
        form: Dict[str, Any] = {
            "prompt": params.prompt,
            "aspect_ratio": params.aspect_ratio.value.replace(":", "x"),
            "rendering_speed": speed,
        }
        if params.seed is not None:
            form["seed"] = str(params.seed)

        try:
            # Sending the fields as ``files`` makes httpx encode multipart/form-data
            response = await self._client.post(
                f"{self.base_url}/v1/ideogram-v3/generate",
                headers={"Api-Key": self.config.api_key or ""},
                files={key: (None, value) for key, value in form.items()},
            )
        except httpx.HTTPError as e:
            raise self.handle_error(e) from e

        if response.is_error:
            raise self.handle_api_error(response.status_code, response.text)

        data = response.json()
        image_url = _extract_url(data)
        if not image_url:
            raise ImageGenerationError(
                "Invalid response format from Ideogram API", ErrorCode.GENERATION_FAILED, self.name
            )

        width, height = STANDARD_DIMENSIONS.get(params.aspect_ratio, (1320, 1320))
        return GenerationResult(
            image_data=image_url,
            mime_type="image/png",
            seed=params.seed,
            provider=self.provider_type,
            cost=self.estimate_cost(params),
            generation_time=int((time.monotonic() - start) * 1000),
            metadata=ImageMetadata(
                width=width,
                height=height,
                aspect_ratio=params.aspect_ratio,
                prompt=params.prompt,
                quality=quality,
            ),
            provider_data={"api_version": "v3", "rendering_speed": speed, "original_response": data},
        )

    async def health_check(self) -> bool:
        try:
            response = await self._client.get(
                f"{self.base_url}/v1/health", headers={"Api-Key": self.config.api_key or ""}
            )
        except httpx.HTTPError as e:
            self._logger.warning(f"Ideogram health check failed: {e}")
            return False
        return response.is_success

    def handle_api_error(self, status_code: int, text: str) -> ImageGenerationError:
        """Map an Ideogram error response to an ``ImageGenerationError``."""
        if status_code == 401:
            return ImageGenerationError("Invalid Ideogram API key", ErrorCode.INVALID_API_KEY, self.name)
        if status_code == 402:
            return ImageGenerationError(
                "Insufficient credits in Ideogram account", ErrorCode.QUOTA_EXCEEDED, self.name
            )
        if status_code == 429:
            return ImageGenerationError(
                "Rate limit exceeded for Ideogram API", ErrorCode.RATE_LIMITED, self.name, retryable=True
            )
        if status_code == 503:
            return ImageGenerationError(
                "Ideogram service temporarily unavailable", ErrorCode.SERVICE_UNAVAILABLE, self.name, retryable=True
            )
        return ImageGenerationError(
            f"Ideogram API error ({status_code}): {text}",
            ErrorCode.GENERATION_FAILED,
            self.name,
            retryable=status_code >= 500,
        )


def _extract_url(data: Any) -> Optional[str]:
    if not isinstance(data, dict):
        return None
    items = data.get("data")
    if isinstance(items, list) and items and isinstance(items[0], dict) and items[0].get("url"):
        return items[0]["url"]
    return data.get("url")
