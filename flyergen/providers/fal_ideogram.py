"""Ideogram v3 hosted on Fal-AI (``fal-ai/ideogram/v3``).

Accepts every aspect ratio by mapping it to the closest Fal size preset.
Callers may pass Ideogram options (``negativePrompt``, ``style``,
``styleCodes``, ``colorPalette``...) through ``provider_options``.
"""

from __future__ import annotations

import time
from typing import Any, Dict

import httpx

from .errors import ErrorCode, ImageGenerationError
from .fal import FalProvider
from .types import (
    ALL_ASPECT_RATIOS,
    ALL_QUALITIES,
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

IMAGE_SIZE = {
    AspectRatio.SQUARE: "square_hd",
    AspectRatio.LANDSCAPE_16_9: "landscape_16_9",
    AspectRatio.PORTRAIT_9_16: "portrait_16_9",
    AspectRatio.LANDSCAPE_4_3: "landscape_4_3",
    AspectRatio.PORTRAIT_3_4: "portrait_4_3",
    AspectRatio.PORTRAIT_4_5: "portrait_4_3",
    AspectRatio.PORTRAIT_5_7: "portrait_4_3",
    AspectRatio.LANDSCAPE_3_2: "landscape_4_3",
    AspectRatio.PORTRAIT_2_3: "portrait_4_3",
    AspectRatio.PORTRAIT_10_16: "portrait_16_9",
    AspectRatio.LANDSCAPE_16_10: "landscape_16_9",
    AspectRatio.PORTRAIT_1_3: "portrait_16_9",
    AspectRatio.LANDSCAPE_3_1: "landscape_16_9",
}

DIMENSIONS = {
    AspectRatio.SQUARE: (1024, 1024),
    AspectRatio.LANDSCAPE_16_9: (1024, 576),
    AspectRatio.PORTRAIT_9_16: (576, 1024),
    AspectRatio.LANDSCAPE_4_3: (1024, 768),
    AspectRatio.PORTRAIT_3_4: (768, 1024),
    AspectRatio.PORTRAIT_4_5: (1024, 1280),
    AspectRatio.PORTRAIT_5_7: (1024, 1434),
    AspectRatio.LANDSCAPE_3_2: (1024, 683),
    AspectRatio.PORTRAIT_2_3: (683, 1024),
    AspectRatio.PORTRAIT_10_16: (640, 1024),
    AspectRatio.LANDSCAPE_16_10: (1024, 640),
    AspectRatio.PORTRAIT_1_3: (341, 1024),
    AspectRatio.LANDSCAPE_3_1: (1024, 341),
}

SPEED_BY_QUALITY = {
    ImageQuality.FAST: "TURBO",
    ImageQuality.STANDARD: "BALANCED",
    ImageQuality.HIGH: "QUALITY",
    ImageQuality.ULTRA: "QUALITY",
}

COST_PER_MEGAPIXEL = {"TURBO": 0.03, "BALANCED": 0.06, "QUALITY": 0.09}

CAPABILITIES = ProviderCapabilities(
    supported_aspect_ratios=ALL_ASPECT_RATIOS,
    supported_qualities=ALL_QUALITIES,
    max_prompt_length=1000,
    supports_seeds=True,
    supports_style_images=True,
    supports_image_editing=False,
    rate_limits=RateLimits(requests_per_minute=10, requests_per_hour=100, requests_per_day=1000),
    pricing=Pricing(cost_per_image=0.06, currency="USD"),
)

# provider option -> Fal input field, copied when truthy
PASSTHROUGH_OPTIONS = {
    "negativePrompt": "negative_prompt",
    "style": "style",
    "colorPalette": "color_palette",
    "customImageSize": "image_size",
}


class FalIdeogramProvider(FalProvider):
    """Client for ``fal-ai/ideogram/v3``."""

    provider_type = ProviderType.FAL_IDEOGRAM
    default_model = "fal-ai/ideogram/v3"

    def get_capabilities(self) -> ProviderCapabilities:
        return CAPABILITIES

    def validate_params(self, params: GenerationParams) -> None:
        caps = self.get_capabilities()
        if not params.prompt or not params.prompt.strip():
            raise ImageGenerationError("Prompt is required", ErrorCode.INVALID_PARAMETERS, self.name)
        if len(params.prompt) > caps.max_prompt_length:
            raise ImageGenerationError(
                f"Prompt is too long (max {caps.max_prompt_length} characters)", ErrorCode.PROMPT_TOO_LONG, self.name
            )
        if params.aspect_ratio not in caps.supported_aspect_ratios:
            raise ImageGenerationError(
                f"Unsupported aspect ratio: {params.aspect_ratio.value}",
                ErrorCode.UNSUPPORTED_ASPECT_RATIO,
                self.name,
            )

    def estimate_cost(self, params: GenerationParams) -> float:
        width, height = DIMENSIONS.get(params.aspect_ratio, (1024, 1024))
        speed = params.provider_options.get("renderingSpeed", "BALANCED")
        return width * height / 1_000_000 * COST_PER_MEGAPIXEL.get(speed, COST_PER_MEGAPIXEL["BALANCED"])

    def build_payload(self, params: GenerationParams) -> Dict[str, Any]:
        """Translate generation parameters into the Fal input object."""
        options = params.provider_options
        quality = params.quality or ImageQuality.STANDARD
        payload: Dict[str, Any] = {
            "prompt": params.prompt,
            "image_size": IMAGE_SIZE.get(params.aspect_ratio, "square_hd"),
            "rendering_speed": options.get("renderingSpeed") or SPEED_BY_QUALITY[quality],
            "expand_prompt": True,
            "num_images": 1,
            "sync_mode": False,
        }
        if params.seed is not None:
            payload["seed"] = params.seed

        for option, field in PASSTHROUGH_OPTIONS.items():
            if options.get(option):
                payload[field] = options[option]
        if isinstance(options.get("styleCodes"), list):
            payload["style_codes"] = options["styleCodes"]
        if options.get("expandPrompt") is not None:
            payload["expand_prompt"] = bool(options["expandPrompt"])
        if options.get("numImages"):
            payload["num_images"] = min(int(options["numImages"]), 4)
        if options.get("syncMode") is not None:
            payload["sync_mode"] = bool(options["syncMode"])
        if options.get("seed") is not None:
            payload["seed"] = options["seed"]
        return payload

    async def generate_image(self, params: GenerationParams) -> GenerationResult:
        start = time.monotonic()
        self.validate_params(params)
        payload = self.build_payload(params)

        try:
            data = await self.run(payload)
        except httpx.HTTPError as e:
            raise self.handle_error(e) from e

        images = data.get("images") or []
        if not images:
            raise ImageGenerationError("No images found in response", ErrorCode.GENERATION_FAILED, self.name)
        image = images[0]
        if isinstance(image, str):
            image_data = image
        elif isinstance(image, dict) and image.get("url"):
            image_data = image["url"]
        else:
            raise ImageGenerationError(
                "Invalid image data format in response", ErrorCode.GENERATION_FAILED, self.name
            )

        width, height = DIMENSIONS.get(params.aspect_ratio, (1024, 1024))
        return GenerationResult(
            image_data=image_data,
            mime_type="image/png",
            seed=data.get("seed", params.seed),
            provider=self.provider_type,
            cost=self.estimate_cost(params),
            generation_time=int((time.monotonic() - start) * 1000),
            metadata=ImageMetadata(
                width=width,
                height=height,
                aspect_ratio=params.aspect_ratio,
                prompt=params.prompt,
                quality=params.quality or ImageQuality.STANDARD,
            ),
            provider_data={"model": self.model, "rendering_speed": payload["rendering_speed"], "ideogram_data": data},
        )

    def handle_error(self, error: BaseException) -> ImageGenerationError:
        """Map Fal failures by message content."""
        if isinstance(error, ImageGenerationError):
            return error
        if isinstance(error, httpx.TimeoutException):
            return ImageGenerationError(
                "Request timeout for Fal-AI Ideogram", ErrorCode.TIMEOUT, self.name, retryable=True, original_error=error
            )

        message = str(error)
        if isinstance(error, httpx.HTTPStatusError):
            message = f"{message} {error.response.text}"
        lowered = message.lower()
        if "api key" in lowered:
            return ImageGenerationError(
                "Invalid API key for Fal-AI Ideogram", ErrorCode.INVALID_API_KEY, self.name, original_error=error
            )
        if "quota" in lowered or "limit" in lowered:
            return ImageGenerationError(
                "Quota exceeded for Fal-AI Ideogram", ErrorCode.QUOTA_EXCEEDED, self.name, original_error=error
            )
        if "timeout" in lowered:
            return ImageGenerationError(
                "Request timeout for Fal-AI Ideogram", ErrorCode.TIMEOUT, self.name, retryable=True, original_error=error
            )
        return ImageGenerationError(
            f"Fal-AI Ideogram image generation failed: {message or 'Unknown error'}",
            ErrorCode.GENERATION_FAILED,
            self.name,
            original_error=error,
        )
