"""Qwen-Image through the Hugging Face Inference API."""

from __future__ import annotations

import time
from typing import Any, Dict

import httpx

from .errors import ErrorCode, ImageGenerationError
from .huggingface import InferenceApiProvider
from .types import (
    ALL_ASPECT_RATIOS,
    ALL_QUALITIES,
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

DEFAULT_MODEL = "Qwen/Qwen-Image"
TRUE_CFG_SCALE = 4.0

STEPS_BY_QUALITY = {
    ImageQuality.FAST: 15,
    ImageQuality.STANDARD: 25,
    ImageQuality.HIGH: 35,
    ImageQuality.ULTRA: 50,
}

CAPABILITIES = ProviderCapabilities(
    supported_aspect_ratios=ALL_ASPECT_RATIOS,
    supported_qualities=ALL_QUALITIES,
    max_prompt_length=1000,
    supports_seeds=False,
    supports_style_images=False,
    supports_image_editing=False,
    rate_limits=RateLimits(requests_per_minute=100, requests_per_hour=1000, requests_per_day=10000),
    pricing=Pricing(cost_per_image=0.02, currency="USD", free_quota=0),
)


class QwenProvider(InferenceApiProvider):
    """Client for ``Qwen/Qwen-Image``."""

    provider_type = ProviderType.QWEN

    def __init__(self, config, *, client=None) -> None:
        super().__init__(config, client=client)
        self.model = config.options.get("model", DEFAULT_MODEL)

    def get_capabilities(self) -> ProviderCapabilities:
        return CAPABILITIES

    def build_parameters(self, params: GenerationParams) -> Dict[str, Any]:
        quality = params.quality or ImageQuality.STANDARD
        width, height = STANDARD_DIMENSIONS.get(params.aspect_ratio, STANDARD_DIMENSIONS[AspectRatio.SQUARE])
        return {
            "num_inference_steps": STEPS_BY_QUALITY[quality],
            "true_cfg_scale": TRUE_CFG_SCALE,
            "width": width,
            "height": height,
            "negative_prompt": " ",
        }

    async def generate_image(self, params: GenerationParams) -> GenerationResult:
        start = time.monotonic()
        self.validate_params(params)
        parameters = self.build_parameters(params)
        image_data, mime_type = await self.infer(params.prompt, parameters)

        return GenerationResult(
            image_data=image_data,
            mime_type=mime_type,
            seed=None,
            provider=self.provider_type,
            cost=CAPABILITIES.pricing.cost_per_image,  # type: ignore[union-attr]
            generation_time=int((time.monotonic() - start) * 1000),
            metadata=ImageMetadata(
                width=parameters["width"],
                height=parameters["height"],
                aspect_ratio=params.aspect_ratio,
                prompt=params.prompt,
                quality=params.quality or ImageQuality.STANDARD,
            ),
            provider_data={
                "model": self.model,
                "true_cfg_scale": TRUE_CFG_SCALE,
                "inference_steps": parameters["num_inference_steps"],
            },
        )

    def handle_error(self, error: BaseException) -> ImageGenerationError:
        """Exhausted inference credits are reported as a retryable quota error."""
        if isinstance(error, httpx.HTTPStatusError) and error.response.status_code not in (401, 403, 429, 503):
            text = error.response.text.lower()
            if error.response.status_code == 402 or "quota" in text or "exceeded" in text:
                return ImageGenerationError(
                    f"Qwen quota exceeded: {error.response.text}",
                    ErrorCode.QUOTA_EXCEEDED,
                    self.name,
                    retryable=True,
                    original_error=error,
                )
        return super().handle_error(error)
