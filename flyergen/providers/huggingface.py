"""Hugging Face Inference API provider.

Posts ``{"inputs": prompt, "parameters": {...}}`` to
``{base_url}/models/<model>`` with a Bearer token. The API answers with the
raw image bytes, which are returned as a ``data:`` URL.
"""

from __future__ import annotations

import base64
import time
from typing import Any, Dict

import httpx

from .base import ImageProvider
from .errors import ErrorCode, ImageGenerationError
from .types import (
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

DEFAULT_BASE_URL = "https://api-inference.huggingface.co"

MODELS = {
    "stable-diffusion-xl": "stabilityai/stable-diffusion-xl-base-1.0",
    "flux-schnell": "black-forest-labs/FLUX.1-schnell",
    "stable-diffusion-21": "runwayml/stable-diffusion-v1-5",
}

STEPS_BY_QUALITY = {
    ImageQuality.FAST: 10,
    ImageQuality.STANDARD: 20,
    ImageQuality.HIGH: 30,
    ImageQuality.ULTRA: 40,
}

GUIDANCE_SCALE = 7.5

CAPABILITIES = ProviderCapabilities(
    supported_aspect_ratios=[
        AspectRatio.SQUARE,
        AspectRatio.LANDSCAPE_16_9,
        AspectRatio.PORTRAIT_9_16,
        AspectRatio.LANDSCAPE_4_3,
        AspectRatio.PORTRAIT_3_4,
        AspectRatio.LANDSCAPE_3_2,
        AspectRatio.PORTRAIT_2_3,
    ],
    supported_qualities=[ImageQuality.FAST, ImageQuality.STANDARD, ImageQuality.HIGH],
    max_prompt_length=500,
    supports_seeds=False,
    supports_style_images=False,
    supports_image_editing=False,
    rate_limits=RateLimits(requests_per_minute=100, requests_per_hour=1000, requests_per_day=10000),
    pricing=Pricing(cost_per_image=0.01, currency="USD", free_quota=0),
)


class InferenceApiProvider(ImageProvider):
    """Shared plumbing for models served by the Hugging Face Inference API."""

    model: str

    @property
    def base_url(self) -> str:
        return (self.config.base_url or DEFAULT_BASE_URL).rstrip("/")

    async def infer(self, inputs: str, parameters: Dict[str, Any]) -> tuple[str, str]:
        """Run the model and return ``(data_url, mime_type)``.

        Raises:
            ImageGenerationError: On error responses or a non-image answer.
        """
        try:
            response = await self._client.post(
                f"{self.base_url}/models/{self.model}",
                headers={"Authorization": f"Bearer {self.config.api_key}", "Content-Type": "application/json"},
                json={"inputs": inputs, "parameters": parameters},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise self.handle_error(e) from e

        content_type = response.headers.get("content-type", "")
        if "image" not in content_type:
            raise ImageGenerationError(
                f"Expected image, got: {response.text}", ErrorCode.GENERATION_FAILED, self.name
            )
        mime_type = content_type.split(";")[0].strip()
        encoded = base64.b64encode(response.content).decode("ascii")
        return f"data:{mime_type};base64,{encoded}", mime_type

    def handle_error(self, error: BaseException) -> ImageGenerationError:
        """Model-loading answers count as a temporarily unavailable service."""
        if isinstance(error, httpx.HTTPStatusError):
            status_code = error.response.status_code
            text = error.response.text
            if status_code == 429 or "rate limit" in text.lower():
                return ImageGenerationError(
                    f"Rate limit exceeded: {text}", ErrorCode.RATE_LIMITED, self.name, retryable=True,
                    original_error=error,
                )
            if status_code == 503 or "loading" in text.lower():
                return ImageGenerationError(
                    f"Model is loading: {text}", ErrorCode.SERVICE_UNAVAILABLE, self.name, retryable=True,
                    original_error=error,
                )
        return super().handle_error(error)

    async def health_check(self) -> bool:
        try:
            response = await self._client.post(
                f"{self.base_url}/models/{self.model}",
                headers={"Authorization": f"Bearer {self.config.api_key}"},
                json={"inputs": "test", "parameters": {"num_inference_steps": 1}},
            )
        except httpx.HTTPError as e:
            self._logger.warning(f"{self.name} health check failed: {e}")
            return False
        return response.status_code == 200


class HuggingFaceProvider(InferenceApiProvider):
    """Stable Diffusion style text-to-image through the Inference API."""

    provider_type = ProviderType.HUGGINGFACE

    def __init__(self, config, *, client=None) -> None:
        super().__init__(config, client=client)
        self.model = config.options.get("model", MODELS["stable-diffusion-xl"])

    def get_capabilities(self) -> ProviderCapabilities:
        return CAPABILITIES

    def validate_params(self, params: GenerationParams) -> None:
        """Seeds are silently ignored rather than rejected."""
        try:
            super().validate_params(params)
        except ImageGenerationError as e:
            if "seed" in e.message.lower():
                return
            raise

    def set_model(self, model_name: str) -> None:
        """Switch to one of the catalogued models.

        Raises:
            KeyError: If the model name is not catalogued.
        """
        self.model = MODELS[model_name]

    @staticmethod
    def get_available_models() -> Dict[str, str]:
        return dict(MODELS)

    def build_parameters(self, params: GenerationParams) -> tuple[str, Dict[str, Any]]:
        quality = params.quality or ImageQuality.STANDARD
        prompt = params.prompt
        if quality in (ImageQuality.HIGH, ImageQuality.ULTRA):
            prompt += ", high quality, detailed, professional"
        return prompt, {"guidance_scale": GUIDANCE_SCALE, "num_inference_steps": STEPS_BY_QUALITY[quality]}

    async def generate_image(self, params: GenerationParams) -> GenerationResult:
        start = time.monotonic()
        self.validate_params(params)
        inputs, parameters = self.build_parameters(params)
        image_data, mime_type = await self.infer(inputs, parameters)

        return GenerationResult(
            image_data=image_data,
            mime_type=mime_type,
            seed=None,
            provider=self.provider_type,
            cost=CAPABILITIES.pricing.cost_per_image,  # type: ignore[union-attr]
            generation_time=int((time.monotonic() - start) * 1000),
            metadata=ImageMetadata(
                width=1024,
                height=1024,
                aspect_ratio=params.aspect_ratio,
                prompt=params.prompt,
                quality=params.quality or ImageQuality.STANDARD,
            ),
            provider_data={
                "model": self.model,
                "inference_api": True,
                "guidance_scale": GUIDANCE_SCALE,
                "inference_steps": parameters["num_inference_steps"],
            },
        )
