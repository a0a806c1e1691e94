"""Qwen-Image hosted on Fal-AI (``fal-ai/qwen-image``).

Quality maps to inference steps, boosted for aspect ratios the model renders
less sharply. Portrait requests get extra detail keywords and a higher
guidance scale. Cost is billed per megapixel.
"""

from __future__ import annotations

import time
from typing import Any, Dict

import httpx

from .errors import ErrorCode, ImageGenerationError
from .fal import FalProvider
from .types import (
    ALL_QUALITIES,
    PORTRAIT_RATIOS,
    AspectRatio,
    GenerationParams,
    GenerationResult,
    ImageMetadata,
    ImageQuality,
    Pricing,
    ProviderCapabilities,
    ProviderType,
)

COST_PER_MEGAPIXEL = 0.05
MAX_STEPS = 50

STEPS_BY_QUALITY = {
    ImageQuality.FAST: 15,
    ImageQuality.STANDARD: 25,
    ImageQuality.HIGH: 35,
    ImageQuality.ULTRA: 50,
}

IMAGE_SIZE = {
    AspectRatio.SQUARE: "square_hd",
    AspectRatio.LANDSCAPE_16_9: "landscape_16_9",
    AspectRatio.PORTRAIT_9_16: "portrait_16_9",
    AspectRatio.LANDSCAPE_4_3: "landscape_4_3",
    AspectRatio.PORTRAIT_3_4: "portrait_4_3",
    AspectRatio.PORTRAIT_4_5: "portrait_4_3",
    AspectRatio.PORTRAIT_5_7: "portrait_16_9",
    AspectRatio.LANDSCAPE_3_2: "landscape_4_3",
    AspectRatio.PORTRAIT_2_3: "portrait_4_3",
}

STEP_COMPENSATION = {
    AspectRatio.SQUARE: 1.0,
    AspectRatio.LANDSCAPE_16_9: 1.3,
    AspectRatio.PORTRAIT_9_16: 1.5,
    AspectRatio.LANDSCAPE_4_3: 1.2,
    AspectRatio.PORTRAIT_3_4: 1.3,
    AspectRatio.PORTRAIT_4_5: 1.3,
    AspectRatio.PORTRAIT_5_7: 1.5,
    AspectRatio.LANDSCAPE_3_2: 1.2,
    AspectRatio.PORTRAIT_2_3: 1.3,
}

ESTIMATE_SIZE = {
    AspectRatio.SQUARE: (1024, 1024),
    AspectRatio.LANDSCAPE_16_9: (1344, 768),
    AspectRatio.PORTRAIT_9_16: (768, 1344),
    AspectRatio.LANDSCAPE_4_3: (1152, 896),
    AspectRatio.PORTRAIT_3_4: (896, 1152),
    AspectRatio.LANDSCAPE_3_2: (1216, 832),
    AspectRatio.PORTRAIT_2_3: (832, 1216),
}

PORTRAIT_KEYWORDS = (
    "highly detailed",
    "sharp focus",
    "professional photography",
    "high resolution",
    "crisp details",
)

CAPABILITIES = ProviderCapabilities(
    supported_aspect_ratios=list(IMAGE_SIZE),
    supported_qualities=ALL_QUALITIES,
    max_prompt_length=2000,
    supports_seeds=True,
    supports_style_images=False,
    supports_image_editing=False,
    pricing=Pricing(cost_per_image=COST_PER_MEGAPIXEL, currency="USD", free_quota=0),
)


def megapixel_cost(width: int, height: int) -> float:
    """Cost in USD rounded to four decimals."""
    return round(width * height / 1_000_000 * COST_PER_MEGAPIXEL, 4)


def enhance_prompt(prompt: str, aspect_ratio: AspectRatio) -> str:
    """Append the detail keywords missing from a portrait prompt."""
    if aspect_ratio not in PORTRAIT_RATIOS:
        return prompt
    enhanced = prompt
    for keyword in PORTRAIT_KEYWORDS:
        if keyword not in enhanced.lower():
            enhanced = f"{enhanced}, {keyword}"
    return enhanced


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


class FalQwenProvider(FalProvider):
    """Client for ``fal-ai/qwen-image``."""

    provider_type = ProviderType.FAL_QWEN
    default_model = "fal-ai/qwen-image"

    def get_capabilities(self) -> ProviderCapabilities:
        return CAPABILITIES

    def estimate_cost(self, params: GenerationParams) -> float:
        width, height = ESTIMATE_SIZE.get(params.aspect_ratio, (1024, 1024))
        return megapixel_cost(width, height)

    def validate_params(self, params: GenerationParams) -> None:
        super().validate_params(params)
        options = params.provider_options
        checks = (
            ("numInferenceSteps", 1, 50, "Fal-AI inference steps must be between 1 and 50"),
            ("guidanceScale", 0.0, 20.0, "Fal-AI guidance scale must be between 0.0 and 20.0"),
            ("numImages", 1, 4, "Fal-AI supports 1-4 images per generation"),
        )
        for key, low, high, message in checks:
            if key not in options:
                continue
            value = options[key]
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not low <= value <= high:
                raise ImageGenerationError(message, ErrorCode.INVALID_PARAMETERS, self.name)

    def build_payload(self, params: GenerationParams) -> Dict[str, Any]:
        """Translate generation parameters into the Fal input object."""
        quality = params.quality or ImageQuality.STANDARD
        compensation = STEP_COMPENSATION.get(params.aspect_ratio, 1.0)
        steps = min(round(STEPS_BY_QUALITY[quality] * compensation), MAX_STEPS)
        payload: Dict[str, Any] = {
            "prompt": enhance_prompt(params.prompt, params.aspect_ratio),
            "image_size": IMAGE_SIZE.get(params.aspect_ratio, "square_hd"),
            "num_inference_steps": steps,
            "guidance_scale": 4.5 if params.aspect_ratio in PORTRAIT_RATIOS else 3.0,
            "num_images": 1,
            "enable_safety_checker": True,
            "sync_mode": False,
        }
        if params.seed is not None:
            payload["seed"] = params.seed

        options = params.provider_options
        if options.get("numInferenceSteps"):
            payload["num_inference_steps"] = int(_clamp(options["numInferenceSteps"], 1, MAX_STEPS))
        if options.get("guidanceScale") is not None:
            payload["guidance_scale"] = _clamp(options["guidanceScale"], 0.0, 20.0)
        if options.get("numImages"):
            payload["num_images"] = int(_clamp(options["numImages"], 1, 4))
        if options.get("enableSafetyChecker") is not None:
            payload["enable_safety_checker"] = bool(options["enableSafetyChecker"])
        if options.get("syncMode") is not None:
            payload["sync_mode"] = bool(options["syncMode"])
        return payload

    async def generate_image(self, params: GenerationParams) -> GenerationResult:
        start = time.monotonic()
        self.validate_params(params)
        payload = self.build_payload(params)
        self._logger.debug(
            f"fal-qwen request: image_size={payload['image_size']}, steps={payload['num_inference_steps']}, "
            f"guidance={payload['guidance_scale']}"
        )

        try:
            data = await self.run(payload)
        except httpx.HTTPError as e:
            raise self.handle_error(e) from e

        images = data.get("images") or []
        if not images:
            raise ImageGenerationError(
                "Fal-AI generation failed: No images generated from Fal-AI",
                ErrorCode.GENERATION_FAILED,
                self.name,
                retryable=True,
            )

        image = images[0]
        width = image.get("width") or 1024
        height = image.get("height") or 1024
        seed = data.get("seed", params.seed)
        return GenerationResult(
            image_data=image["url"],
            mime_type=image.get("content_type") or "image/png",
            seed=int(seed) if seed is not None else None,
            provider=self.provider_type,
            cost=megapixel_cost(width, height),
            generation_time=int((time.monotonic() - start) * 1000),
            metadata=ImageMetadata(
                width=width,
                height=height,
                aspect_ratio=params.aspect_ratio,
                prompt=params.prompt,
                quality=params.quality or ImageQuality.STANDARD,
            ),
            provider_data={
                "model": self.model,
                "inference_steps": payload["num_inference_steps"],
                "guidance_scale": payload["guidance_scale"],
                "image_size": payload["image_size"],
                "timings": data.get("timings"),
            },
        )

    def handle_error(self, error: BaseException) -> ImageGenerationError:
        """Fal failures are reported as retryable generation failures."""
        if isinstance(error, ImageGenerationError):
            return error
        return ImageGenerationError(
            f"Fal-AI generation failed: {error}",
            ErrorCode.GENERATION_FAILED,
            self.name,
            retryable=True,
            original_error=error,
        )
