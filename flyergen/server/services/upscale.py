"""
Image upscaling with the Fal clarity upscaler.

An upscale produces a new ``GeneratedImage`` linked to its source in both
directions and costs one credit.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from flyergen.core.database.entities.generated_images import GeneratedImage
from flyergen.core.database.entities.users import User
from flyergen.core.database.repositories import GeneratedImageRepository, UserRepository
from flyergen.core.logging_config import get_logger
from flyergen.providers import ErrorCode, ImageGenerationError
from flyergen.providers.fal import run_fal_model

from .errors import UPSCALE_CREDITS_MESSAGE, InsufficientCreditsError

logger = get_logger(__name__)

UPSCALER_MODEL = "fal-ai/clarity-upscaler"

UPSCALE_SETTINGS: Dict[str, Any] = {
    "prompt": "masterpiece, best quality, highres",
    "upscale_factor": 2,
    "negative_prompt": "(worst quality, low quality, normal quality:2)",
    "creativity": 0.35,
    "resemblance": 0.6,
    "guidance_scale": 4,
    "num_inference_steps": 18,
    "enable_safety_checker": True,
}


class ImageUpscaler:
    """Client of the Fal clarity upscaler."""

    def __init__(self, api_key: Optional[str], client: httpx.AsyncClient) -> None:
        self.api_key = api_key
        self._client = client

    async def upscale(self, image_url: str) -> str:
        """Return the URL of the upscaled image.

        Raises:
            ImageGenerationError: When Fal is not configured, fails, or answers without an image.
        """
        if not self.api_key:
            raise ImageGenerationError("FAL API key not configured", ErrorCode.INVALID_API_KEY, UPSCALER_MODEL)
        try:
            data = await run_fal_model(
                self._client, self.api_key, UPSCALER_MODEL, {"image_url": image_url, **UPSCALE_SETTINGS}
            )
        except httpx.HTTPStatusError as e:
            raise ImageGenerationError(
                e.response.text or f"HTTP {e.response.status_code}",
                ErrorCode.GENERATION_FAILED,
                UPSCALER_MODEL,
                original_error=e,
            ) from e
        except httpx.HTTPError as e:
            raise ImageGenerationError(
                str(e) or type(e).__name__, ErrorCode.NETWORK_ERROR, UPSCALER_MODEL, original_error=e
            ) from e

        url = (data.get("image") or {}).get("url")
        if not url:
            raise ImageGenerationError(
                "No upscaled image URL in response", ErrorCode.GENERATION_FAILED, UPSCALER_MODEL
            )
        return url


async def upscale_image(
    session: AsyncSession, user: User, original: GeneratedImage, upscaler: ImageUpscaler
) -> GeneratedImage:
    """Upscale ``original`` for its owner and store the result.

    Raises:
        InsufficientCreditsError: If the user has no credits left.
        ImageGenerationError: If the upscaler fails.
    """
    if user.credits <= 0:
        raise InsufficientCreditsError(UPSCALE_CREDITS_MESSAGE)

    images = GeneratedImageRepository(session)
    upscaled_url = await upscaler.upscale(original.url)
    if await UserRepository(session).deduct_credit(user) is None:
        logger.warning(f"User {user.id} ran out of credits while upscaling image {original.id}")
        raise InsufficientCreditsError(UPSCALE_CREDITS_MESSAGE)

    upscaled = await images.create(
        GeneratedImage(
            user_id=user.id,
            prompt=original.prompt,
            url=upscaled_url,
            event_type=original.event_type,
            event_details=original.event_details,
            aspect_ratio=original.aspect_ratio,
            style_name=original.style_name,
            custom_style=original.custom_style,
            provider=UPSCALER_MODEL,
            quality="upscaled",
            is_upscaled=True,
            original_image_id=original.id,
        )
    )
    original.upscaled_image_id = upscaled.id
    await images.update(original)

    logger.info(f"Image {original.id} upscaled to {upscaled.id} for user {user.id}")
    return upscaled
