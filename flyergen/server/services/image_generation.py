"""
Image generation flow.

``ImageGenerationService.generate`` turns a user's request into a stored
``GeneratedImage``:

1. refuse users without credits or with unanswered required event questions
2. build the event flyer prompt from the system prompts
3. normalize the aspect ratio
4. pick the provider: the admin default preset, else the request's
   preference, else the configured default
5. pick the quality: the request, else the provider preset's
   ``defaultQuality``, else a per provider default
6. draw a random seed when the provider supports seeds
7. generate with retry and fallback, debit one credit and persist the image
"""

from __future__ import annotations

import random
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from flyergen.core.database.entities.generated_images import GeneratedImage
from flyergen.core.database.entities.provider_settings import ProviderSettings
from flyergen.core.database.entities.users import User
from flyergen.core.database.repositories import (
    GeneratedImageRepository,
    ProviderSettingsRepository,
    UserRepository,
)
from flyergen.core.logging_config import get_logger
from flyergen.providers import (
    ErrorCode,
    GenerationParams,
    ImageGenerationError,
    ImageQuality,
    ProviderManager,
    ProviderType,
    normalize_aspect_ratio,
)

from .errors import (
    INSUFFICIENT_CREDITS_MESSAGE,
    UPSCALE_CREDITS_MESSAGE,
    InsufficientCreditsError,
    MissingEventDetailsError,
)
from .prompt_builder import PromptBuilder, validate_event_details
from .system_prompts import SystemPromptService
from .upscale import UPSCALER_MODEL

logger = get_logger(__name__)

MAX_RANDOM_SEED = 999999


def user_facing_message(error: ImageGenerationError) -> str:
    """Message shown to the user for a provider failure."""
    if error.provider == UPSCALER_MODEL:
        if error.code == ErrorCode.INSUFFICIENT_CREDITS:
            return UPSCALE_CREDITS_MESSAGE
        return f"Failed to upscale image: {error.message}"
    if error.code == ErrorCode.QUOTA_EXCEEDED:
        return f"API quota exceeded for {error.provider}. Please try again later or upgrade your plan."
    if error.code == ErrorCode.RATE_LIMITED:
        return f"Rate limit reached for {error.provider}. Please wait a moment and try again."
    if error.code == ErrorCode.SERVICE_UNAVAILABLE:
        return f"{error.provider} service is temporarily unavailable. Please try again."
    if error.code == ErrorCode.INVALID_PARAMETERS:
        return f"Invalid parameters: {error.message}"
    if error.code == ErrorCode.INSUFFICIENT_CREDITS:
        return INSUFFICIENT_CREDITS_MESSAGE
    return f"Image generation failed: {error.message}"


def default_quality_for(provider: ProviderType) -> ImageQuality:
    return ImageQuality.HIGH if provider == ProviderType.FAL_QWEN else ImageQuality.STANDARD


def _parse_provider(value: Optional[str]) -> Optional[ProviderType]:
    if not value:
        return None
    try:
        return ProviderType(value)
    except ValueError:
        logger.warning(f"Ignoring unknown provider id: {value}")
        return None


def _parse_quality(value: Any) -> Optional[ImageQuality]:
    if not value:
        return None
    try:
        return ImageQuality(value)
    except ValueError:
        logger.warning(f"Ignoring unknown quality: {value}")
        return None


class ImageGenerationService:
    """Generates and stores images for a user."""

    def __init__(self, session: AsyncSession, manager: ProviderManager) -> None:
        self.session = session
        self.manager = manager
        self.users = UserRepository(session)
        self.images = GeneratedImageRepository(session)
        self.provider_settings = ProviderSettingsRepository(session)
        self.prompt_builder = PromptBuilder(SystemPromptService(session))

    async def resolve_provider(self, preferred: Optional[ProviderType]) -> ProviderType:
        default_settings = await self.provider_settings.get_default()
        admin_default = _parse_provider(default_settings.provider_id if default_settings else None)
        if admin_default is not None:
            return admin_default
        return preferred or self.manager.config_manager.get_default_provider()

    async def resolve_quality(
        self, provider: ProviderType, requested: Optional[ImageQuality], preset: Optional[ProviderSettings]
    ) -> ImageQuality:
        if requested is not None:
            return requested
        if preset is not None:
            configured = _parse_quality((preset.base_settings or {}).get("defaultQuality"))
            if configured is not None:
                return configured
        return default_quality_for(provider)

    def supports_seeds(self, provider: ProviderType) -> bool:
        registry = self.manager.registry
        if not registry.has_provider(provider):
            return False
        return registry.get_provider(provider).get_capabilities().supports_seeds

    async def generate(
        self,
        user: User,
        prompt: str,
        aspect_ratio: Optional[str] = None,
        event_type: Optional[str] = None,
        event_details: Optional[Dict[str, Any]] = None,
        style_name: Optional[str] = None,
        custom_style: Optional[str] = None,
        preferred_provider: Optional[ProviderType] = None,
        quality: Optional[ImageQuality] = None,
        seed: Optional[int] = None,
        provider_options: Optional[Dict[str, Any]] = None,
    ) -> GeneratedImage:
        """Generate one image for ``user``.

        Raises:
            InsufficientCreditsError: If the user has no credits left.
            MissingEventDetailsError: If a required question of ``event_type`` is empty.
            ImageGenerationError: If every provider failed.
        """
        if user.credits <= 0:
            raise InsufficientCreditsError()

        if event_type:
            missing = validate_event_details(event_type, event_details or {})
            if missing:
                raise MissingEventDetailsError(event_type, missing)

        final_prompt = await self.prompt_builder.build(prompt, event_type, event_details, style_name, custom_style)
        ratio = normalize_aspect_ratio(aspect_ratio)

        provider = await self.resolve_provider(preferred_provider)
        preset = await self.provider_settings.get_active_for_provider(provider.value)
        final_quality = await self.resolve_quality(provider, quality, preset)

        options: Dict[str, Any] = dict(preset.specific_settings or {}) if preset else {}
        options.update(provider_options or {})

        supports_seeds = self.supports_seeds(provider)
        randomize = supports_seeds and seed is None
        if randomize:
            seed = random.randint(0, MAX_RANDOM_SEED)
        elif not supports_seeds:
            seed = None

        params = GenerationParams(
            prompt=final_prompt,
            aspect_ratio=ratio,
            quality=final_quality,
            seed=seed,
            randomize_seed=randomize,
            event_type=event_type,
            event_details=event_details,
            style_name=style_name,
            custom_style=custom_style,
            user_id=user.id,
            watermark_enabled=user.watermark_enabled,
            provider_options=options,
        )
        logger.info(
            f"Generating image for user {user.id} with {provider.value} "
            f"(ratio={ratio.value}, quality={final_quality.value}, seed={seed})"
        )

        result = await self.manager.generate_with_fallback(params, provider)

        if await self.users.deduct_credit(user) is None:
            # Parallel requests spent the balance while this one was generating
            logger.warning(f"User {user.id} ran out of credits during generation with {result.provider.value}")
            raise InsufficientCreditsError()
        image = GeneratedImage(
            user_id=user.id,
            prompt=final_prompt,
            url=result.image_data,
            event_type=event_type,
            event_details=event_details,
            aspect_ratio=ratio.value,
            style_name=style_name,
            custom_style=custom_style,
            seed=result.seed,
            provider=result.provider.value,
            quality=final_quality.value,
            generation_time_ms=result.generation_time,
            provider_cost=result.cost,
        )
        image = await self.images.create(image)
        logger.info(
            f"Image {image.id} generated by {result.provider.value} in {result.generation_time}ms, "
            f"{user.credits} credits left"
        )
        return image
