"""Provider registry.

Maps provider identifiers to their client classes and holds the client
instances built from the enabled configurations.

Usage:
    registry = ProviderRegistry(config_manager)
    registry.initialize()
    provider = registry.get_provider(ProviderType.IDEOGRAM)
    result = await provider.generate_image(params)
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Type

import httpx

from .base import ImageProvider
from .config import ProviderConfigManager
from .errors import ErrorCode, ImageGenerationError
from .fal_ideogram import FalIdeogramProvider
from .fal_qwen import FalQwenProvider
from .huggingface import HuggingFaceProvider
from .ideogram import IdeogramProvider
from .qwen import QwenProvider
from .types import GenerationParams, GenerationResult, ProviderConfig, ProviderType

logger = logging.getLogger(__name__)

DEFAULT_IMPLEMENTATIONS: Dict[ProviderType, Type[ImageProvider]] = {
    ProviderType.IDEOGRAM: IdeogramProvider,
    ProviderType.HUGGINGFACE: HuggingFaceProvider,
    ProviderType.QWEN: QwenProvider,
    ProviderType.FAL_QWEN: FalQwenProvider,
    ProviderType.FAL_IDEOGRAM: FalIdeogramProvider,
}


class ProviderRegistry:
    """Registry of provider implementations and their live instances.

    Args:
        config_manager: Source of provider configurations.
        client: Optional ``httpx.AsyncClient`` shared by every provider instance.
    """

    def __init__(self, config_manager: ProviderConfigManager, *, client: Optional[httpx.AsyncClient] = None) -> None:
        self._config_manager = config_manager
        self._client = client
        self._implementations: Dict[ProviderType, Type[ImageProvider]] = {}
        self._providers: Dict[ProviderType, ImageProvider] = {}

    @property
    def config_manager(self) -> ProviderConfigManager:
        return self._config_manager

    def register(self, provider_type: ProviderType, implementation: Type[ImageProvider]) -> None:
        """Register a client class for a provider type.

        Raises:
            ValueError: If the provider type is already registered.
        """
        if provider_type in self._implementations:
            raise ValueError(f"Provider '{provider_type.value}' is already registered")
        self._implementations[provider_type] = implementation

    def unregister(self, provider_type: ProviderType) -> None:
        self._implementations.pop(provider_type, None)
        self._providers.pop(provider_type, None)

    def is_registered(self, provider_type: ProviderType) -> bool:
        return provider_type in self._implementations

    def initialize(self) -> None:
        """Instantiate every enabled, configured provider with a registered class.

        A provider whose construction fails is logged and left out.
        """
        self._providers.clear()
        for provider_type in self._config_manager.get_available_providers():
            config = self._config_manager.get_provider_config(provider_type)
            if config is None or provider_type not in self._implementations:
                continue
            try:
                self._providers[provider_type] = self._create(config)
            except ImageGenerationError as e:
                logger.error(f"Failed to initialize provider {provider_type.value}: {e.message}")
        logger.info(f"Initialized providers: {[p.value for p in self._providers]}")

    def _create(self, config: ProviderConfig) -> ImageProvider:
        return self._implementations[config.type](config, client=self._client)

    def get_provider(self, provider_type: ProviderType) -> ImageProvider:
        """Get a live provider instance.

        Raises:
            ImageGenerationError: ``SERVICE_UNAVAILABLE`` when the provider is not initialized.
        """
        provider = self._providers.get(provider_type)
        if provider is None:
            raise ImageGenerationError(
                f"Provider {provider_type.value} is not available",
                ErrorCode.SERVICE_UNAVAILABLE,
                provider_type.value,
            )
        return provider

    def has_provider(self, provider_type: ProviderType) -> bool:
        return provider_type in self._providers

    def get_default_provider(self) -> ImageProvider:
        return self.get_provider(self._config_manager.get_default_provider())

    async def generate_image(
        self, params: GenerationParams, provider_type: Optional[ProviderType] = None
    ) -> GenerationResult:
        """Generate with one provider, without retry or fallback."""
        provider = self.get_provider(provider_type) if provider_type else self.get_default_provider()
        return await provider.generate_image(params)

    def add_provider(self, config: ProviderConfig) -> ImageProvider:
        """Add or replace a provider from a configuration."""
        self._config_manager.add_provider_config(config)
        provider = self._create(config)
        self._providers[config.type] = provider
        return provider

    def remove_provider(self, provider_type: ProviderType) -> None:
        self._providers.pop(provider_type, None)
        self._config_manager.set_provider_enabled(provider_type, False)

    def get_available_providers(self) -> List[ProviderType]:
        """Initialized providers, in configuration priority order."""
        return [p for p in self._config_manager.get_available_providers() if p in self._providers]

    def validate_provider_setup(self) -> Dict[str, object]:
        """Summarize whether at least one provider is usable."""
        available = self.get_available_providers()
        validation = self._config_manager.validate_configurations()
        errors = [f"{row['provider']}: {row['error']}" for row in validation if not row["valid"]]
        if not available:
            errors.append("No image generation providers are configured")
        return {"valid": bool(available) and not errors, "available_providers": [p.value for p in available], "errors": errors}


def create_default_registry(
    config_manager: ProviderConfigManager, *, client: Optional[httpx.AsyncClient] = None
) -> ProviderRegistry:
    """Build a registry with every built-in provider registered and initialized."""
    registry = ProviderRegistry(config_manager, client=client)
    for provider_type, implementation in DEFAULT_IMPLEMENTATIONS.items():
        registry.register(provider_type, implementation)
    registry.initialize()
    return registry
