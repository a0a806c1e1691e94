"""Provider configuration management.

``ProviderConfigManager`` builds one ``ProviderConfig`` per provider whose
credentials are present in the application settings, and tracks which
provider is the default. Priorities decide the fallback order: higher
values are tried first.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from .errors import ErrorCode, ImageGenerationError
from .types import ProviderConfig, ProviderType

logger = logging.getLogger(__name__)

# Environment variables holding each provider's credentials
REQUIRED_ENV_VARS: Dict[ProviderType, List[str]] = {
    ProviderType.IDEOGRAM: ["IDEOGRAM_API_KEY"],
    ProviderType.HUGGINGFACE: ["HUGGING_FACE_API_TOKEN"],
    ProviderType.QWEN: ["HUGGING_FACE_API_TOKEN"],
    ProviderType.FAL_QWEN: ["FAL_KEY"],
    ProviderType.FAL_IDEOGRAM: ["FAL_KEY"],
}

# Providers whose client falls back to a built-in endpoint
BASE_URL_OPTIONAL = frozenset({ProviderType.HUGGINGFACE})


class ProviderConfigManager:
    """Holds the provider configurations and the default provider.

    Args:
        settings: Object exposing ``ideogram_api_key``, ``hugging_face_api_token``,
            ``fal_key`` and ``default_provider`` (``settings.image_providers``).
    """

    def __init__(self, settings: Any) -> None:
        self._settings = settings
        self._configs: Dict[ProviderType, ProviderConfig] = {}
        self._default_provider: ProviderType = ProviderType.IDEOGRAM
        self._load()

    def reload(self, settings: Optional[Any] = None) -> None:
        """Rebuild all configurations, optionally from new settings."""
        if settings is not None:
            self._settings = settings
        self._configs.clear()
        self._load()

    def _load(self) -> None:
        ideogram_key = self._settings.ideogram_api_key
        if ideogram_key:
            self._configs[ProviderType.IDEOGRAM] = ProviderConfig(
                type=ProviderType.IDEOGRAM,
                api_key=ideogram_key,
                base_url="https://api.ideogram.ai",
                priority=100,
                options={"version": "v3", "renderingSpeed": "TURBO"},
            )

        hf_token = self._settings.hugging_face_api_token
        if hf_token:
            self._configs[ProviderType.HUGGINGFACE] = ProviderConfig(
                type=ProviderType.HUGGINGFACE,
                api_key=hf_token,
                base_url="https://api-inference.huggingface.co",
                priority=90,
                options={"model": "stabilityai/stable-diffusion-xl-base-1.0"},
            )
            self._configs[ProviderType.QWEN] = ProviderConfig(
                type=ProviderType.QWEN,
                api_key=hf_token,
                base_url="https://api-inference.huggingface.co",
                priority=95,
                options={"model": "Qwen/Qwen-Image"},
            )

        fal_key = self._settings.fal_key
        if fal_key:
            self._configs[ProviderType.FAL_QWEN] = ProviderConfig(
                type=ProviderType.FAL_QWEN,
                api_key=fal_key,
                base_url="https://fal.run",
                priority=101,
                options={"model": "fal-ai/qwen-image"},
            )
            self._configs[ProviderType.FAL_IDEOGRAM] = ProviderConfig(
                type=ProviderType.FAL_IDEOGRAM,
                api_key=fal_key,
                base_url="https://fal.run",
                priority=102,
                options={"model": "fal-ai/ideogram/v3", "renderingSpeed": "BALANCED"},
            )

        self._default_provider = self._pick_default()
        logger.info(
            f"Loaded {len(self._configs)} provider configurations, default provider: {self._default_provider.value}"
        )

    def _pick_default(self) -> ProviderType:
        forced = self._settings.default_provider
        if forced:
            try:
                forced_type = ProviderType(forced)
            except ValueError:
                logger.warning(f"Ignoring unknown IMAGE_GENERATION_PROVIDER value: {forced}")
            else:
                if forced_type in self._configs:
                    return forced_type
                logger.warning(f"IMAGE_GENERATION_PROVIDER={forced} is not configured")

        available = self.get_available_providers()
        return available[0] if available else ProviderType.IDEOGRAM

    def get_provider_config(self, provider: ProviderType) -> Optional[ProviderConfig]:
        return self._configs.get(provider)

    def get_all_configs(self) -> Dict[ProviderType, ProviderConfig]:
        return dict(self._configs)

    def get_default_provider(self) -> ProviderType:
        return self._default_provider

    def set_default_provider(self, provider: ProviderType) -> None:
        """Make ``provider`` the default.

        Raises:
            ImageGenerationError: If the provider is not configured or disabled.
        """
        config = self._configs.get(provider)
        if config is None:
            raise ImageGenerationError(
                f"Provider {provider.value} is not configured", ErrorCode.INVALID_PARAMETERS, provider.value
            )
        if not config.enabled:
            raise ImageGenerationError(
                f"Provider {provider.value} is disabled", ErrorCode.INVALID_PARAMETERS, provider.value
            )
        self._default_provider = provider

    def get_available_providers(self) -> List[ProviderType]:
        """Enabled providers, highest priority first."""
        enabled = [config for config in self._configs.values() if config.enabled]
        enabled.sort(key=lambda config: config.priority, reverse=True)
        return [config.type for config in enabled]

    def get_fallback_providers(self, primary: Optional[ProviderType] = None) -> List[ProviderType]:
        """Available providers other than ``primary`` (the default when omitted)."""
        primary = primary or self._default_provider
        return [provider for provider in self.get_available_providers() if provider != primary]

    def is_provider_available(self, provider: ProviderType) -> bool:
        config = self._configs.get(provider)
        return bool(config and config.enabled and config.api_key)

    def set_provider_enabled(self, provider: ProviderType, enabled: bool) -> None:
        config = self._configs.get(provider)
        if config is not None:
            config.enabled = enabled

    def update_provider_config(self, provider: ProviderType, **updates: Any) -> None:
        """Update fields of an existing configuration; unknown providers are ignored."""
        config = self._configs.get(provider)
        if config is not None:
            self._configs[provider] = config.model_copy(update=updates)

    def add_provider_config(self, config: ProviderConfig) -> None:
        self._configs[config.type] = config

    def get_config_summary(self) -> List[Dict[str, Any]]:
        """One row per known provider, configured or not."""
        summary = []
        for provider in ProviderType:
            config = self._configs.get(provider)
            summary.append(
                {
                    "provider": provider.value,
                    "enabled": bool(config and config.enabled),
                    "configured": bool(config and config.api_key),
                    "priority": config.priority if config else 0,
                    "is_default": provider == self._default_provider,
                }
            )
        return summary

    def validate_configurations(self) -> List[Dict[str, Any]]:
        """Check every configured provider for missing credentials or endpoints."""
        results = []
        for provider, config in self._configs.items():
            error = None
            if not config.api_key:
                error = "API key is missing"
            elif not config.base_url and provider not in BASE_URL_OPTIONAL:
                error = "Base URL is missing"
            results.append({"provider": provider.value, "valid": error is None, "error": error})
        return results

    @staticmethod
    def get_required_env_vars() -> Dict[str, List[str]]:
        return {provider.value: list(names) for provider, names in REQUIRED_ENV_VARS.items()}
