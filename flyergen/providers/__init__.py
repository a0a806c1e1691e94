"""Pluggable image-generation providers.

Each provider wraps one vendor HTTP API behind ``ImageProvider``. The
``ProviderRegistry`` builds clients from ``ProviderConfigManager`` and the
``ProviderManager`` adds retry, circuit breaking and fallback on top.
"""

from .base import ImageProvider
from .config import ProviderConfigManager
from .errors import ErrorCode, ImageGenerationError
from .fallback import CircuitBreaker, ProviderManager, RetryConfig
from .registry import ProviderRegistry, create_default_registry
from .types import (
    AspectRatio,
    GenerationParams,
    GenerationResult,
    ImageQuality,
    ProviderCapabilities,
    ProviderConfig,
    ProviderType,
    normalize_aspect_ratio,
)

__all__ = [
    "AspectRatio",
    "CircuitBreaker",
    "ErrorCode",
    "GenerationParams",
    "GenerationResult",
    "ImageGenerationError",
    "ImageProvider",
    "ImageQuality",
    "ProviderCapabilities",
    "ProviderConfig",
    "ProviderConfigManager",
    "ProviderManager",
    "ProviderRegistry",
    "ProviderType",
    "RetryConfig",
    "create_default_registry",
    "normalize_aspect_ratio",
]
