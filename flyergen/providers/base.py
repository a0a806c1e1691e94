"""Abstract base class for image providers.

Overview
--------
``ImageProvider`` is the interface every provider client implements. It owns
the shared behaviour:

- capability based validation of ``GenerationParams`` before dispatch
- cost estimation from the capability pricing
- translation of HTTP and transport failures into ``ImageGenerationError``
- a lightweight health check

Subclasses implement ``generate_image`` and ``get_capabilities`` and may
override validation, cost and error mapping where the vendor API differs.

HTTP
----
Providers talk to their vendor through an ``httpx.AsyncClient``. A client may
be injected (tests pass one built on ``httpx.MockTransport``); otherwise a
client is created per provider instance.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from .errors import ErrorCode, ImageGenerationError
from .types import (
    AspectRatio,
    GenerationParams,
    GenerationResult,
    ProviderCapabilities,
    ProviderConfig,
    ProviderType,
)

DEFAULT_TIMEOUT = 120.0


class ImageProvider(ABC):
    """Base class of all image provider clients."""

    provider_type: ProviderType

    def __init__(self, config: ProviderConfig, *, client: Optional[httpx.AsyncClient] = None) -> None:
        """Create a provider client.

        Args:
            config: Provider configuration; ``api_key`` is required.
            client: Optional preconfigured ``httpx.AsyncClient`` to use.

        Raises:
            ImageGenerationError: ``INVALID_API_KEY`` when no API key is configured.
        """
        if not config.api_key:
            raise ImageGenerationError(
                f"API key is required for {config.type.value} provider",
                ErrorCode.INVALID_API_KEY,
                config.type.value,
            )
        self.config = config
        self._client = client or httpx.AsyncClient(timeout=DEFAULT_TIMEOUT, follow_redirects=True)
        self._logger = logging.getLogger(f"{__name__}.{config.type.value}")

    @property
    def name(self) -> str:
        return self.config.type.value

    @abstractmethod
    async def generate_image(self, params: GenerationParams) -> GenerationResult:
        """Generate one image.

        Raises:
            ImageGenerationError: On validation or vendor failure.
        """

    @abstractmethod
    def get_capabilities(self) -> ProviderCapabilities:
        """Return the static capabilities of this provider."""

    def validate_params(self, params: GenerationParams) -> None:
        """Check the request against the provider capabilities.

        Raises:
            ImageGenerationError: The first violated constraint, in this order:
                empty prompt, prompt length, aspect ratio, quality, style
                images, seed.
        """
        caps = self.get_capabilities()

        if not params.prompt or not params.prompt.strip():
            raise ImageGenerationError("Prompt is required", ErrorCode.INVALID_PARAMETERS, self.name)

        if len(params.prompt) > caps.max_prompt_length:
            raise ImageGenerationError(
                f"Prompt exceeds maximum length of {caps.max_prompt_length} characters",
                ErrorCode.PROMPT_TOO_LONG,
                self.name,
            )

        if params.aspect_ratio not in caps.supported_aspect_ratios:
            supported = ", ".join(r.value for r in caps.supported_aspect_ratios)
            raise ImageGenerationError(
                f"Aspect ratio {params.aspect_ratio.value} is not supported. Supported ratios: {supported}",
                ErrorCode.UNSUPPORTED_ASPECT_RATIO,
                self.name,
            )

        if params.quality is not None and params.quality not in caps.supported_qualities:
            supported = ", ".join(q.value for q in caps.supported_qualities)
            raise ImageGenerationError(
                f"Quality {params.quality.value} is not supported. Supported qualities: {supported}",
                ErrorCode.INVALID_PARAMETERS,
                self.name,
            )

        if params.style_reference_images and not caps.supports_style_images:
            raise ImageGenerationError(
                "Style reference images are not supported by this provider",
                ErrorCode.INVALID_PARAMETERS,
                self.name,
            )

        if params.seed is not None and not caps.supports_seeds:
            raise ImageGenerationError(
                "Custom seeds are not supported by this provider",
                ErrorCode.INVALID_PARAMETERS,
                self.name,
            )

    def estimate_cost(self, params: GenerationParams) -> float:
        """Estimated USD cost of one generation."""
        pricing = self.get_capabilities().pricing
        return pricing.cost_per_image if pricing else 0.0

    async def health_check(self) -> bool:
        """Return True when the provider answers a health check request."""
        try:
            self.validate_params(GenerationParams(prompt="test", aspect_ratio=AspectRatio.SQUARE))
        except ImageGenerationError as e:
            self._logger.warning(f"Health check failed for {self.name}: {e.message}")
            return False
        return True

    def handle_error(self, error: BaseException) -> ImageGenerationError:
        """Translate any failure into an ``ImageGenerationError``.

        ``ImageGenerationError`` instances are returned unchanged. HTTP status
        errors map by status code; connection failures and timeouts are
        retryable.
        """
        if isinstance(error, ImageGenerationError):
            return error

        if isinstance(error, httpx.HTTPStatusError):
            status_code = error.response.status_code
            if status_code in (401, 403):
                return ImageGenerationError(
                    "Invalid API key or unauthorized access", ErrorCode.UNAUTHORIZED, self.name, original_error=error
                )
            if status_code == 429:
                return ImageGenerationError(
                    "Rate limit exceeded", ErrorCode.RATE_LIMITED, self.name, retryable=True, original_error=error
                )
            if status_code == 503:
                return ImageGenerationError(
                    "Service temporarily unavailable",
                    ErrorCode.SERVICE_UNAVAILABLE,
                    self.name,
                    retryable=True,
                    original_error=error,
                )
            return ImageGenerationError(
                f"HTTP {status_code}: {error.response.text}",
                ErrorCode.GENERATION_FAILED,
                self.name,
                original_error=error,
            )

        if isinstance(error, httpx.TimeoutException):
            return ImageGenerationError(
                "Request timed out", ErrorCode.TIMEOUT, self.name, retryable=True, original_error=error
            )

        if isinstance(error, (httpx.ConnectError, httpx.NetworkError)):
            return ImageGenerationError(
                "Network connection failed", ErrorCode.NETWORK_ERROR, self.name, retryable=True, original_error=error
            )

        return ImageGenerationError(
            str(error) or "Unknown error occurred", ErrorCode.UNKNOWN_ERROR, self.name, original_error=error
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
