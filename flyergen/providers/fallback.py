"""Retry, circuit breaking and fallback across providers.

``ProviderManager.generate_with_fallback`` walks the providers in order
(preferred first, then the others by priority). Each provider is retried
with exponential backoff on transient failures, and a per-provider circuit
breaker skips providers that keep failing. Parameter and credential errors
fail fast without trying other providers.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, FrozenSet, List, Optional

from .base import ImageProvider
from .errors import ErrorCode, ImageGenerationError
from .registry import ProviderRegistry
from .types import GenerationParams, GenerationResult, ProviderType

logger = logging.getLogger(__name__)

RETRYABLE_CODES: FrozenSet[ErrorCode] = frozenset(
    {
        ErrorCode.QUOTA_EXCEEDED,
        ErrorCode.RATE_LIMITED,
        ErrorCode.SERVICE_UNAVAILABLE,
        ErrorCode.TIMEOUT,
        ErrorCode.NETWORK_ERROR,
    }
)

NON_FALLBACK_CODES: FrozenSet[ErrorCode] = frozenset(
    {
        ErrorCode.INVALID_PARAMETERS,
        ErrorCode.PROMPT_TOO_LONG,
        ErrorCode.UNSUPPORTED_ASPECT_RATIO,
        ErrorCode.INVALID_API_KEY,
        ErrorCode.UNAUTHORIZED,
    }
)


@dataclass(frozen=True)
class RetryConfig:
    """Backoff policy for retrying a single provider."""

    max_attempts: int = 3
    base_delay_ms: int = 1000
    max_delay_ms: int = 30000
    backoff_multiplier: float = 2
    retryable_codes: FrozenSet[ErrorCode] = field(default=RETRYABLE_CODES)

    def delay_ms(self, attempt: int) -> float:
        """Delay after the given (1-based) failed attempt."""
        return min(self.base_delay_ms * self.backoff_multiplier ** (attempt - 1), self.max_delay_ms)


@dataclass
class CircuitState:
    failures: int = 0
    is_open: bool = False
    last_failure: Optional[float] = None


class CircuitBreaker:
    """Per-provider circuit breaker.

    The circuit opens after ``failure_threshold`` consecutive failures and
    closes again once ``reset_timeout`` seconds have passed since the last one.
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        reset_timeout: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.failure_threshold = failure_threshold
        self.reset_timeout = reset_timeout
        self._clock = clock
        self._states: Dict[ProviderType, CircuitState] = {}

    def _state(self, provider: ProviderType) -> CircuitState:
        return self._states.setdefault(provider, CircuitState())

    def is_provider_available(self, provider: ProviderType) -> bool:
        state = self._state(provider)
        if state.is_open and state.last_failure is not None:
            if self._clock() - state.last_failure > self.reset_timeout:
                state.is_open = False
                state.failures = 0
                return True
        return not state.is_open and state.failures < self.failure_threshold

    def record_failure(self, provider: ProviderType) -> None:
        state = self._state(provider)
        state.failures += 1
        state.last_failure = self._clock()
        if state.failures >= self.failure_threshold:
            if not state.is_open:
                logger.warning(f"Circuit opened for provider {provider.value} after {state.failures} failures")
            state.is_open = True

    def record_success(self, provider: ProviderType) -> None:
        state = self._state(provider)
        state.failures = 0
        state.is_open = False

    def get_status(self) -> Dict[str, Dict[str, object]]:
        return {
            provider.value: {
                "failures": self._state(provider).failures,
                "is_open": self._state(provider).is_open,
                "last_failure": self._state(provider).last_failure,
            }
            for provider in ProviderType
        }


class ProviderManager:
    """Generates images with retry and fallback over a provider registry.

    Args:
        registry: Registry holding the live provider instances.
        retry_config: Backoff policy.
        circuit_breaker: Breaker instance (a new one by default).
        sleep: Coroutine used to wait between retries, in seconds.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        retry_config: Optional[RetryConfig] = None,
        circuit_breaker: Optional[CircuitBreaker] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.registry = registry
        self.retry_config = retry_config or RetryConfig()
        self.circuit_breaker = circuit_breaker or CircuitBreaker()
        self._sleep = sleep

    @property
    def config_manager(self):
        return self.registry.config_manager

    def get_provider_order(self, preferred: Optional[ProviderType] = None) -> List[ProviderType]:
        available = self.config_manager.get_available_providers()
        if preferred is None:
            return available
        fallbacks = self.config_manager.get_fallback_providers(preferred)
        return [p for p in [preferred, *fallbacks] if p in available]

    async def generate_with_fallback(
        self, params: GenerationParams, preferred: Optional[ProviderType] = None
    ) -> GenerationResult:
        """Generate an image, falling back across providers.

        Raises:
            ImageGenerationError: Immediately for parameter and credential
                errors; otherwise the last provider error once all providers
                failed, or ``SERVICE_UNAVAILABLE`` if none could be tried.
        """
        last_error: Optional[ImageGenerationError] = None

        for provider_type in self.get_provider_order(preferred):
            if not self.circuit_breaker.is_provider_available(provider_type):
                logger.info(f"Skipping {provider_type.value}: circuit open")
                continue
            if not self.registry.has_provider(provider_type):
                continue
            provider = self.registry.get_provider(provider_type)
            provider_params = params
            if params.seed is not None and not provider.get_capabilities().supports_seeds:
                # A seed drawn for the preferred provider must not fail a fallback
                provider_params = params.model_copy(update={"seed": None, "randomize_seed": False})

            try:
                result = await self.generate_with_retry(provider, provider_params)
            except ImageGenerationError as e:
                last_error = e
            except Exception as e:
                last_error = ImageGenerationError(
                    f"Generation failed with {provider_type.value}: {e}",
                    ErrorCode.GENERATION_FAILED,
                    provider_type.value,
                    original_error=e,
                )
            else:
                self.circuit_breaker.record_success(provider_type)
                return result

            self.circuit_breaker.record_failure(provider_type)
            logger.warning(f"Provider {provider_type.value} failed ({last_error.code.value}): {last_error.message}")
            if last_error.code in NON_FALLBACK_CODES:
                raise last_error

        if last_error is not None:
            raise last_error
        raise ImageGenerationError(
            "All image generation providers failed",
            ErrorCode.SERVICE_UNAVAILABLE,
            preferred.value if preferred else self.config_manager.get_default_provider().value,
        )

    async def generate_with_retry(self, provider: ImageProvider, params: GenerationParams) -> GenerationResult:
        """Call one provider, retrying transient failures with exponential backoff."""
        attempt = 1
        while True:
            try:
                return await provider.generate_image(params)
            except Exception as e:
                error = provider.handle_error(e)
                if not self.is_retryable(error) or attempt >= self.retry_config.max_attempts:
                    if error is e:
                        raise
                    raise error from e
                delay = self.retry_config.delay_ms(attempt)
                logger.info(
                    f"Attempt {attempt} failed for {provider.name}, retrying in {delay:.0f}ms: {error.message}"
                )
                await self._sleep(delay / 1000)
                attempt += 1

    def is_retryable(self, error: ImageGenerationError) -> bool:
        return error.retryable and error.code in self.retry_config.retryable_codes

    async def get_providers_health(self) -> Dict[str, Dict[str, object]]:
        status = self.circuit_breaker.get_status()
        health: Dict[str, Dict[str, object]] = {}
        for provider_type in self.registry.get_available_providers():
            provider = self.registry.get_provider(provider_type)
            health[provider_type.value] = {
                "available": self.config_manager.is_provider_available(provider_type),
                "healthy": await provider.health_check(),
                "circuit_open": status[provider_type.value]["is_open"],
            }
        return health

    def reset_circuit_breaker(self, provider: ProviderType) -> None:
        self.circuit_breaker.record_success(provider)

    def get_circuit_breaker_status(self) -> Dict[str, Dict[str, object]]:
        return self.circuit_breaker.get_status()
