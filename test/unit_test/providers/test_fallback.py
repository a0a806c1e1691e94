"""Unit tests for retry, circuit breaking and provider fallback."""

from types import SimpleNamespace
from typing import List, Union
from unittest.mock import AsyncMock

import httpx
import pytest

from flyergen.providers import (
    AspectRatio,
    CircuitBreaker,
    ErrorCode,
    GenerationParams,
    GenerationResult,
    ImageGenerationError,
    ImageProvider,
    ImageQuality,
    ProviderCapabilities,
    ProviderConfigManager,
    ProviderManager,
    ProviderRegistry,
    ProviderType,
    RetryConfig,
)
from flyergen.providers.types import ImageMetadata

Outcome = Union[BaseException, None]


class ScriptedProvider(ImageProvider):
    """Provider replaying ``outcomes``: an exception is raised, ``None`` succeeds."""

    supports_seeds = True

    def __init__(self, config, *, client=None) -> None:
        super().__init__(config, client=client)
        self.outcomes: List[Outcome] = []
        self.calls: List[GenerationParams] = []

    def get_capabilities(self) -> ProviderCapabilities:
        return ProviderCapabilities(
            supported_aspect_ratios=list(AspectRatio),
            supported_qualities=list(ImageQuality),
            max_prompt_length=1000,
            supports_seeds=self.supports_seeds,
            supports_style_images=False,
            supports_image_editing=False,
        )

    async def generate_image(self, params: GenerationParams) -> GenerationResult:
        self.calls.append(params)
        outcome = self.outcomes.pop(0) if self.outcomes else None
        if outcome is not None:
            raise outcome
        return GenerationResult(
            image_data=f"https://mock.images/{self.name}.png",
            seed=params.seed,
            provider=self.provider_type,
            generation_time=1,
            metadata=ImageMetadata(width=1, height=1, aspect_ratio=params.aspect_ratio, prompt=params.prompt),
        )


class IdeogramStub(ScriptedProvider):
    provider_type = ProviderType.IDEOGRAM


class QwenStub(ScriptedProvider):
    provider_type = ProviderType.QWEN
    supports_seeds = False


class HuggingFaceStub(ScriptedProvider):
    provider_type = ProviderType.HUGGINGFACE
    supports_seeds = False


def _error(code: ErrorCode, provider: str = "ideogram", retryable: bool = False) -> ImageGenerationError:
    return ImageGenerationError(f"{code.value} failure", code, provider, retryable=retryable)


@pytest.fixture
def registry() -> ProviderRegistry:
    # Priorities: ideogram 100, qwen 95, huggingface 90
    settings = SimpleNamespace(
        ideogram_api_key="ideogram-key", hugging_face_api_token="hf-token", fal_key=None, default_provider=None
    )
    registry = ProviderRegistry(
        ProviderConfigManager(settings),
        client=httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200))),
    )
    registry.register(ProviderType.IDEOGRAM, IdeogramStub)
    registry.register(ProviderType.QWEN, QwenStub)
    registry.register(ProviderType.HUGGINGFACE, HuggingFaceStub)
    registry.initialize()
    return registry


@pytest.fixture
def sleep() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def manager(registry: ProviderRegistry, sleep: AsyncMock) -> ProviderManager:
    return ProviderManager(registry, sleep=sleep)


def _stub(registry: ProviderRegistry, provider_type: ProviderType) -> ScriptedProvider:
    return registry.get_provider(provider_type)


class TestRetryConfig:
    @pytest.mark.parametrize("attempt,expected", [(1, 1000), (2, 2000), (3, 4000), (10, 30000)])
    def test_exponential_backoff_is_capped(self, attempt, expected):
        assert RetryConfig().delay_ms(attempt) == expected


class TestProviderOrder:
    def test_preferred_first_then_by_priority(self, manager):
        assert manager.get_provider_order(ProviderType.HUGGINGFACE) == [
            ProviderType.HUGGINGFACE,
            ProviderType.IDEOGRAM,
            ProviderType.QWEN,
        ]

    def test_without_preference(self, manager):
        assert manager.get_provider_order() == [ProviderType.IDEOGRAM, ProviderType.QWEN, ProviderType.HUGGINGFACE]


class TestGenerateWithRetry:
    async def test_retries_transient_errors(self, manager, registry, sleep):
        ideogram = _stub(registry, ProviderType.IDEOGRAM)
        ideogram.outcomes = [_error(ErrorCode.RATE_LIMITED, retryable=True), _error(ErrorCode.TIMEOUT, retryable=True)]

        result = await manager.generate_with_fallback(GenerationParams(prompt="p"), ProviderType.IDEOGRAM)

        assert result.provider == ProviderType.IDEOGRAM
        assert len(ideogram.calls) == 3
        assert [call.args[0] for call in sleep.await_args_list] == [1.0, 2.0]

    async def test_gives_up_after_max_attempts(self, manager, registry):
        ideogram = _stub(registry, ProviderType.IDEOGRAM)
        ideogram.outcomes = [_error(ErrorCode.SERVICE_UNAVAILABLE, retryable=True)] * 3

        result = await manager.generate_with_fallback(GenerationParams(prompt="p"), ProviderType.IDEOGRAM)

        assert len(ideogram.calls) == 3
        assert result.provider == ProviderType.QWEN

    async def test_non_retryable_errors_fall_back_immediately(self, manager, registry, sleep):
        ideogram = _stub(registry, ProviderType.IDEOGRAM)
        ideogram.outcomes = [_error(ErrorCode.GENERATION_FAILED)]

        result = await manager.generate_with_fallback(GenerationParams(prompt="p"), ProviderType.IDEOGRAM)

        assert len(ideogram.calls) == 1
        assert result.provider == ProviderType.QWEN
        sleep.assert_not_awaited()

    async def test_unexpected_exceptions_are_wrapped(self, manager, registry):
        ideogram = _stub(registry, ProviderType.IDEOGRAM)
        ideogram.outcomes = [RuntimeError("kaboom")]
        for provider_type in (ProviderType.QWEN, ProviderType.HUGGINGFACE):
            _stub(registry, provider_type).outcomes = [_error(ErrorCode.GENERATION_FAILED, provider_type.value)]

        with pytest.raises(ImageGenerationError) as exc_info:
            await manager.generate_with_fallback(GenerationParams(prompt="p"), ProviderType.IDEOGRAM)

        # The last provider's error is reported
        assert exc_info.value.provider == "huggingface"


class TestFallback:
    @pytest.mark.parametrize(
        "code",
        [
            ErrorCode.INVALID_PARAMETERS,
            ErrorCode.PROMPT_TOO_LONG,
            ErrorCode.UNSUPPORTED_ASPECT_RATIO,
            ErrorCode.INVALID_API_KEY,
            ErrorCode.UNAUTHORIZED,
        ],
    )
    async def test_request_and_credential_errors_fail_fast(self, manager, registry, code):
        _stub(registry, ProviderType.IDEOGRAM).outcomes = [_error(code)]

        with pytest.raises(ImageGenerationError) as exc_info:
            await manager.generate_with_fallback(GenerationParams(prompt="p"), ProviderType.IDEOGRAM)

        assert exc_info.value.code == code
        assert _stub(registry, ProviderType.QWEN).calls == []

    async def test_seed_dropped_for_providers_without_seed_support(self, manager, registry):
        _stub(registry, ProviderType.IDEOGRAM).outcomes = [_error(ErrorCode.GENERATION_FAILED)]

        result = await manager.generate_with_fallback(
            GenerationParams(prompt="p", seed=1234, randomize_seed=True), ProviderType.IDEOGRAM
        )

        assert _stub(registry, ProviderType.IDEOGRAM).calls[0].seed == 1234
        qwen_call = _stub(registry, ProviderType.QWEN).calls[0]
        assert qwen_call.seed is None
        assert qwen_call.randomize_seed is False
        assert result.seed is None

    async def test_all_providers_failing_raises_last_error(self, manager, registry):
        for provider_type in (ProviderType.IDEOGRAM, ProviderType.QWEN, ProviderType.HUGGINGFACE):
            _stub(registry, provider_type).outcomes = [_error(ErrorCode.GENERATION_FAILED, provider_type.value)]

        with pytest.raises(ImageGenerationError) as exc_info:
            await manager.generate_with_fallback(GenerationParams(prompt="p"), ProviderType.IDEOGRAM)
        assert exc_info.value.provider == "huggingface"

    async def test_no_usable_provider(self, registry, sleep):
        breaker = CircuitBreaker(failure_threshold=1)
        for provider_type in ProviderType:
            breaker.record_failure(provider_type)
        manager = ProviderManager(registry, circuit_breaker=breaker, sleep=sleep)

        with pytest.raises(ImageGenerationError) as exc_info:
            await manager.generate_with_fallback(GenerationParams(prompt="p"), ProviderType.IDEOGRAM)
        assert exc_info.value.code == ErrorCode.SERVICE_UNAVAILABLE
        assert exc_info.value.message == "All image generation providers failed"

    async def test_open_circuit_skips_provider(self, registry, sleep):
        breaker = CircuitBreaker(failure_threshold=1)
        breaker.record_failure(ProviderType.IDEOGRAM)
        manager = ProviderManager(registry, circuit_breaker=breaker, sleep=sleep)

        result = await manager.generate_with_fallback(GenerationParams(prompt="p"), ProviderType.IDEOGRAM)

        assert result.provider == ProviderType.QWEN
        assert _stub(registry, ProviderType.IDEOGRAM).calls == []


class TestCircuitBreaker:
    def test_opens_after_threshold_and_resets_after_timeout(self):
        now = [1000.0]
        breaker = CircuitBreaker(failure_threshold=2, reset_timeout=60, clock=lambda: now[0])

        breaker.record_failure(ProviderType.IDEOGRAM)
        assert breaker.is_provider_available(ProviderType.IDEOGRAM) is True
        breaker.record_failure(ProviderType.IDEOGRAM)
        assert breaker.is_provider_available(ProviderType.IDEOGRAM) is False

        now[0] += 61
        assert breaker.is_provider_available(ProviderType.IDEOGRAM) is True
        assert breaker.get_status()["ideogram"]["failures"] == 0

    def test_success_closes_circuit(self):
        breaker = CircuitBreaker(failure_threshold=1)
        breaker.record_failure(ProviderType.QWEN)
        breaker.record_success(ProviderType.QWEN)
        assert breaker.is_provider_available(ProviderType.QWEN) is True

    async def test_manager_records_outcomes(self, manager, registry):
        _stub(registry, ProviderType.IDEOGRAM).outcomes = [_error(ErrorCode.GENERATION_FAILED)]
        await manager.generate_with_fallback(GenerationParams(prompt="p"), ProviderType.IDEOGRAM)

        status = manager.get_circuit_breaker_status()
        assert status["ideogram"]["failures"] == 1
        assert status["qwen"]["failures"] == 0

        manager.reset_circuit_breaker(ProviderType.IDEOGRAM)
        assert manager.get_circuit_breaker_status()["ideogram"]["failures"] == 0


class TestProvidersHealth:
    async def test_reports_each_initialized_provider(self, manager):
        health = await manager.get_providers_health()
        assert set(health) == {"ideogram", "qwen", "huggingface"}
        assert health["ideogram"] == {"available": True, "healthy": True, "circuit_open": False}
