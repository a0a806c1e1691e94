"""Unit tests for image upscaling."""

import json

import httpx
import pytest

from flyergen.core.database.entities.generated_images import GeneratedImage
from flyergen.core.database.repositories import GeneratedImageRepository, UserRepository
from flyergen.providers import ErrorCode, ImageGenerationError
from flyergen.server.services.errors import InsufficientCreditsError
from flyergen.server.services.upscale import UPSCALER_MODEL, ImageUpscaler, upscale_image


def _upscaler(handler, api_key="fal-key") -> ImageUpscaler:
    return ImageUpscaler(api_key, httpx.AsyncClient(transport=httpx.MockTransport(handler)))


def _ok(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"image": {"url": "https://mock.images/big.png"}})


class TestImageUpscaler:
    async def test_calls_clarity_upscaler(self):
        requests = []

        def handler(request):
            requests.append(request)
            return _ok(request)

        url = await _upscaler(handler).upscale("https://mock.images/small.png")

        assert url == "https://mock.images/big.png"
        assert str(requests[0].url).endswith(f"/{UPSCALER_MODEL}")
        body = json.loads(requests[0].content)
        assert body["image_url"] == "https://mock.images/small.png"
        assert body["upscale_factor"] == 2

    async def test_requires_key(self):
        with pytest.raises(ImageGenerationError) as exc_info:
            await _upscaler(_ok, api_key=None).upscale("https://mock.images/small.png")
        assert exc_info.value.code == ErrorCode.INVALID_API_KEY

    @pytest.mark.parametrize(
        "handler,code",
        [
            (lambda request: httpx.Response(500, text="boom"), ErrorCode.GENERATION_FAILED),
            (lambda request: httpx.Response(200, json={"image": {}}), ErrorCode.GENERATION_FAILED),
        ],
    )
    async def test_failures(self, handler, code):
        with pytest.raises(ImageGenerationError) as exc_info:
            await _upscaler(handler).upscale("https://mock.images/small.png")
        assert exc_info.value.code == code

    async def test_network_failure(self):
        def refuse(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(ImageGenerationError) as exc_info:
            await _upscaler(refuse).upscale("https://mock.images/small.png")
        assert exc_info.value.code == ErrorCode.NETWORK_ERROR


class TestUpscaleImage:
    async def _original(self, session, user) -> GeneratedImage:
        image = GeneratedImage(user_id=user.id, prompt="lighthouse", url="https://mock.images/small.png", aspect_ratio="3:4")
        session.add(image)
        await session.commit()
        await session.refresh(image)
        return image

    async def test_links_both_images_and_debits(self, session, make_user):
        user = await make_user(credits=1)
        original = await self._original(session, user)

        upscaled = await upscale_image(session, user, original, _upscaler(_ok))

        assert upscaled.is_upscaled is True
        assert upscaled.original_image_id == original.id
        assert original.upscaled_image_id == upscaled.id
        assert upscaled.aspect_ratio == "3:4"
        assert upscaled.provider == UPSCALER_MODEL
        assert user.credits == 0

    async def test_requires_credits(self, session, make_user):
        user = await make_user(credits=0)
        original = await self._original(session, user)
        with pytest.raises(InsufficientCreditsError):
            await upscale_image(session, user, original, _upscaler(_ok))

    async def test_balance_spent_by_parallel_request(self, session, other_session, make_user):
        user = await make_user(credits=1)
        original = await self._original(session, user)

        class SpendingUpscaler:
            async def upscale(self, image_url):
                parallel_copy = await UserRepository(other_session).get_by_id(user.id)
                await UserRepository(other_session).deduct_credit(parallel_copy)
                return "https://mock.images/big.png"

        with pytest.raises(InsufficientCreditsError):
            await upscale_image(session, user, original, SpendingUpscaler())

        assert user.credits == 0
        assert original.upscaled_image_id is None
        assert await GeneratedImageRepository(session).count_for_user(user.id) == 1
