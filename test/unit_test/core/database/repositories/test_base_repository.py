"""Unit tests for the shared CRUD repository and query helpers."""

from __future__ import annotations

from datetime import timedelta

import pytest
from sqlmodel import select

from flyergen.core.database.base import utc_now
from flyergen.core.database.entities import GeneratedImage, User
from flyergen.core.database.repositories import GeneratedImageRepository, QueryBuilder


class TestGeneratedImageRepository:
    @pytest.fixture
    def repository(self, in_memory_session):
        return GeneratedImageRepository(in_memory_session)

    async def _image(self, repository, user, minutes_ago: int, **fields) -> GeneratedImage:
        return await repository.create(
            GeneratedImage(
                user_id=user.id,
                prompt=f"flyer {minutes_ago}",
                url=f"https://cdn.example.com/{minutes_ago}.png",
                created_at=utc_now() - timedelta(minutes=minutes_ago),
                **fields,
            )
        )

    async def test_list_for_user_newest_first(self, repository, create_user):
        owner = await create_user()
        other = await create_user()
        await self._image(repository, owner, 30)
        await self._image(repository, owner, 10)
        await self._image(repository, owner, 20)
        await self._image(repository, other, 5)

        images = await repository.list_for_user(owner.id)

        assert [image.prompt for image in images] == ["flyer 10", "flyer 20", "flyer 30"]
        assert await repository.count_for_user(owner.id) == 3
        assert await repository.count_for_user(other.id) == 1

    async def test_pagination(self, repository, create_user):
        owner = await create_user()
        for minutes in (1, 2, 3, 4):
            await self._image(repository, owner, minutes)

        page = await repository.list_for_user(owner.id, limit=2, offset=1)

        assert [image.prompt for image in page] == ["flyer 2", "flyer 3"]

    async def test_list_filters_ignore_none_and_unknown_keys(self, repository, create_user):
        owner = await create_user()
        await self._image(repository, owner, 1, provider="fal-qwen")
        await self._image(repository, owner, 2, provider="ideogram")

        assert len(await repository.list(filters={"provider": "ideogram"})) == 1
        assert len(await repository.list(filters={"provider": None, "no_such_column": "x"})) == 2
        assert await repository.count() == 2

    async def test_upscale_links(self, repository, create_user):
        owner = await create_user()
        original = await self._image(repository, owner, 5)
        upscaled = await self._image(repository, owner, 1, is_upscaled=True, original_image_id=original.id)

        original.upscaled_image_id = upscaled.id
        await repository.update(original)

        reloaded = await repository.get_by_id(original.id)
        assert reloaded.upscaled_image_id == upscaled.id
        assert (await repository.get_by_id(upscaled.id)).original_image_id == original.id


class TestQueryBuilder:
    def test_apply_pagination_without_values_keeps_statement(self):
        stmt = select(User)
        assert QueryBuilder.apply_pagination(stmt, None, None) is stmt

    def test_apply_filters_adds_where_clause(self):
        stmt = QueryBuilder.apply_filters(select(User), User, {"username": "ana"})
        assert "WHERE" in str(stmt)
