"""Unit tests for the versioned system prompt repository."""

from __future__ import annotations

import pytest

from flyergen.core.database.repositories import SystemPromptRepository


class TestSystemPromptRepository:
    @pytest.fixture
    def repository(self, in_memory_session):
        return SystemPromptRepository(in_memory_session)

    async def test_get_active_returns_highest_active_version(self, repository, create_prompt):
        await create_prompt("event_type", "WEDDING", version=1, text="v1")
        await create_prompt("event_type", "WEDDING", version=2, text="v2")
        await create_prompt("event_type", "WEDDING", version=3, is_active=False, text="v3")

        active = await repository.get_active("event_type", "WEDDING")

        assert active.prompt_text == "v2"

    async def test_get_active_none_subcategory(self, repository, create_prompt):
        await create_prompt("base", None, text="base prompt")
        await create_prompt("base", "other", text="other prompt")

        assert (await repository.get_active("base")).prompt_text == "base prompt"
        assert await repository.get_active("event_type", "CONCERT") is None

    async def test_history_and_latest_version(self, repository, create_prompt):
        await create_prompt("style_preset", "Retro", version=1)
        await create_prompt("style_preset", "Retro", version=2, is_active=False)

        history = await repository.get_history("style_preset", "Retro")

        assert [p.version for p in history] == [2, 1]
        assert await repository.get_latest_version("style_preset", "Retro") == 2
        assert await repository.get_latest_version("style_preset", "Neon") == 0

    async def test_list_active_by_category(self, repository, create_prompt):
        await create_prompt("event_type", "WEDDING", version=1)
        await create_prompt("event_type", "CONCERT", version=1)
        await create_prompt("event_type", "BBQ", version=1, is_active=False)
        await create_prompt("style_preset", "Retro", version=1)

        prompts = await repository.list_active_by_category("event_type")

        assert [p.subcategory for p in prompts] == ["CONCERT", "WEDDING"]

    async def test_get_by_name(self, repository, create_prompt):
        await create_prompt("base", None, version=1)

        found = await repository.get_by_name("base", None, "base/None v1")

        assert found.version == 1
        assert await repository.get_by_name("base", "other", "base/None v1") is None
        assert await repository.get_by_name("base", None, "missing") is None
