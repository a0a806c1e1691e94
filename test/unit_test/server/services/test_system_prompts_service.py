"""Unit tests for versioned system prompts."""

from flyergen.server.services.system_prompts import (
    PROMPT_CATEGORIES,
    SystemPromptService,
    get_category,
    get_default_prompts,
)


class TestCategories:
    def test_lookup(self):
        assert get_category("event_type").name == "Event Types"
        assert get_category("blog") is None
        assert [c.id for c in PROMPT_CATEGORIES][:2] == ["event_type", "style_preset"]


class TestSystemPromptService:
    async def test_create_adds_versions(self, session):
        service = SystemPromptService(session)
        first = await service.create_prompt("event_type", "Wedding", "v1 text", "admin-1", subcategory="WEDDING")
        second = await service.create_prompt("event_type", "Wedding", "v2 text", "admin-1", subcategory="WEDDING")

        assert (first.version, second.version) == (1, 2)
        assert (await service.get_active_prompt("event_type", "WEDDING")).id == second.id

    async def test_update_writes_new_version(self, session):
        service = SystemPromptService(session)
        original = await service.create_prompt(
            "event_type", "Concert", "loud", "admin-1", subcategory="CONCERT", description="music"
        )

        updated = await service.update_prompt(original.id, "admin-2", prompt_text="louder")

        assert updated.id != original.id
        assert updated.version == 2
        assert updated.prompt_text == "louder"
        assert updated.name == "Concert"
        assert updated.description == "music"
        assert updated.created_by == "admin-1"
        assert updated.updated_by == "admin-2"
        history = await service.get_prompt_history("event_type", "CONCERT")
        assert [p.version for p in history] == [2, 1]

    async def test_update_missing_prompt(self, session):
        assert await SystemPromptService(session).update_prompt("missing", "admin-1", name="x") is None

    async def test_deactivated_versions_are_skipped(self, session):
        service = SystemPromptService(session)
        v1 = await service.create_prompt("style_preset", "Origami", "paper", None, subcategory="Origami")
        v2 = await service.create_prompt("style_preset", "Origami", "folded paper", None, subcategory="Origami")

        await service.deactivate_prompt(v2.id, "admin-1")

        assert (await service.get_active_prompt("style_preset", "Origami")).id == v1.id
        assert await service.deactivate_prompt("missing", None) is None

    async def test_prompt_text_falls_back_to_defaults(self, session):
        service = SystemPromptService(session)
        defaults = get_default_prompts()
        assert await service.get_prompt_text("event_type", "BIRTHDAY_PARTY") == defaults[("event_type", "BIRTHDAY_PARTY")]
        assert await service.get_prompt_text("event_type", "NOPE") is None

    async def test_seed_is_idempotent(self, session):
        service = SystemPromptService(session)
        created = await service.seed_default_prompts("hero-1")
        assert created == len(get_default_prompts())
        assert await service.seed_default_prompts("hero-1") == 0

        by_category = await service.get_prompts_by_category("event_type")
        assert by_category
        assert all(p.version == 1 for p in by_category)

    async def test_import_matches_prompts_by_name(self, session):
        service = SystemPromptService(session)
        await service.create_prompt("event_type", "Wedding", "v1 text", "hero-1", subcategory="WEDDING")
        await service.create_prompt("event_type", "Boho wedding", "boho text", "hero-1", subcategory="WEDDING")

        imported, skipped, errors = await service.import_prompts(
            [
                {"category": "event_type", "subcategory": "WEDDING", "name": "Wedding", "content": "v3 text"},
                {"category": "event_type", "subcategory": "WEDDING", "name": "Boho wedding", "content": "boho text"},
                {"category": "", "name": "Blank", "content": "text"},
            ],
            "admin-1",
        )

        assert (imported, skipped, errors) == (1, 1, 1)
        newest = await service.get_active_prompt("event_type", "WEDDING")
        assert newest.version == 3
        assert newest.name == "Wedding"
        assert newest.prompt_text == "v3 text"
        assert newest.updated_by == "admin-1"
