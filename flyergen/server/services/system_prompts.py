"""
System prompt management.

Prompts are stored per (category, subcategory) as an append-only version
history: creating a prompt adds the next version, and editing one writes a
new version row instead of modifying the old one. Lookups use the highest
active version.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from flyergen.core.database.entities.system_prompts import SystemPrompt
from flyergen.core.database.repositories.system_prompts import SystemPromptRepository
from flyergen.core.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class PromptCategory:
    id: str
    name: str
    description: str
    subcategories: List[str] = field(default_factory=list)


PROMPT_CATEGORIES: List[PromptCategory] = [
    PromptCategory(
        id="event_type",
        name="Event Types",
        description="Prompts for different event types (birthday, wedding, corporate, etc.)",
        subcategories=[
            "BIRTHDAY_PARTY",
            "WEDDING",
            "CORPORATE_EVENT",
            "HOLIDAY_CELEBRATION",
            "CONCERT",
            "SPORTS_EVENT",
            "NIGHTLIFE",
            "FAMILY_GATHERING",
            "BBQ",
            "PARK_GATHERING",
            "COMMUNITY_EVENT",
            "FUNDRAISER",
            "WORKSHOP",
            "MEETUP",
            "CELEBRATION",
            "REUNION",
            "POTLUCK",
            "GAME_NIGHT",
            "BOOK_CLUB",
            "ART_CLASS",
            "FITNESS_CLASS",
        ],
    ),
    PromptCategory(
        id="style_preset",
        name="Style Presets",
        description="Prompts for different artistic styles and presets",
        subcategories=[
            "Wild Card",
            "Pop Art",
            "Children Book",
            "Golden Harmony",
            "Vintage Film Poster",
            "Retro Game",
            "Cyberpunk",
            "Origami",
            "Fantasy World",
            "Street Art",
            "Political Satire",
            "Unicorn Balloon Bash",
        ],
    ),
    PromptCategory(
        id="carousel_background",
        name="Carousel Backgrounds",
        description="Prompts for carousel background generation",
        subcategories=[
            "peach-waves",
            "mint-flow",
            "lavender-smooth",
            "coral-waves",
            "sage-organic",
            "ux-gradient-purple",
            "tech-blue-gradient",
            "brand-orange-gradient",
            "minimal-gray",
            "corporate-navy",
        ],
    ),
    PromptCategory(
        id="text_generation",
        name="Text Generation",
        description="Prompts for AI text generation in carousels",
        subcategories=["header", "body", "caption", "cta", "slider_numbers"],
    ),
    PromptCategory(
        id="system_default",
        name="System Defaults",
        description="Default system prompts and fallbacks",
        subcategories=["base_prompt", "enhancement", "fallback"],
    ),
]

_TEXT_RULES = (
    "no text unless otherwise specified, no gibberish text, no fake letters, no strange characters, "
    "only real readable words if text is included, no blur, no distortion, high quality"
)
_WORD_RULES = "Use only real, readable English words - no gibberish, no fake letters, no strange characters."

# (category, subcategory) -> prompt text used when the database has no row
DEFAULT_PROMPTS: Dict[Tuple[str, Optional[str]], str] = {
    ("event_type", "BIRTHDAY_PARTY"): (
        "vibrant birthday party celebration with colorful balloons, confetti, and festive decorations, "
        f"warm and joyful atmosphere with bright lighting, {_TEXT_RULES}, professional event flyer design"
    ),
    ("event_type", "WEDDING"): (
        "elegant wedding celebration with romantic floral arrangements, soft lighting, and sophisticated decor, "
        f"timeless and romantic atmosphere with warm golden tones, {_TEXT_RULES}, professional wedding flyer design"
    ),
    ("event_type", "CORPORATE_EVENT"): (
        "professional corporate event with modern business aesthetics, clean lines, and sophisticated design "
        "elements, professional and trustworthy atmosphere with corporate color schemes, "
        f"{_TEXT_RULES}, professional business flyer design"
    ),
    ("event_type", "HOLIDAY_CELEBRATION"): (
        "festive holiday celebration with seasonal decorations, warm lighting, and traditional holiday elements, "
        f"joyful and celebratory atmosphere with holiday color palettes, {_TEXT_RULES}, "
        "professional holiday flyer design"
    ),
    ("event_type", "CONCERT"): (
        "dynamic concert event with energetic lighting, stage effects, and musical atmosphere, exciting and "
        f"vibrant mood with dramatic lighting and performance energy, {_TEXT_RULES}, professional concert flyer design"
    ),
    ("event_type", "SPORTS_EVENT"): (
        "action-packed sports event with dynamic movement, competitive energy, and athletic atmosphere, "
        f"energetic and competitive mood with sports equipment and arena elements, {_TEXT_RULES}, "
        "professional sports flyer design"
    ),
    ("event_type", "NIGHTLIFE"): (
        "vibrant nightlife event with neon lighting, urban atmosphere, and contemporary club aesthetics, "
        f"exciting and energetic mood with modern urban elements and nightlife energy, {_TEXT_RULES}, "
        "professional nightlife flyer design"
    ),
    ("carousel_background", None): (
        "Create a seamless background image with a continuous pattern. The background should be a unified "
        "design that flows smoothly from left to right across the entire width. Use simple, solid colors and "
        "subtle patterns that create visual interest without being distracting. The design should be cohesive "
        "and seamless, with no visible breaks, separations, or distinct sections. Choose colors that provide "
        "excellent contrast for white text overlay. Ensure high quality, no blur, no distortion, professional "
        "design suitable for social media carousels."
    ),
    ("text_generation", "header"): (
        "Generate a compelling header text for a carousel slide that is attention-grabbing and clearly "
        "communicates the main message. The text should be concise (3-7 words), impactful, use strong action "
        "words, and create immediate visual impact. Focus on clarity, brevity, and emotional resonance. "
        f"{_WORD_RULES}"
    ),
    ("text_generation", "body"): (
        "Generate informative body text that provides details and context for the carousel content. The text "
        "should be clear, engaging, provide valuable information to the reader, and maintain consistent tone. "
        f"Keep it concise (1-2 sentences) while being informative and compelling. {_WORD_RULES}"
    ),
    ("text_generation", "cta"): (
        "Generate a clear call-to-action text that encourages engagement or next steps. The text should be "
        "action-oriented, compelling, create urgency or excitement, and use strong verbs. Keep it short "
        f"(2-4 words) and make it impossible to ignore. {_WORD_RULES}"
    ),
}


def get_category(category_id: str) -> Optional[PromptCategory]:
    return next((c for c in PROMPT_CATEGORIES if c.id == category_id), None)


def get_default_prompts() -> Dict[Tuple[str, Optional[str]], str]:
    """Built-in prompt texts, keyed by (category, subcategory)."""
    return dict(DEFAULT_PROMPTS)


class SystemPromptService:
    """Versioned system prompt operations on top of ``SystemPromptRepository``."""

    def __init__(self, session: AsyncSession) -> None:
        self.repository = SystemPromptRepository(session)

    async def get_active_prompt(self, category: str, subcategory: Optional[str] = None) -> Optional[SystemPrompt]:
        return await self.repository.get_active(category, subcategory or None)

    async def get_prompt_text(self, category: str, subcategory: Optional[str] = None) -> Optional[str]:
        """Active prompt text, falling back to the built-in default."""
        prompt = await self.get_active_prompt(category, subcategory)
        if prompt is not None:
            return prompt.prompt_text
        return DEFAULT_PROMPTS.get((category, subcategory or None))

    async def get_prompts_by_category(self, category: str) -> List[SystemPrompt]:
        return await self.repository.list_active_by_category(category)

    async def get_prompt_history(self, category: str, subcategory: Optional[str] = None) -> List[SystemPrompt]:
        return await self.repository.get_history(category, subcategory or None)

    async def create_prompt(
        self,
        category: str,
        name: str,
        prompt_text: str,
        user_id: Optional[str],
        subcategory: Optional[str] = None,
        description: Optional[str] = None,
        is_active: bool = True,
    ) -> SystemPrompt:
        """Add the next version for the prompt's category/subcategory."""
        subcategory = subcategory or None
        version = await self.repository.get_latest_version(category, subcategory) + 1
        prompt = SystemPrompt(
            category=category,
            subcategory=subcategory,
            name=name,
            description=description,
            prompt_text=prompt_text,
            is_active=is_active,
            version=version,
            created_by=user_id,
            updated_by=user_id,
        )
        prompt = await self.repository.create(prompt)
        logger.info(f"Created system prompt {category}/{subcategory} v{version}")
        return prompt

    async def update_prompt(
        self,
        prompt_id: str,
        user_id: Optional[str],
        name: Optional[str] = None,
        description: Optional[str] = None,
        prompt_text: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> Optional[SystemPrompt]:
        """Write a new version derived from ``prompt_id``; None if it does not exist.

        Fields left as None keep the value of the source version.
        """
        existing = await self.repository.get_by_id(prompt_id)
        if existing is None:
            return None

        version = await self.repository.get_latest_version(existing.category, existing.subcategory) + 1
        prompt = SystemPrompt(
            category=existing.category,
            subcategory=existing.subcategory,
            name=name or existing.name,
            description=description if description is not None else existing.description,
            prompt_text=prompt_text or existing.prompt_text,
            is_active=is_active if is_active is not None else existing.is_active,
            version=version,
            created_by=existing.created_by,
            updated_by=user_id,
        )
        prompt = await self.repository.create(prompt)
        logger.info(f"Updated system prompt {existing.category}/{existing.subcategory} to v{version}")
        return prompt

    async def deactivate_prompt(self, prompt_id: str, user_id: Optional[str]) -> Optional[SystemPrompt]:
        prompt = await self.repository.get_by_id(prompt_id)
        if prompt is None:
            return None
        prompt.is_active = False
        prompt.updated_by = user_id
        return await self.repository.update(prompt)

    async def seed_default_prompts(self, user_id: Optional[str] = None) -> int:
        """Create version 1 of every built-in prompt that has no row yet.

        Returns:
            Number of prompts created
        """
        created = 0
        for (category, subcategory), text in DEFAULT_PROMPTS.items():
            if await self.repository.get_latest_version(category, subcategory):
                continue
            await self.create_prompt(
                category=category,
                subcategory=subcategory,
                name=f"{subcategory or category} (default)",
                prompt_text=text,
                user_id=user_id,
            )
            created += 1
        logger.info(f"Seeded {created} default system prompts")
        return created

    async def import_prompts(self, rows: List[Dict[str, Any]], user_id: Optional[str]) -> Tuple[int, int, int]:
        """Load prompts from an export.

        A row matches an existing prompt by category, subcategory and name.
        Matching rows with new content are stored as the next version,
        unchanged ones are skipped and rows without a category, name or text
        are counted as errors.

        Returns:
            Tuple of (imported, skipped, errors)
        """
        imported = skipped = errors = 0
        for row in rows:
            category = row.get("category")
            name = row.get("name")
            text = row.get("prompt_text") or row.get("content")
            if not (category and name and text):
                errors += 1
                continue

            subcategory = row.get("subcategory") or None
            description = row.get("description")
            is_active = row.get("is_active", row.get("isActive", True)) is not False

            existing = await self.repository.get_by_name(category, subcategory, name)
            if existing is None:
                await self.create_prompt(
                    category=category,
                    name=name,
                    prompt_text=text,
                    user_id=user_id,
                    subcategory=subcategory,
                    description=description,
                    is_active=is_active,
                )
            elif (existing.prompt_text, existing.description, existing.is_active) == (text, description, is_active):
                skipped += 1
                continue
            else:
                await self.update_prompt(
                    existing.id,
                    user_id,
                    description=description,
                    prompt_text=text,
                    is_active=is_active,
                )
            imported += 1

        logger.info(f"Imported {imported} system prompts ({skipped} unchanged, {errors} invalid)")
        return imported, skipped, errors
