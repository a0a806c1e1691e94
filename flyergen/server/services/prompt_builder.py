"""
Event flyer prompt construction.

A flyer prompt is assembled from comma separated parts, prepended to the
user's own prompt:

1. the active ``event_type`` system prompt, or ``"<Event> flyer theme"``
2. context phrases built from the event form fields
3. the style preset description (``style_preset`` system prompt)
4. the custom text to render, quoted
5. the free form custom style
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from flyergen.core.logging_config import get_logger

from .system_prompts import SystemPromptService

logger = get_logger(__name__)

NO_STYLE = "No Style"

QUALITY_CONTROL_PHRASES = (
    "no text unless otherwise specified",
    "no blur",
    "no distortion",
    "high quality",
    "no gibberish text",
    "no fake letters",
    "no strange characters",
    "only real readable words if text is included",
)

TEXT_QUALITY_PHRASES = (
    "no gibberish text",
    "no fake letters",
    "no strange characters",
    "only real readable words if text is included",
)


@dataclass(frozen=True)
class EventType:
    id: str
    name: str
    # question id -> label, for the questions that must be answered
    required: Dict[str, str] = field(default_factory=dict)


_GENERIC_EVENTS = {
    "FAMILY_GATHERING": "Family Gathering",
    "BBQ": "BBQ",
    "PARK_GATHERING": "Park Gathering",
    "COMMUNITY_EVENT": "Community Event",
    "FUNDRAISER": "Fundraiser",
    "WORKSHOP": "Workshop",
    "MEETUP": "Meetup",
    "CELEBRATION": "Celebration",
    "REUNION": "Reunion",
    "POTLUCK": "Potluck",
    "GAME_NIGHT": "Game Night",
    "BOOK_CLUB": "Book Club",
    "ART_CLASS": "Art Class",
    "FITNESS_CLASS": "Fitness Class",
}

EVENT_TYPES: Dict[str, EventType] = {
    "BIRTHDAY_PARTY": EventType("BIRTHDAY_PARTY", "Birthday Party", {"age": "Age of birthday person"}),
    "WEDDING": EventType("WEDDING", "Wedding", {"style": "Wedding style"}),
    "CORPORATE_EVENT": EventType("CORPORATE_EVENT", "Corporate Event", {"eventType": "Event type"}),
    "HOLIDAY_CELEBRATION": EventType("HOLIDAY_CELEBRATION", "Holiday Celebration", {"holiday": "Specific holiday"}),
    "CONCERT": EventType("CONCERT", "Concert", {"genre": "Music genre"}),
    "SPORTS_EVENT": EventType("SPORTS_EVENT", "Sports Event", {"sport": "Sport type"}),
    "NIGHTLIFE": EventType("NIGHTLIFE", "Nightlife"),
    **{event_id: EventType(event_id, name) for event_id, name in _GENERIC_EVENTS.items()},
}

# Per event type: (field, template) pairs applied in order when the field is filled
_Phrase = Tuple[str, str]
_GENERIC_CONTEXT: List[_Phrase] = [
    ("venue", "at {}"),
    ("atmosphere", "{} atmosphere"),
    ("activities", "featuring {}"),
    ("decorations", "with {}"),
]

EVENT_CONTEXT: Dict[str, List[_Phrase]] = {
    "BIRTHDAY_PARTY": [
        ("age", "{}th birthday celebration"),
        ("theme", "{} theme"),
        ("venue", "at {}"),
        ("guests", "{} guests"),
        ("activities", "featuring {}"),
        ("decorations", "with {}"),
    ],
    "WEDDING": [
        ("style", "{} style wedding"),
        ("colors", "{} color scheme"),
        ("venue", "at {}"),
        ("season", "{} season"),
        ("guests", "{} guests"),
        ("elements", "with {}"),
    ],
    "CORPORATE_EVENT": [
        ("eventType", "{}"),
        ("industry", "{} industry"),
        ("attendees", "{} attendees"),
        ("venue", "at {}"),
        ("formality", "{} atmosphere"),
        ("branding", "{} branding"),
    ],
    "HOLIDAY_CELEBRATION": [
        ("holiday", "{} celebration"),
        ("context", "{} context"),
        ("venue", "at {}"),
        ("people", "{} gathering"),
        ("traditions", "with {}"),
        ("decorations", "decorated with {}"),
    ],
    "CONCERT": [
        ("genre", "{} concert"),
        ("venue", "at {}"),
        ("crowd", "{} crowd"),
        ("lighting", "{} lighting"),
        ("performance", "{} performance"),
        ("atmosphere", "with {}"),
    ],
    "SPORTS_EVENT": [
        ("sport", "{} event"),
        ("venue", "at {}"),
        ("colors", "{} colors"),
        ("crowd", "{} spectators"),
        ("eventType", "{}"),
        ("weather", "{} weather"),
    ],
    "NIGHTLIFE": [
        ("venue", "{} venue"),
        ("music", "{} music"),
        ("crowd", "{} crowd"),
        ("lighting", "{} lighting"),
        ("features", "with {}"),
        ("dresscode", "{} dress code"),
    ],
}


def _value(details: Mapping[str, Any], key: str) -> str:
    value = details.get(key)
    if value is None:
        return ""
    return str(value).strip()


def build_event_context(event_type: str, details: Mapping[str, Any]) -> List[str]:
    """Context phrases for the filled-in event form fields."""
    parts = []
    for key, template in EVENT_CONTEXT.get(event_type, _GENERIC_CONTEXT):
        value = _value(details, key)
        # "Public Holiday" repeats what the holiday name already says
        if not value or (key == "context" and value == "Public Holiday"):
            continue
        parts.append(template.format(value))
    return parts


def extract_style_description(content: str) -> str:
    """Keep the stylistic part of a style preset prompt.

    The text is cut at the first quality control phrase; the text related
    phrases found after the cut are appended again.
    """
    lowered = content.lower()
    for phrase in QUALITY_CONTROL_PHRASES:
        index = lowered.find(phrase)
        if index == -1:
            continue
        description = re.sub(r",\s*$", "", content[:index].strip())
        remainder = lowered[index:]
        text_rules = [p for p in TEXT_QUALITY_PHRASES if p in remainder]
        if text_rules:
            return ", ".join([description, *text_rules]) if description else ", ".join(text_rules)
        return description
    return re.sub(r",\s*$", "", content.strip())


def style_fallback(style_name: str) -> str:
    # Long names are already descriptions
    return style_name if len(style_name) > 20 else f"{style_name} style"


def validate_event_details(event_type: str, details: Mapping[str, Any]) -> List[str]:
    """Labels of the required questions left empty; unknown event types report nothing."""
    config = EVENT_TYPES.get(event_type)
    if config is None:
        return []
    return [label for key, label in config.required.items() if not _value(details, key)]


class PromptBuilder:
    """Builds the final provider prompt for event flyers."""

    def __init__(self, prompts: SystemPromptService) -> None:
        self.prompts = prompts

    async def build(
        self,
        base_prompt: str,
        event_type: Optional[str],
        event_details: Optional[Mapping[str, Any]],
        style_name: Optional[str] = None,
        custom_style: Optional[str] = None,
    ) -> str:
        """Return the enhanced prompt, or ``base_prompt`` for unknown or missing event types."""
        if not event_type or event_details is None:
            return base_prompt
        config = EVENT_TYPES.get(event_type)
        if config is None:
            logger.debug(f"Unknown event type {event_type}, using the prompt as given")
            return base_prompt

        parts: List[str] = []
        event_prompt = await self.prompts.get_active_prompt("event_type", event_type)
        if event_prompt is not None and event_prompt.prompt_text:
            parts.append(event_prompt.prompt_text)
        else:
            parts.append(f"{config.name} flyer theme")

        parts.extend(build_event_context(event_type, event_details))

        if style_name and style_name != NO_STYLE:
            style_prompt = await self.prompts.get_active_prompt("style_preset", style_name)
            if style_prompt is not None and style_prompt.prompt_text:
                description = extract_style_description(style_prompt.prompt_text)
                if description:
                    parts.append(description)
            else:
                parts.append(style_fallback(style_name))

        custom_text = _value(event_details, "customText")
        if custom_text:
            parts.append(f'with text: "{custom_text}"')

        if custom_style and custom_style.strip():
            parts.append(custom_style.strip())

        return f"{', '.join(parts)}, {base_prompt}".strip()
