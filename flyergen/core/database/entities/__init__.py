"""
Database entity models.

Importing this package registers every table on ``SQLModel.metadata``.
"""

from .contact_messages import ContactMessage, ContactStatus
from .generated_images import GeneratedImage
from .provider_settings import ProviderSettings
from .system_prompts import SystemPrompt
from .users import DEFAULT_CREDITS, User, UserRole

__all__ = [
    "ContactMessage",
    "ContactStatus",
    "DEFAULT_CREDITS",
    "GeneratedImage",
    "ProviderSettings",
    "SystemPrompt",
    "User",
    "UserRole",
]
