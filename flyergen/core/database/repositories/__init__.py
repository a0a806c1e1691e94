"""Data access layer, one repository per table."""

from .base import AsyncBaseRepository, AsyncSQLModelRepository, QueryBuilder
from .contact_messages import ContactMessageRepository
from .generated_images import GeneratedImageRepository
from .provider_settings import ProviderSettingsRepository
from .system_prompts import SystemPromptRepository
from .users import UserRepository

__all__ = [
    "AsyncBaseRepository",
    "AsyncSQLModelRepository",
    "ContactMessageRepository",
    "GeneratedImageRepository",
    "ProviderSettingsRepository",
    "QueryBuilder",
    "SystemPromptRepository",
    "UserRepository",
]
