"""
I/O models for API requests and responses.

This package contains Pydantic-based I/O schemas that define the contract
between API endpoints and clients. These models are separate from database
entities to allow independent evolution of API contracts.

Modules:
- users: account, authentication and admin user models
- images: generation, listing and upscaling models
- system_prompts: versioned system prompt models
- provider_settings: provider preset and status models
- contact: contact form models
- billing: subscription and checkout models
"""

from .billing import CheckoutRequest, CheckoutResponse, SubscriptionRead
from .contact import (
    ContactMessageCreate,
    ContactMessageList,
    ContactMessageRead,
    ContactStatusUpdate,
)
from .images import (
    GeneratedImageList,
    GeneratedImageRead,
    GenerateImageRequest,
    GenerateImageResponse,
    UpscaleResponse,
)
from .provider_settings import (
    ProviderSettingsRead,
    ProviderSettingsUpdate,
    ProviderSettingsUpsert,
    ProviderStatusRead,
)
from .system_prompts import (
    ImportResult,
    PromptCategoryRead,
    SeedResult,
    SystemPromptCreate,
    SystemPromptImport,
    SystemPromptRead,
    SystemPromptUpdate,
)
from .users import (
    AdminUserUpdate,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UserList,
    UserRead,
    WatermarkUpdate,
)

__all__ = [
    "AdminUserUpdate",
    "CheckoutRequest",
    "CheckoutResponse",
    "ContactMessageCreate",
    "ContactMessageList",
    "ContactMessageRead",
    "ContactStatusUpdate",
    "GenerateImageRequest",
    "GenerateImageResponse",
    "GeneratedImageList",
    "GeneratedImageRead",
    "LoginRequest",
    "PromptCategoryRead",
    "ProviderSettingsRead",
    "ProviderSettingsUpdate",
    "ProviderSettingsUpsert",
    "ProviderStatusRead",
    "RegisterRequest",
    "SeedResult",
    "SystemPromptImport",
    "ImportResult",
    "SubscriptionRead",
    "SystemPromptCreate",
    "SystemPromptRead",
    "SystemPromptUpdate",
    "TokenResponse",
    "UpscaleResponse",
    "UserList",
    "UserRead",
    "WatermarkUpdate",
]
