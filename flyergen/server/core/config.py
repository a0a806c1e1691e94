"""
Configuration Settings.

This module defines the application configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.
"""

from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# =====================================================================
# Grouped Configuration Models
# =====================================================================


class AuthConfig(BaseModel):
    """Session token configuration."""

    secret: str = Field(
        default="flyergen-dev-secret-change-me", alias="AUTH_SECRET", description="Secret used to sign session tokens"
    )
    algorithm: str = Field(default="HS256", alias="AUTH_ALGORITHM", description="JWT signing algorithm")
    token_expire_minutes: int = Field(
        default=60 * 24 * 30, alias="AUTH_TOKEN_EXPIRE_MINUTES", description="Session token lifetime in minutes"
    )

    model_config = {"populate_by_name": True}


class StripeConfig(BaseModel):
    """Stripe billing configuration."""

    api_key: Optional[str] = Field(default=None, alias="STRIPE_API_KEY", description="Stripe secret API key")
    webhook_secret: Optional[str] = Field(
        default=None, alias="STRIPE_WEBHOOK_SECRET", description="Signing secret of the Stripe webhook endpoint"
    )
    starter_monthly_plan_id: Optional[str] = Field(
        default=None, alias="STRIPE_STARTER_MONTHLY_PLAN_ID", description="Price id of the monthly Starter plan"
    )
    starter_yearly_plan_id: Optional[str] = Field(
        default=None, alias="STRIPE_STARTER_YEARLY_PLAN_ID", description="Price id of the yearly Starter plan"
    )
    pro_monthly_plan_id: Optional[str] = Field(
        default=None, alias="STRIPE_PRO_MONTHLY_PLAN_ID", description="Price id of the monthly Pro plan"
    )
    pro_yearly_plan_id: Optional[str] = Field(
        default=None, alias="STRIPE_PRO_YEARLY_PLAN_ID", description="Price id of the yearly Pro plan"
    )
    business_monthly_plan_id: Optional[str] = Field(
        default=None, alias="STRIPE_BUSINESS_MONTHLY_PLAN_ID", description="Price id of the monthly Business plan"
    )
    business_yearly_plan_id: Optional[str] = Field(
        default=None, alias="STRIPE_BUSINESS_YEARLY_PLAN_ID", description="Price id of the yearly Business plan"
    )

    model_config = {"populate_by_name": True}


class ImageProvidersConfig(BaseModel):
    """Image generation provider credentials."""

    ideogram_api_key: Optional[str] = Field(default=None, alias="IDEOGRAM_API_KEY", description="Ideogram API key")
    hugging_face_api_token: Optional[str] = Field(
        default=None, alias="HUGGING_FACE_API_TOKEN", description="Hugging Face inference API token"
    )
    fal_key: Optional[str] = Field(default=None, alias="FAL_KEY", description="Fal-AI API key")
    default_provider: Optional[str] = Field(
        default=None,
        alias="IMAGE_GENERATION_PROVIDER",
        description="Provider forced as default (ideogram, huggingface, qwen, fal-qwen, fal-ideogram)",
    )

    model_config = {"populate_by_name": True}


class DatabaseConfig(BaseModel):
    """Database connection configuration."""

    url: str = Field(
        default="sqlite+aiosqlite:///./flyergen.db", alias="DATABASE_URL", description="Async SQLAlchemy database URL"
    )
    echo: bool = Field(default=False, alias="DATABASE_ECHO", description="Echo SQL statements")
    pool_size: int = Field(default=10, alias="DATABASE_POOL_SIZE", description="Connection pool size")
    max_overflow: int = Field(default=20, alias="DATABASE_MAX_OVERFLOW", description="Connection pool overflow")

    model_config = {"populate_by_name": True}


class CORSConfig(BaseModel):
    """CORS configuration."""

    origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS", description="Allowed CORS origins (use * for all)")
    allow_credentials: bool = Field(
        default=True, alias="CORS_ALLOW_CREDENTIALS", description="Allow credentials in CORS requests"
    )
    allow_methods: list[str] = Field(
        default=["*"], alias="CORS_ALLOW_METHODS", description="Allowed HTTP methods (use * for all)"
    )
    allow_headers: list[str] = Field(
        default=["*"], alias="CORS_ALLOW_HEADERS", description="Allowed HTTP headers (use * for all)"
    )

    model_config = {"populate_by_name": True}


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Application settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    # =====================================================================
    # Pydantic Configuration
    # =====================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
        populate_by_name=True,
    )

    # =====================================================================
    # FlyerGen Server Configuration
    # =====================================================================
    server_host: str = Field(
        default="0.0.0.0",
        description="FlyerGen server host address to bind to",
        alias="FLYERGEN_SERVER_HOST",
    )
    server_port: int = Field(
        default=8000,
        description="FlyerGen server port number",
        alias="FLYERGEN_SERVER_PORT",
    )
    app_url: str = Field(
        default="http://localhost:3000",
        description="Public URL of the web application, used for billing redirects",
        alias="APP_URL",
    )

    # =====================================================================
    # Logging Configuration
    # =====================================================================
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="LOG_LEVEL",
    )
    log_format: str = Field(default="detailed", description="Log format (simple, detailed, json)", alias="LOG_FORMAT")
    enable_file_logging: bool = Field(default=False, description="Write logs to files", alias="ENABLE_FILE_LOGGING")
    log_dir: str = Field(default="logs", description="Directory for log files", alias="LOG_DIR")

    # =====================================================================
    # Database Configuration
    # =====================================================================
    database_url: str = Field(
        default="sqlite+aiosqlite:///./flyergen.db",
        description="Async SQLAlchemy connection URL for the application database",
        alias="DATABASE_URL",
    )
    database_echo: bool = Field(default=False, description="Echo SQL statements", alias="DATABASE_ECHO")
    database_pool_size: int = Field(default=10, description="Connection pool size", alias="DATABASE_POOL_SIZE")
    database_max_overflow: int = Field(
        default=20, description="Connection pool overflow", alias="DATABASE_MAX_OVERFLOW"
    )

    # =====================================================================
    # Auth Configuration
    # =====================================================================
    auth_secret: str = Field(
        default="flyergen-dev-secret-change-me", description="Secret used to sign session tokens", alias="AUTH_SECRET"
    )
    auth_algorithm: str = Field(default="HS256", description="JWT signing algorithm", alias="AUTH_ALGORITHM")
    auth_token_expire_minutes: int = Field(
        default=60 * 24 * 30, description="Session token lifetime in minutes", alias="AUTH_TOKEN_EXPIRE_MINUTES"
    )

    # =====================================================================
    # Stripe Configuration
    # =====================================================================
    stripe_api_key: Optional[str] = Field(default=None, alias="STRIPE_API_KEY")
    stripe_webhook_secret: Optional[str] = Field(default=None, alias="STRIPE_WEBHOOK_SECRET")
    stripe_starter_monthly_plan_id: Optional[str] = Field(default=None, alias="STRIPE_STARTER_MONTHLY_PLAN_ID")
    stripe_starter_yearly_plan_id: Optional[str] = Field(default=None, alias="STRIPE_STARTER_YEARLY_PLAN_ID")
    stripe_pro_monthly_plan_id: Optional[str] = Field(default=None, alias="STRIPE_PRO_MONTHLY_PLAN_ID")
    stripe_pro_yearly_plan_id: Optional[str] = Field(default=None, alias="STRIPE_PRO_YEARLY_PLAN_ID")
    stripe_business_monthly_plan_id: Optional[str] = Field(default=None, alias="STRIPE_BUSINESS_MONTHLY_PLAN_ID")
    stripe_business_yearly_plan_id: Optional[str] = Field(default=None, alias="STRIPE_BUSINESS_YEARLY_PLAN_ID")

    # =====================================================================
    # Image Provider Configuration
    # =====================================================================
    ideogram_api_key: Optional[str] = Field(default=None, alias="IDEOGRAM_API_KEY")
    hugging_face_api_token: Optional[str] = Field(default=None, alias="HUGGING_FACE_API_TOKEN")
    fal_key: Optional[str] = Field(default=None, alias="FAL_KEY")
    image_generation_provider: Optional[str] = Field(default=None, alias="IMAGE_GENERATION_PROVIDER")

    # =====================================================================
    # CORS Configuration
    # =====================================================================
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(default=["*"], alias="CORS_ALLOW_METHODS")
    cors_allow_headers: list[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    # =====================================================================
    # Computed Properties (Grouped Configurations)
    # =====================================================================

    @property
    def auth(self) -> AuthConfig:
        """Get session token configuration from environment variables."""
        return AuthConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def stripe(self) -> StripeConfig:
        """Get Stripe configuration from environment variables."""
        return StripeConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def image_providers(self) -> ImageProvidersConfig:
        """Get image provider credentials from environment variables."""
        return ImageProvidersConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def database(self) -> DatabaseConfig:
        """Get database configuration from environment variables."""
        return DatabaseConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def cors(self) -> CORSConfig:
        """Get CORS configuration from environment variables."""
        return CORSConfig.model_validate(self.model_dump(by_alias=True))


settings = Settings()
