"""Initial schema and seed data for FlyerGen

Revision ID: 20260301_000000
Revises: None
Create Date: 2026-03-01 00:00:00.000000

This is the initial migration that creates all tables of the FlyerGen
service and seeds the built-in system prompts (version 1 of every default
event type, carousel background and text generation prompt).

Revision format: YYYYMMDD_HHMMSS_description

"""

from datetime import datetime, timezone
from typing import Sequence, Union
from uuid import uuid4

import sqlalchemy as sa

from alembic import op
from flyergen.server.services.system_prompts import get_default_prompts

# revision identifiers, used by Alembic.
revision: str = "20260301_000000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

USER_ROLE = sa.Enum("USER", "ADMIN", "HERO", name="userrole")
CONTACT_STATUS = sa.Enum("NEW", "READ", "REPLIED", "ARCHIVED", name="contactstatus")


def upgrade() -> None:
    """Create all tables and seed initial data."""

    # Create users table
    op.create_table(
        "users",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("username", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("role", USER_ROLE, nullable=False, server_default="USER"),
        sa.Column("credits", sa.Integer(), nullable=False, server_default="3"),
        sa.Column("watermark_enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("password_hash", sa.String(), nullable=True),
        sa.Column("stripe_customer_id", sa.String(), nullable=True),
        sa.Column("stripe_subscription_id", sa.String(), nullable=True),
        sa.Column("stripe_price_id", sa.String(), nullable=True),
        sa.Column("stripe_current_period_end", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("stripe_customer_id"),
        sa.UniqueConstraint("stripe_subscription_id"),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # Create generated_images table
    op.create_table(
        "generated_images",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("prompt", sa.Text(), nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("event_type", sa.String(), nullable=True),
        sa.Column("event_details", sa.JSON(), nullable=True),
        sa.Column("aspect_ratio", sa.String(), nullable=False, server_default="1:1"),
        sa.Column("style_name", sa.String(), nullable=True),
        sa.Column("custom_style", sa.String(), nullable=True),
        sa.Column("seed", sa.Integer(), nullable=True),
        sa.Column("provider", sa.String(), nullable=True),
        sa.Column("quality", sa.String(), nullable=True),
        sa.Column("generation_time_ms", sa.Integer(), nullable=True),
        sa.Column("provider_cost", sa.Float(), nullable=True),
        sa.Column("is_upscaled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("original_image_id", sa.String(), nullable=True),
        sa.Column("upscaled_image_id", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["original_image_id"], ["generated_images.id"]),
        sa.ForeignKeyConstraint(["upscaled_image_id"], ["generated_images.id"]),
    )
    op.create_index("ix_generated_images_user_id", "generated_images", ["user_id"])
    op.create_index("ix_generated_images_created_at", "generated_images", ["created_at"])

    # Create system_prompts table
    op.create_table(
        "system_prompts",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("subcategory", sa.String(), nullable=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("prompt_text", sa.Text(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_by", sa.String(), nullable=True),
        sa.Column("updated_by", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("category", "subcategory", "version", name="uq_system_prompt_version"),
    )
    op.create_index("ix_system_prompts_category", "system_prompts", ["category"])
    op.create_index("ix_system_prompts_subcategory", "system_prompts", ["subcategory"])

    # Create provider_settings table
    op.create_table(
        "provider_settings",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("provider_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("base_settings", sa.JSON(), nullable=False),
        sa.Column("specific_settings", sa.JSON(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_default", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_by", sa.String(), nullable=True),
        sa.Column("updated_by", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("provider_id", "name", name="uq_provider_settings_name"),
    )
    op.create_index("ix_provider_settings_provider_id", "provider_settings", ["provider_id"])
    op.create_index("ix_provider_settings_created_at", "provider_settings", ["created_at"])

    # Create contact_messages table
    op.create_table(
        "contact_messages",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("first_name", sa.String(50), nullable=False),
        sa.Column("last_name", sa.String(50), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("subject", sa.String(100), nullable=False),
        sa.Column("message", sa.String(2000), nullable=False),
        sa.Column("status", CONTACT_STATUS, nullable=False, server_default="NEW"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_contact_messages_email", "contact_messages", ["email"])
    op.create_index("ix_contact_messages_status", "contact_messages", ["status"])
    op.create_index("ix_contact_messages_created_at", "contact_messages", ["created_at"])

    # Seed the built-in system prompts as version 1
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    system_prompts = sa.table(
        "system_prompts",
        sa.column("id", sa.String()),
        sa.column("category", sa.String()),
        sa.column("subcategory", sa.String()),
        sa.column("name", sa.String()),
        sa.column("prompt_text", sa.Text()),
        sa.column("is_active", sa.Boolean()),
        sa.column("version", sa.Integer()),
        sa.column("created_at", sa.DateTime()),
        sa.column("updated_at", sa.DateTime()),
    )
    op.bulk_insert(
        system_prompts,
        [
            {
                "id": uuid4().hex,
                "category": category,
                "subcategory": subcategory,
                "name": f"{subcategory or category} (default)",
                "prompt_text": text,
                "is_active": True,
                "version": 1,
                "created_at": now,
                "updated_at": now,
            }
            for (category, subcategory), text in get_default_prompts().items()
        ],
    )


def downgrade() -> None:
    """Drop all tables created in upgrade."""
    op.drop_table("contact_messages")
    op.drop_table("provider_settings")
    op.drop_table("system_prompts")
    op.drop_table("generated_images")
    op.drop_table("users")

    # Drop the enum types
    if op.get_bind().dialect.name == "postgresql":
        op.execute("DROP TYPE IF EXISTS contactstatus")
        op.execute("DROP TYPE IF EXISTS userrole")
