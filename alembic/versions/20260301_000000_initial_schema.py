"""Initial schema for Realty Portal

Revision ID: 20260301_000000
Revises: None
Create Date: 2026-03-01 00:00:00.000000

Creates the four application tables:
- users: admin, agent and writer accounts
- listings: property listings with their moderation state
- blog_posts: blog posts with their moderation state
- activities: activity audit log

Default accounts are not seeded here; use ``realty-admin seed``.

Revision format: YYYYMMDD_HHMMSS_description

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20260301_000000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _moderation_columns() -> list:
    return [
        sa.Column("is_published", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("approved_by", sa.String(64), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    """Create all tables."""

    # Create users table
    op.create_table(
        "users",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("role", sa.String(16), nullable=False, server_default="AGENT"),
        sa.Column("password", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # Create listings table
    op.create_table(
        "listings",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("property_id", sa.String(16), nullable=True),
        sa.Column("user_id", sa.String(64), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("price", sa.Float(), nullable=False, server_default="0"),
        sa.Column("location", sa.String(200), nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("address", sa.String(500), nullable=True),
        sa.Column("property_type", sa.String(32), nullable=True),
        sa.Column("listing_type", sa.String(8), nullable=True),
        sa.Column("bedrooms", sa.Integer(), nullable=True),
        sa.Column("bathrooms", sa.Float(), nullable=True),
        sa.Column("size", sa.Float(), nullable=True),
        sa.Column("parking", sa.Integer(), nullable=True),
        sa.Column("year_built", sa.Integer(), nullable=True),
        sa.Column("floor", sa.Integer(), nullable=True),
        sa.Column("total_floors", sa.Integer(), nullable=True),
        sa.Column("images", sa.JSON(), nullable=False),
        sa.Column("amenities", sa.JSON(), nullable=True),
        sa.Column("available", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_moderation_columns(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_listings_property_id", "listings", ["property_id"], unique=True)
    op.create_index("ix_listings_user_id", "listings", ["user_id"])
    op.create_index("ix_listings_city", "listings", ["city"])
    op.create_index("ix_listings_is_published", "listings", ["is_published"])
    op.create_index("ix_listings_created_at", "listings", ["created_at"])

    # Create blog_posts table
    op.create_table(
        "blog_posts",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("slug", sa.String(200), nullable=False),
        sa.Column("excerpt", sa.String(500), nullable=True),
        sa.Column("featured_image", sa.String(1000), nullable=True),
        sa.Column("images", sa.JSON(), nullable=False),
        *_moderation_columns(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_blog_posts_slug", "blog_posts", ["slug"], unique=True)
    op.create_index("ix_blog_posts_user_id", "blog_posts", ["user_id"])
    op.create_index("ix_blog_posts_is_published", "blog_posts", ["is_published"])
    op.create_index("ix_blog_posts_created_at", "blog_posts", ["created_at"])

    # Create activities table
    op.create_table(
        "activities",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("action", sa.String(16), nullable=False),
        sa.Column("item_type", sa.String(16), nullable=False),
        sa.Column("item_id", sa.String(64), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("ip_address", sa.String(64), nullable=True),
        sa.Column("user_agent", sa.String(500), nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_activities_user_id", "activities", ["user_id"])
    op.create_index("ix_activities_action", "activities", ["action"])
    op.create_index("ix_activities_item_type", "activities", ["item_type"])
    op.create_index("ix_activities_timestamp", "activities", ["timestamp"])


def downgrade() -> None:
    """Drop all tables created in upgrade."""
    op.drop_table("activities")
    op.drop_table("blog_posts")
    op.drop_table("listings")
    op.drop_table("users")
