"""Create profiles, saved_content and promo_codes tables.

Idempotent: app startup may already have created them with Base.metadata.create_all.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    existing = set(sa.inspect(op.get_bind()).get_table_names())

    if "profiles" not in existing:
        op.create_table(
            "profiles",
            sa.Column("id", sa.String(), primary_key=True),
            sa.Column("email", sa.String(), nullable=False, unique=True),
            sa.Column("full_name", sa.String(), nullable=True),
            sa.Column("tokens", sa.Integer(), nullable=False, server_default="5"),
            sa.Column("subscription_type", sa.String(), nullable=False, server_default="free"),
            sa.Column("subscription_expires_at", sa.DateTime(), nullable=True),
            sa.Column("last_daily_token_claim", sa.DateTime(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.Column("updated_at", sa.DateTime(), nullable=True),
        )
        op.create_index("ix_profiles_id", "profiles", ["id"])
        op.create_index("ix_profiles_email", "profiles", ["email"])

    if "saved_content" not in existing:
        op.create_table(
            "saved_content",
            sa.Column("id", sa.String(), primary_key=True),
            sa.Column("user_id", sa.String(), sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
            sa.Column("title", sa.String(), nullable=False),
            sa.Column("content", sa.Text(), nullable=False),
            sa.Column("content_type", sa.String(), nullable=False),
            sa.Column("platform", sa.String(), nullable=False),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )
        op.create_index("ix_saved_content_user_id", "saved_content", ["user_id"])
        op.create_index("ix_saved_content_platform", "saved_content", ["platform"])
        op.create_index("ix_saved_content_created_at", "saved_content", ["created_at"])

    if "promo_codes" not in existing:
        op.create_table(
            "promo_codes",
            sa.Column("id", sa.String(), primary_key=True),
            sa.Column("code", sa.String(), nullable=False, unique=True),
            sa.Column("tokens", sa.Integer(), nullable=False),
            sa.Column("max_uses", sa.Integer(), nullable=False),
            sa.Column("current_uses", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("expires_at", sa.DateTime(), nullable=True),
            sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )
        op.create_index("ix_promo_codes_code", "promo_codes", ["code"])


def downgrade() -> None:
    """Keep user data for safety; no-op downgrade."""
    pass
