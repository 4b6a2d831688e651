"""Add CHECK constraints backing the token ledger invariants.

Revision ID: 002_ledger_constraints
Revises: 001_initial
Create Date: 2026-10-19

profiles.tokens never negative; promo_codes.current_uses never above max_uses.
Tables created by app startup (Base.metadata.create_all) already carry these
constraints, so each one is added only if missing.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "002_ledger_constraints"
down_revision: Union[str, None] = "001_initial"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

CONSTRAINTS = [
    ("profiles", "ck_profiles_tokens_non_negative", "tokens >= 0"),
    ("promo_codes", "ck_promo_codes_tokens_positive", "tokens > 0"),
    ("promo_codes", "ck_promo_codes_max_uses_positive", "max_uses > 0"),
    ("promo_codes", "ck_promo_codes_uses_within_limit", "current_uses <= max_uses"),
]


def upgrade() -> None:
    conn = op.get_bind()
    if conn.dialect.name != "postgresql":
        # SQLite cannot ALTER TABLE ADD CONSTRAINT; its tables get constraints from create_all
        return

    for table_name, constraint_name, condition in CONSTRAINTS:
        # DO block swallows duplicate_object so repeated deploys don't abort the transaction
        conn.execute(
            sa.text(
                f"""
                DO $$
                BEGIN
                    ALTER TABLE {table_name} ADD CONSTRAINT {constraint_name} CHECK ({condition});
                EXCEPTION
                    WHEN duplicate_object THEN NULL;
                END $$;
                """
            )
        )


def downgrade() -> None:
    conn = op.get_bind()
    if conn.dialect.name != "postgresql":
        return
    for table_name, constraint_name, _ in CONSTRAINTS:
        conn.execute(sa.text(f"ALTER TABLE {table_name} DROP CONSTRAINT IF EXISTS {constraint_name}"))
