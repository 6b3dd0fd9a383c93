"""create_accounts_and_short_urls

Create users, action_tokens and short_urls tables.

Revision ID: a1f3c9d2e7b4
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "a1f3c9d2e7b4"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.VARCHAR(21), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("email_verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_users_name", "users", ["name"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "action_tokens",
        sa.Column("id", sa.VARCHAR(21), primary_key=True),
        sa.Column(
            "entity_id",
            sa.VARCHAR(21),
            sa.ForeignKey("users.id"),
            nullable=False,
        ),
        sa.Column("action_name", sa.String(50), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("executed_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_action_tokens_entity_id", "action_tokens", ["entity_id"])

    op.create_table(
        "short_urls",
        sa.Column("id", sa.VARCHAR(21), primary_key=True),
        sa.Column("short_code", sa.String(255), nullable=False),
        sa.Column("long_url", sa.String(2048), nullable=False),
        sa.Column(
            "owner_id",
            sa.VARCHAR(21),
            sa.ForeignKey("users.id"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_short_urls_short_code", "short_urls", ["short_code"], unique=True)
    op.create_index("ix_short_urls_owner_id", "short_urls", ["owner_id"])


def downgrade() -> None:
    op.drop_index("ix_short_urls_owner_id", table_name="short_urls")
    op.drop_index("ix_short_urls_short_code", table_name="short_urls")
    op.drop_table("short_urls")
    op.drop_index("ix_action_tokens_entity_id", table_name="action_tokens")
    op.drop_table("action_tokens")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_index("ix_users_name", table_name="users")
    op.drop_table("users")
