"""initial_schema

Create the schema for DingTalk SSO:
- Accounts (host accounts with custom fields)
- External identity links (one DingTalk identity per account)
- Organization memberships (corpIds an account logged in from)

Revision ID: 3c1f6e2a9b47
Revises:
Create Date: 2026-09-02 10:14:52.318204

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "3c1f6e2a9b47"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    # ========================================================================
    # ACCOUNTS table
    # ========================================================================
    op.create_table(
        "accounts",
        sa.Column(
            "id",
            sa.UUID(),
            server_default=sa.text("uuid_generate_v4()"),
            nullable=False,
        ),
        sa.Column("username", sa.String(20), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("approved", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column(
            "email_verified", sa.Boolean(), nullable=False, server_default="false"
        ),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username", name="uq_accounts_username"),
    )
    op.create_index(
        "uq_accounts_email_lower",
        "accounts",
        [sa.text("lower(email)")],
        unique=True,
    )

    op.create_table(
        "account_custom_fields",
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["accounts.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "name", name="pk_account_custom_fields"),
    )

    # ========================================================================
    # EXTERNAL_IDENTITY_LINKS table
    # ========================================================================
    op.create_table(
        "external_identity_links",
        sa.Column(
            "id",
            sa.UUID(),
            server_default=sa.text("uuid_generate_v4()"),
            nullable=False,
        ),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("provider", sa.String(50), nullable=False),  # 'dingtalk'
        sa.Column("external_id", sa.String(255), nullable=False),  # unionId
        sa.Column(
            "info",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column(
            "extra",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        *_timestamps(),
        sa.Column("last_used_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["accounts.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "provider", "external_id", name="uq_external_link_identity"
        ),
        sa.UniqueConstraint("provider", "user_id", name="uq_external_link_user"),
    )

    # ========================================================================
    # ORGANIZATION_MEMBERSHIPS table
    # ========================================================================
    op.create_table(
        "organization_memberships",
        sa.Column(
            "id",
            sa.UUID(),
            server_default=sa.text("uuid_generate_v4()"),
            nullable=False,
        ),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("organization_id", sa.String(100), nullable=False),  # corpId
        sa.Column("external_id", sa.String(100), nullable=False),
        sa.Column("open_id", sa.String(100), nullable=True),
        sa.Column("first_seen_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("last_seen_at", sa.TIMESTAMP(timezone=True), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["accounts.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "user_id", "organization_id", name="uq_membership_user_org"
        ),
    )
    op.create_index(
        "idx_memberships_external_id", "organization_memberships", ["external_id"]
    )
    op.create_index(
        "idx_memberships_org_open_id",
        "organization_memberships",
        ["organization_id", "open_id"],
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("idx_memberships_org_open_id", table_name="organization_memberships")
    op.drop_index("idx_memberships_external_id", table_name="organization_memberships")
    op.drop_table("organization_memberships")
    op.drop_table("external_identity_links")
    op.drop_table("account_custom_fields")
    op.drop_index("uq_accounts_email_lower", table_name="accounts")
    op.drop_table("accounts")
