"""SQLAlchemy table definitions for DingTalk SSO.

They match the schema defined in Alembic migrations.
"""

from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Index,
    MetaData,
    PrimaryKeyConstraint,
    String,
    Table,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID

metadata = MetaData()

# ============================================================================
# ACCOUNTS TABLE (host account storage)
# ============================================================================
accounts_table = Table(
    "accounts",
    metadata,
    Column("id", UUID, primary_key=True, server_default="uuid_generate_v4()"),
    Column("username", String(20), nullable=False),
    Column("name", String(255), nullable=True),
    Column("email", String(255), nullable=False),
    Column("active", Boolean, nullable=False, server_default="false"),
    Column("approved", Boolean, nullable=False, server_default="false"),
    Column("email_verified", Boolean, nullable=False, server_default="false"),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    UniqueConstraint("username", name="uq_accounts_username"),
)

# Emails are unique case-insensitively
Index("uq_accounts_email_lower", func.lower(accounts_table.c.email), unique=True)

account_custom_fields_table = Table(
    "account_custom_fields",
    metadata,
    Column(
        "user_id", UUID, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False
    ),
    Column("name", String(100), nullable=False),
    Column("value", Text, nullable=False),
    PrimaryKeyConstraint("user_id", "name", name="pk_account_custom_fields"),
)

# ============================================================================
# EXTERNAL IDENTITY LINKS TABLE
# ============================================================================
external_identity_links_table = Table(
    "external_identity_links",
    metadata,
    Column("id", UUID, primary_key=True, server_default="uuid_generate_v4()"),
    Column(
        "user_id", UUID, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False
    ),
    Column("provider", String(50), nullable=False),  # 'dingtalk'
    Column("external_id", String(255), nullable=False),  # unionId
    Column("info", JSONB, nullable=False, server_default="{}"),
    Column("extra", JSONB, nullable=False, server_default="{}"),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column("last_used_at", TIMESTAMP(timezone=True), nullable=True),
    UniqueConstraint("provider", "external_id", name="uq_external_link_identity"),
    UniqueConstraint("provider", "user_id", name="uq_external_link_user"),
)

# ============================================================================
# ORGANIZATION MEMBERSHIPS TABLE
# ============================================================================
organization_memberships_table = Table(
    "organization_memberships",
    metadata,
    Column("id", UUID, primary_key=True, server_default="uuid_generate_v4()"),
    Column(
        "user_id", UUID, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False
    ),
    Column("organization_id", String(100), nullable=False),  # corpId
    Column("external_id", String(100), nullable=False),  # unionId
    Column("open_id", String(100), nullable=True),
    Column("first_seen_at", TIMESTAMP(timezone=True), nullable=False),
    Column("last_seen_at", TIMESTAMP(timezone=True), nullable=False),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    UniqueConstraint("user_id", "organization_id", name="uq_membership_user_org"),
)

Index("idx_memberships_external_id", organization_memberships_table.c.external_id)
Index(
    "idx_memberships_org_open_id",
    organization_memberships_table.c.organization_id,
    organization_memberships_table.c.open_id,
)
