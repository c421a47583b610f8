"""backfill_organization_memberships

Seed organization_memberships from DingTalk links created before
membership tracking existed. The corpId may sit under several keys of
the link's extra data depending on when the link was written.

Revision ID: 9d4b2c7e1a05
Revises: 3c1f6e2a9b47
Create Date: 2026-09-16 15:40:07.552931

"""

from typing import Sequence, Union

from alembic import op


# revision identifiers, used by Alembic.
revision: str = "9d4b2c7e1a05"
down_revision: Union[str, Sequence[str], None] = "3c1f6e2a9b47"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.execute("""
        INSERT INTO organization_memberships (
            user_id, organization_id, external_id, open_id,
            first_seen_at, last_seen_at
        )
        SELECT
            l.user_id,
            COALESCE(
                NULLIF(l.extra->>'dingtalk_corp_id', ''),
                NULLIF(l.extra->>'corp_id', ''),
                NULLIF(l.extra->'raw_info'->>'corpId', ''),
                NULLIF(l.extra->>'corpId', '')
            ) AS organization_id,
            l.external_id,
            COALESCE(
                NULLIF(l.extra->>'dingtalk_open_id', ''),
                NULLIF(l.extra->>'open_id', '')
            ) AS open_id,
            l.created_at,
            COALESCE(l.last_used_at, l.updated_at)
        FROM external_identity_links l
        WHERE l.provider = 'dingtalk'
          AND COALESCE(
                NULLIF(l.extra->>'dingtalk_corp_id', ''),
                NULLIF(l.extra->>'corp_id', ''),
                NULLIF(l.extra->'raw_info'->>'corpId', ''),
                NULLIF(l.extra->>'corpId', '')
              ) IS NOT NULL
        ON CONFLICT ON CONSTRAINT uq_membership_user_org DO NOTHING
    """)


def downgrade() -> None:
    """Downgrade schema.

    Backfilled rows cannot be told apart from tracked ones, so nothing
    is removed.
    """
    pass
