"""OrganizationMembership repository implementation using PostgreSQL."""

from typing import Optional

from sqlalchemy import distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from sso.domain.model import OrganizationMembership
from sso.domain.repository import MembershipRepository
from sso.domain.value import UserId
from sso.persistence.mappers import membership_to_dict, row_to_membership
from sso.persistence.tables import organization_memberships_table

_memberships = organization_memberships_table


class PostgresMembershipRepository(MembershipRepository):
    """PostgreSQL implementation of MembershipRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def find_by_user_and_organization(
        self, user_id: UserId, organization_id: str
    ) -> Optional[OrganizationMembership]:
        """Find the membership of an account in an organization.

        Args:
            user_id: Account ID
            organization_id: DingTalk corpId

        Returns:
            Membership if found, None otherwise
        """
        stmt = select(_memberships).where(
            _memberships.c.user_id == user_id,
            _memberships.c.organization_id == organization_id,
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_membership(dict(row)) if row else None

    async def find_all_by_user_id(
        self, user_id: UserId
    ) -> list[OrganizationMembership]:
        stmt = (
            select(_memberships)
            .where(_memberships.c.user_id == user_id)
            .order_by(_memberships.c.last_seen_at.desc())
        )
        result = await self.session.execute(stmt)
        return [row_to_membership(dict(row)) for row in result.mappings().all()]

    async def find_all_by_organization_id(
        self, organization_id: str
    ) -> list[OrganizationMembership]:
        stmt = (
            select(_memberships)
            .where(_memberships.c.organization_id == organization_id)
            .order_by(_memberships.c.last_seen_at.desc())
        )
        result = await self.session.execute(stmt)
        return [row_to_membership(dict(row)) for row in result.mappings().all()]

    async def save(self, membership: OrganizationMembership) -> OrganizationMembership:
        """Save a membership (create or update).

        Args:
            membership: Membership to save

        Returns:
            Saved membership
        """
        membership_dict = membership_to_dict(membership)
        existing = await self.session.execute(
            select(_memberships.c.id).where(_memberships.c.id == membership.id)
        )

        if existing.first():
            stmt = (
                _memberships.update()
                .where(_memberships.c.id == membership.id)
                .values(**membership_dict)
            )
        else:
            stmt = _memberships.insert().values(**membership_dict)

        await self.session.execute(stmt)
        await self.session.flush()
        return membership

    async def all_organization_ids(self) -> list[str]:
        stmt = select(distinct(_memberships.c.organization_id))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def organization_user_counts(self) -> dict[str, int]:
        stmt = select(
            _memberships.c.organization_id, func.count(_memberships.c.user_id)
        ).group_by(_memberships.c.organization_id)
        result = await self.session.execute(stmt)
        return {organization_id: count for organization_id, count in result.all()}
