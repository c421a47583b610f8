"""In-memory membership repository for testing."""

from collections import Counter
from typing import Optional

from sso.domain.error import DuplicateRecordError
from sso.domain.model import OrganizationMembership
from sso.domain.repository import MembershipRepository
from sso.domain.value import UserId

from .store import InMemoryStore


class InMemoryMembershipRepository(MembershipRepository):
    """In-memory implementation of MembershipRepository for testing."""

    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def find_by_user_and_organization(
        self, user_id: UserId, organization_id: str
    ) -> Optional[OrganizationMembership]:
        """Find the membership of an account in an organization."""
        for membership in self.store.memberships.values():
            if (
                membership.user_id == user_id
                and membership.organization_id == organization_id
            ):
                return membership
        return None

    async def find_all_by_user_id(
        self, user_id: UserId
    ) -> list[OrganizationMembership]:
        """All memberships of an account, latest first."""
        memberships = [
            m for m in self.store.memberships.values() if m.user_id == user_id
        ]
        return sorted(memberships, key=lambda m: m.last_seen_at, reverse=True)

    async def find_all_by_organization_id(
        self, organization_id: str
    ) -> list[OrganizationMembership]:
        """All memberships in an organization, latest first."""
        memberships = [
            m
            for m in self.store.memberships.values()
            if m.organization_id == organization_id
        ]
        return sorted(memberships, key=lambda m: m.last_seen_at, reverse=True)

    async def save(self, membership: OrganizationMembership) -> OrganizationMembership:
        """Save a membership, enforcing (user_id, organization_id) uniqueness."""
        for other in self.store.memberships.values():
            if (
                other.id != membership.id
                and other.user_id == membership.user_id
                and other.organization_id == membership.organization_id
            ):
                raise DuplicateRecordError(
                    "OrganizationMembership",
                    "organization_id",
                    membership.organization_id,
                )
        self.store.memberships[membership.id] = membership
        return membership

    async def all_organization_ids(self) -> list[str]:
        """Distinct organization IDs."""
        return sorted({m.organization_id for m in self.store.memberships.values()})

    async def organization_user_counts(self) -> dict[str, int]:
        """Number of members per organization."""
        return dict(
            Counter(m.organization_id for m in self.store.memberships.values())
        )
