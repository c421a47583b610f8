"""Organization membership repository interface."""

from abc import ABC, abstractmethod
from typing import Optional

from sso.domain.model.membership import OrganizationMembership
from sso.domain.value import UserId


class MembershipRepository(ABC):
    """Repository for OrganizationMembership entity.

    Keyed by (user_id, organization_id).
    """

    @abstractmethod
    async def find_by_user_and_organization(
        self, user_id: UserId, organization_id: str
    ) -> Optional[OrganizationMembership]:
        """Find the membership of an account in an organization.

        Args:
            user_id: Account ID
            organization_id: DingTalk corpId

        Returns:
            The membership if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_all_by_user_id(
        self, user_id: UserId
    ) -> list[OrganizationMembership]:
        """All organizations an account has logged in from, latest first."""
        pass

    @abstractmethod
    async def find_all_by_organization_id(
        self, organization_id: str
    ) -> list[OrganizationMembership]:
        """All accounts seen from an organization, latest first."""
        pass

    @abstractmethod
    async def save(self, membership: OrganizationMembership) -> OrganizationMembership:
        """Save a membership (create or update).

        Args:
            membership: The membership to save

        Returns:
            The saved membership
        """
        pass

    @abstractmethod
    async def all_organization_ids(self) -> list[str]:
        """Distinct organization IDs with at least one member."""
        pass

    @abstractmethod
    async def organization_user_counts(self) -> dict[str, int]:
        """Number of member accounts per organization ID."""
        pass
