"""External identity link repository interface."""

from abc import ABC, abstractmethod
from typing import Optional

from sso.domain.model.external_link import ExternalLink
from sso.domain.value import AuthProvider, ExternalLinkId, UserId


class ExternalLinkRepository(ABC):
    """Repository for ExternalLink entity.

    Implementations must keep (provider, external_id) unique.
    """

    @abstractmethod
    async def find_by_external_id(
        self, provider: AuthProvider, external_id: str
    ) -> Optional[ExternalLink]:
        """Find the link for a provider identity.

        Args:
            provider: Identity provider
            external_id: Provider identifier (unionId)

        Returns:
            The link if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_user_id(
        self, provider: AuthProvider, user_id: UserId
    ) -> Optional[ExternalLink]:
        """Find the link a local account holds for a provider.

        Args:
            provider: Identity provider
            user_id: Account ID

        Returns:
            The link if found, None otherwise
        """
        pass

    @abstractmethod
    async def save(self, link: ExternalLink) -> ExternalLink:
        """Save a link (create or update).

        Args:
            link: The link to save

        Returns:
            The saved link

        Raises:
            DuplicateRecordError: If another link already holds external_id
        """
        pass

    @abstractmethod
    async def delete(self, link_id: ExternalLinkId) -> None:
        """Delete a link.

        Args:
            link_id: The link to delete
        """
        pass
