"""In-memory external link repository for testing."""

from typing import Optional

from sso.domain.error import DuplicateRecordError
from sso.domain.model import ExternalLink
from sso.domain.repository import ExternalLinkRepository
from sso.domain.value import AuthProvider, ExternalLinkId, UserId

from .store import InMemoryStore


class InMemoryExternalLinkRepository(ExternalLinkRepository):
    """In-memory implementation of ExternalLinkRepository for testing."""

    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def find_by_external_id(
        self, provider: AuthProvider, external_id: str
    ) -> Optional[ExternalLink]:
        """Find the link for a provider identity."""
        for link in self.store.links.values():
            if link.provider == provider and link.external_id == external_id:
                return link
        return None

    async def find_by_user_id(
        self, provider: AuthProvider, user_id: UserId
    ) -> Optional[ExternalLink]:
        """Find the link an account holds for a provider."""
        for link in self.store.links.values():
            if link.provider == provider and link.user_id == user_id:
                return link
        return None

    async def save(self, link: ExternalLink) -> ExternalLink:
        """Save a link, enforcing one link per identity and per account."""
        for other in self.store.links.values():
            if other.id == link.id or other.provider != link.provider:
                continue
            if other.external_id == link.external_id:
                raise DuplicateRecordError(
                    "ExternalLink", "external_id", link.external_id
                )
            if other.user_id == link.user_id:
                raise DuplicateRecordError("ExternalLink", "user_id", str(link.user_id))
        self.store.links[link.id] = link
        return link

    async def delete(self, link_id: ExternalLinkId) -> None:
        """Delete a link."""
        self.store.links.pop(link_id, None)
