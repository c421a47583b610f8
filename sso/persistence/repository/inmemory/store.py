"""Shared state for the in-memory repositories."""

from dataclasses import dataclass, field

from sso.domain.model import Account, ExternalLink, OrganizationMembership
from sso.domain.value import ExternalLinkId, MembershipId, UserId


@dataclass
class InMemoryStore:
    """Tables of the in-memory backend.

    Shared by every in-memory repository of one request so that the unit
    of work can snapshot and restore them together.
    """

    accounts: dict[UserId, Account] = field(default_factory=dict)
    links: dict[ExternalLinkId, ExternalLink] = field(default_factory=dict)
    memberships: dict[MembershipId, OrganizationMembership] = field(
        default_factory=dict
    )

    def snapshot(self) -> "InMemoryStore":
        # Models are frozen, so copying the dicts is enough
        return InMemoryStore(
            accounts=dict(self.accounts),
            links=dict(self.links),
            memberships=dict(self.memberships),
        )

    def restore(self, snapshot: "InMemoryStore") -> None:
        self.accounts = snapshot.accounts
        self.links = snapshot.links
        self.memberships = snapshot.memberships
