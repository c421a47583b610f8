"""List organization members use case."""

import logfire
from pydantic import BaseModel

from sso.domain.service import OrganizationTracker

from .list_user_organizations import MembershipItem


class ListOrganizationMembersResponse(BaseModel):
    """Accounts seen from one organization, latest first."""

    organization_id: str
    members: list[MembershipItem]


class ListOrganizationMembersUseCase:
    """Use case listing accounts that logged in from an organization."""

    def __init__(self, organization_tracker: OrganizationTracker) -> None:
        self.organization_tracker = organization_tracker

    async def execute(self, organization_id: str) -> ListOrganizationMembersResponse:
        with logfire.span(
            "list_organization_members.execute", organization_id=organization_id
        ):
            memberships = await self.organization_tracker.members_of_organization(
                organization_id
            )
            return ListOrganizationMembersResponse(
                organization_id=organization_id,
                members=[
                    MembershipItem(
                        user_id=str(m.user_id),
                        organization_id=m.organization_id,
                        external_id=m.external_id,
                        open_id=m.open_id,
                        first_seen_at=m.first_seen_at,
                        last_seen_at=m.last_seen_at,
                    )
                    for m in memberships
                ],
            )
