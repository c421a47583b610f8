"""List user organizations use case."""

from datetime import datetime

import logfire
from pydantic import BaseModel

from sso.domain.service import OrganizationTracker
from sso.domain.value import UserId


class MembershipItem(BaseModel):
    """Membership item in responses."""

    user_id: str
    organization_id: str
    external_id: str
    open_id: str | None
    first_seen_at: datetime
    last_seen_at: datetime


class ListUserOrganizationsResponse(BaseModel):
    """Organizations an account has logged in from, latest first."""

    user_id: str
    organizations: list[MembershipItem]


class ListUserOrganizationsUseCase:
    """Use case listing the DingTalk organizations of one account."""

    def __init__(self, organization_tracker: OrganizationTracker) -> None:
        """Initialize list user organizations use case.

        Args:
            organization_tracker: Organization tracking domain service
        """
        self.organization_tracker = organization_tracker

    async def execute(self, user_id: UserId) -> ListUserOrganizationsResponse:
        """Execute list user organizations flow.

        Args:
            user_id: Account ID

        Returns:
            The account's memberships, most recently seen first
        """
        with logfire.span("list_user_organizations.execute", user_id=str(user_id)):
            memberships = await self.organization_tracker.organizations_for_user(
                user_id
            )
            logfire.info(
                "User organizations listed",
                user_id=str(user_id),
                count=len(memberships),
            )
            return ListUserOrganizationsResponse(
                user_id=str(user_id),
                organizations=[
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
