"""Organization statistics use case."""

import logfire
from pydantic import BaseModel

from sso.domain.service import OrganizationTracker


class OrganizationCount(BaseModel):
    """Member count of one organization."""

    organization_id: str
    user_count: int


class GetOrganizationStatsResponse(BaseModel):
    """Member counts for every known organization."""

    organizations: list[OrganizationCount]


class GetOrganizationStatsUseCase:
    """Use case reporting how many accounts each organization has."""

    def __init__(self, organization_tracker: OrganizationTracker) -> None:
        self.organization_tracker = organization_tracker

    async def execute(self) -> GetOrganizationStatsResponse:
        """Member counts ordered by organization ID."""
        with logfire.span("get_organization_stats.execute"):
            organization_ids = await self.organization_tracker.organization_ids()
            counts = await self.organization_tracker.organization_user_counts()
            return GetOrganizationStatsResponse(
                organizations=[
                    OrganizationCount(
                        organization_id=organization_id,
                        user_count=counts.get(organization_id, 0),
                    )
                    for organization_id in sorted(organization_ids)
                ]
            )
