"""Organization membership routes.

Membership history is host-only data: every route requires the host API key.
"""

from uuid import UUID

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Header

from sso.application.usecase.organization import (
    GetOrganizationStatsUseCase,
    ListOrganizationMembersUseCase,
    ListUserOrganizationsUseCase,
)
from sso.application.usecase.organization.get_organization_stats import (
    GetOrganizationStatsResponse,
)
from sso.application.usecase.organization.list_organization_members import (
    ListOrganizationMembersResponse,
)
from sso.application.usecase.organization.list_user_organizations import (
    ListUserOrganizationsResponse,
)
from sso.config import Settings
from sso.domain.value import UserId
from sso.interface.api.host import HOST_KEY_HEADER, ensure_host

router = APIRouter(
    prefix="/organizations", tags=["organizations"], route_class=DishkaRoute
)


@router.get("", response_model=GetOrganizationStatsResponse)
async def get_organization_stats(
    get_organization_stats_use_case: FromDishka[GetOrganizationStatsUseCase],
    settings: FromDishka[Settings],
    host_api_key: str | None = Header(default=None, alias=HOST_KEY_HEADER),
) -> GetOrganizationStatsResponse:
    """List every organization seen at login with its account count.

    Example:
        GET /organizations
        X-Host-Api-Key: ...

        Response:
        {
            "organizations": [
                {"organization_id": "ding_corp_a", "user_count": 12}
            ]
        }
    """
    ensure_host(settings.host_auth, host_api_key)
    return await get_organization_stats_use_case.execute()


@router.get("/users/{user_id}", response_model=ListUserOrganizationsResponse)
async def list_user_organizations(
    user_id: UUID,
    list_user_organizations_use_case: FromDishka[ListUserOrganizationsUseCase],
    settings: FromDishka[Settings],
    host_api_key: str | None = Header(default=None, alias=HOST_KEY_HEADER),
) -> ListUserOrganizationsResponse:
    """List the organizations an account has logged in from."""
    ensure_host(settings.host_auth, host_api_key)
    return await list_user_organizations_use_case.execute(UserId(user_id))


@router.get("/{organization_id}/members", response_model=ListOrganizationMembersResponse)
async def list_organization_members(
    organization_id: str,
    list_organization_members_use_case: FromDishka[ListOrganizationMembersUseCase],
    settings: FromDishka[Settings],
    host_api_key: str | None = Header(default=None, alias=HOST_KEY_HEADER),
) -> ListOrganizationMembersResponse:
    """List the accounts that logged in from an organization."""
    ensure_host(settings.host_auth, host_api_key)
    return await list_organization_members_use_case.execute(organization_id)
