"""Organization use cases."""

from .get_organization_stats import GetOrganizationStatsUseCase
from .list_organization_members import ListOrganizationMembersUseCase
from .list_user_organizations import ListUserOrganizationsUseCase

__all__ = [
    "GetOrganizationStatsUseCase",
    "ListOrganizationMembersUseCase",
    "ListUserOrganizationsUseCase",
]
