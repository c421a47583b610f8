"""Application layer DI providers."""

from dishka import Scope, provide

from sso.application.usecase.auth import (
    AuthenticateUseCase,
    DescribeLinkUseCase,
    LoginUseCase,
    RevokeLinkUseCase,
)
from sso.application.usecase.organization import (
    GetOrganizationStatsUseCase,
    ListOrganizationMembersUseCase,
    ListUserOrganizationsUseCase,
)
from sso.config import DingtalkSettings
from sso.domain.service import (
    AccessPolicyEvaluator,
    AccountLinker,
    AuthService,
    IdentityNormalizer,
    OrganizationTracker,
)
from sso.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production application use cases provider - concrete, no mocks needed."""

    scope = Scope.REQUEST

    # Auth use cases
    @provide
    def get_authenticate_use_case(
        self,
        auth_service: AuthService,
        identity_normalizer: IdentityNormalizer,
        access_policy: AccessPolicyEvaluator,
        account_linker: AccountLinker,
        organization_tracker: OrganizationTracker,
        settings: DingtalkSettings,
    ) -> AuthenticateUseCase:
        """Provide authenticate use case."""
        return AuthenticateUseCase(
            auth_service=auth_service,
            identity_normalizer=identity_normalizer,
            access_policy=access_policy,
            account_linker=account_linker,
            organization_tracker=organization_tracker,
            settings=settings,
        )

    @provide
    def get_login_use_case(
        self, auth_service: AuthService, authenticate: AuthenticateUseCase
    ) -> LoginUseCase:
        """Provide login use case."""
        return LoginUseCase(auth_service=auth_service, authenticate=authenticate)

    @provide
    def get_revoke_link_use_case(self, account_linker: AccountLinker) -> RevokeLinkUseCase:
        """Provide revoke link use case."""
        return RevokeLinkUseCase(account_linker=account_linker)

    @provide
    def get_describe_link_use_case(
        self, account_linker: AccountLinker
    ) -> DescribeLinkUseCase:
        """Provide describe link use case."""
        return DescribeLinkUseCase(account_linker=account_linker)

    # Organization use cases
    @provide
    def get_list_user_organizations_use_case(
        self, organization_tracker: OrganizationTracker
    ) -> ListUserOrganizationsUseCase:
        """Provide list user organizations use case."""
        return ListUserOrganizationsUseCase(organization_tracker=organization_tracker)

    @provide
    def get_list_organization_members_use_case(
        self, organization_tracker: OrganizationTracker
    ) -> ListOrganizationMembersUseCase:
        """Provide list organization members use case."""
        return ListOrganizationMembersUseCase(
            organization_tracker=organization_tracker
        )

    @provide
    def get_organization_stats_use_case(
        self, organization_tracker: OrganizationTracker
    ) -> GetOrganizationStatsUseCase:
        """Provide organization stats use case."""
        return GetOrganizationStatsUseCase(organization_tracker=organization_tracker)
