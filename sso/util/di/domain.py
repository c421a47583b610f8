"""Domain layer DI providers."""

from dishka import Scope, provide

from sso.config import DingtalkSettings
from sso.domain.repository import (
    AccountRepository,
    ExternalLinkRepository,
    MembershipRepository,
    UnitOfWork,
)
from sso.domain.service import (
    AccessPolicyEvaluator,
    AccountLinker,
    AuthService,
    IdentityNormalizer,
    OAuthClient,
    OrganizationTracker,
)
from sso.domain.value import AuthProvider
from sso.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Domain services are REQUEST-scoped to align with repository/session lifecycle.
    Each login gets fresh service instances with their own transaction.
    """

    scope = Scope.REQUEST

    @provide
    def get_auth_service(
        self, oauth_clients: dict[AuthProvider, OAuthClient]
    ) -> AuthService:
        """Provide authentication domain service.

        Args:
            oauth_clients: Dictionary mapping providers to their OAuth clients

        Returns:
            AuthService configured with all available OAuth clients
        """
        return AuthService(oauth_clients=oauth_clients)

    @provide
    def get_identity_normalizer(self, settings: DingtalkSettings) -> IdentityNormalizer:
        """Provide identity normalizer."""
        return IdentityNormalizer(settings=settings)

    @provide
    def get_access_policy(self, settings: DingtalkSettings) -> AccessPolicyEvaluator:
        """Provide organization access policy."""
        return AccessPolicyEvaluator(settings=settings)

    @provide
    def get_account_linker(
        self,
        account_repository: AccountRepository,
        external_link_repository: ExternalLinkRepository,
        unit_of_work: UnitOfWork,
        identity_normalizer: IdentityNormalizer,
        settings: DingtalkSettings,
    ) -> AccountLinker:
        """Provide account linker."""
        return AccountLinker(
            account_repository=account_repository,
            external_link_repository=external_link_repository,
            unit_of_work=unit_of_work,
            identity_normalizer=identity_normalizer,
            settings=settings,
        )

    @provide
    def get_organization_tracker(
        self,
        membership_repository: MembershipRepository,
        unit_of_work: UnitOfWork,
        settings: DingtalkSettings,
    ) -> OrganizationTracker:
        """Provide organization tracker."""
        return OrganizationTracker(
            membership_repository=membership_repository,
            unit_of_work=unit_of_work,
            settings=settings,
        )
