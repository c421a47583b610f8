"""OAuth infrastructure provider."""

from dishka import Scope, provide

from sso.adapter.dingtalk import DingtalkOAuthClient
from sso.domain.service.auth_service import OAuthClient
from sso.domain.value import AuthProvider
from sso.util.di.base import ProviderBase


class OAuthAggregatorProvider(ProviderBase):
    """Provider that aggregates all OAuth clients into a dictionary."""

    @provide(scope=Scope.REQUEST)
    def get_oauth_clients(
        self, dingtalk_oauth_client: DingtalkOAuthClient
    ) -> dict[AuthProvider, OAuthClient]:
        """Provide dictionary of all OAuth clients by provider.

        Args:
            dingtalk_oauth_client: DingTalk OAuth client (specific type)

        Returns:
            Dictionary mapping AuthProvider to OAuthClient
        """
        return {AuthProvider.DINGTALK: dingtalk_oauth_client}
