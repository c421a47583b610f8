"""Mock DingTalk providers for testing."""

from dishka import Scope, provide

from sso.adapter.dingtalk import DingtalkOAuthClient, MockDingtalkOAuthClient
from sso.util.di.infrastructure.dingtalk import DingtalkProvider


class MockDingtalkProvider(DingtalkProvider):
    """Mock DingTalk provider using the in-process OAuth client.

    APP scope so tests can register profiles on the same client the
    login flow uses.
    """

    __is_mock__ = True

    @provide(scope=Scope.APP)
    def get_dingtalk_oauth_client(self) -> DingtalkOAuthClient:
        """Provide mock DingTalk OAuth client."""
        return MockDingtalkOAuthClient()
