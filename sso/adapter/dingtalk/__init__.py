"""DingTalk identity provider adapter."""

from sso.adapter.dingtalk.client import (
    DingtalkOAuthClient,
    MockDingtalkOAuthClient,
    RealDingtalkOAuthClient,
)
from sso.adapter.dingtalk.http import RetryingHttpClient
from sso.adapter.dingtalk.profile import ProfileFetcher
from sso.adapter.dingtalk.token import TokenExchangeClient

__all__ = [
    "DingtalkOAuthClient",
    "MockDingtalkOAuthClient",
    "ProfileFetcher",
    "RealDingtalkOAuthClient",
    "RetryingHttpClient",
    "TokenExchangeClient",
]
