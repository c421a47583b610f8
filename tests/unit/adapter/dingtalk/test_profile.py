"""Unit tests for the DingTalk profile fetch."""

import httpx
import pytest

from sso.adapter.dingtalk import ProfileFetcher
from sso.adapter.dingtalk.profile import ACCESS_TOKEN_HEADER

from tests.helpers import ScriptedTransport

PROFILE_BODY = {
    "unionId": "union_abc123def456",
    "openId": "open_abc",
    "nick": "zhangsan",
    "name": "张三",
    "email": "zhangsan@example.com",
    "mobile": "13800000000",
}


class TestProfileFetcher:
    """Tests for ProfileFetcher.fetch()."""

    @pytest.mark.asyncio
    async def test_fetches_profile_with_token_header(self, dingtalk_settings, make_http):
        # Arrange
        scripted = ScriptedTransport(httpx.Response(200, json=PROFILE_BODY))
        fetcher = ProfileFetcher(dingtalk_settings, make_http(scripted))

        # Act
        profile = await fetcher.fetch("at_123")

        # Assert
        assert profile.union_id == "union_abc123def456"
        assert profile.open_id == "open_abc"
        assert profile.nick == "zhangsan"
        assert profile.name == "张三"
        assert profile.mobile == "13800000000"

        request = scripted.requests[0]
        assert request.method == "GET"
        assert request.url.path == "/v1.0/contact/users/me"
        assert request.headers[ACCESS_TOKEN_HEADER] == "at_123"

    @pytest.mark.asyncio
    async def test_caches_per_token(self, dingtalk_settings, make_http):
        scripted = ScriptedTransport(httpx.Response(200, json=PROFILE_BODY))
        fetcher = ProfileFetcher(dingtalk_settings, make_http(scripted))

        first = await fetcher.fetch("at_123")
        second = await fetcher.fetch("at_123")

        assert first == second
        assert len(scripted.requests) == 1

    @pytest.mark.asyncio
    async def test_api_error_degrades_to_empty_profile(
        self, dingtalk_settings, make_http
    ):
        scripted = ScriptedTransport(
            httpx.Response(401, json={"code": "InvalidAuthentication", "message": "no"})
        )
        fetcher = ProfileFetcher(dingtalk_settings, make_http(scripted))

        profile = await fetcher.fetch("at_123")

        assert profile.is_empty

    @pytest.mark.asyncio
    async def test_server_error_is_not_retried(self, dingtalk_settings, make_http):
        scripted = ScriptedTransport(httpx.Response(503, text="busy"))
        fetcher = ProfileFetcher(dingtalk_settings, make_http(scripted))

        profile = await fetcher.fetch("at_123")

        assert profile.is_empty
        assert len(scripted.requests) == 1

    @pytest.mark.asyncio
    async def test_transport_failure_degrades_to_empty_profile(
        self, dingtalk_settings, make_http
    ):
        scripted = ScriptedTransport(httpx.ReadTimeout("slow"))
        fetcher = ProfileFetcher(dingtalk_settings, make_http(scripted))

        profile = await fetcher.fetch("at_123")

        assert profile.is_empty

    @pytest.mark.asyncio
    async def test_blank_token_skips_request(self, dingtalk_settings, make_http):
        scripted = ScriptedTransport(httpx.Response(200, json=PROFILE_BODY))
        fetcher = ProfileFetcher(dingtalk_settings, make_http(scripted))

        profile = await fetcher.fetch("")

        assert profile.is_empty
        assert scripted.requests == []
