"""Fixtures for DingTalk adapter tests."""

import pytest

from sso.adapter.dingtalk import RetryingHttpClient
from sso.config import DingtalkSettings
from tests.helpers import ScriptedTransport


@pytest.fixture
def dingtalk_settings() -> DingtalkSettings:
    return DingtalkSettings(client_id="ding_client", client_secret="ding_secret")


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def make_http(dingtalk_settings, sleeps):
    """Build a RetryingHttpClient over a scripted transport."""

    async def fake_sleep(delay: float) -> None:
        sleeps.append(delay)

    def _make(scripted: ScriptedTransport) -> RetryingHttpClient:
        return RetryingHttpClient(
            dingtalk_settings.http, transport=scripted.transport, sleep=fake_sleep
        )

    return _make
