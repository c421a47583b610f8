"""Shared test helpers."""

from contextlib import contextmanager
from typing import Any

import httpx

from sso.domain.value import ProviderProfile


def make_profile(
    union_id: str | None = "union_abc123def456",
    open_id: str | None = "open_abc123",
    nick: str | None = None,
    name: str | None = "张三",
    email: str | None = "zhangsan@example.com",
    mobile: str | None = None,
) -> ProviderProfile:
    """Helper building a DingTalk profile with sensible defaults."""
    return ProviderProfile(
        union_id=union_id,
        open_id=open_id,
        nick=nick,
        name=name,
        email=email,
        mobile=mobile,
    )


class RecordingLogger:
    """StructuredLogger that keeps every event for assertions."""

    def __init__(self) -> None:
        self.events: list[tuple[str, str, dict[str, Any]]] = []

    def info(self, msg_template: str, /, **attributes: Any) -> None:
        self.events.append(("info", msg_template, attributes))

    def warn(self, msg_template: str, /, **attributes: Any) -> None:
        self.events.append(("warn", msg_template, attributes))

    def error(self, msg_template: str, /, **attributes: Any) -> None:
        self.events.append(("error", msg_template, attributes))

    @contextmanager
    def span(self, msg_template: str, /, **attributes: Any):
        self.events.append(("span", msg_template, attributes))
        yield

    def messages(self, level: str | None = None) -> list[str]:
        return [msg for lvl, msg, _ in self.events if level is None or lvl == level]


class ScriptedTransport:
    """httpx handler playing back one result per request.

    Each script item is an ``httpx.Response`` or an exception to raise.
    The last item repeats once the script runs out.
    """

    def __init__(self, *script):
        self.script = list(script)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        index = min(len(self.requests), len(self.script)) - 1
        item = self.script[index]
        if isinstance(item, Exception):
            raise item
        return item

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)
