"""Retrying HTTP transport shared by the DingTalk API calls.

Both the token exchange and the profile fetch use the same timeout and
backoff policy: connect 5s / total 10s, up to 2 retries with exponential
backoff starting at 0.5s.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable

import httpx

from sso.config import HttpSettings
from sso.domain.value import FailureKind

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


def backoff_schedule(settings: HttpSettings) -> list[float]:
    """Delays between attempts: initial * factor**n for each retry."""
    return [
        settings.backoff_initial * settings.backoff_factor**retry
        for retry in range(settings.max_retries)
    ]


def classify_transport_error(error: httpx.TransportError) -> FailureKind:
    """Map an httpx transport failure to a failure kind."""
    if isinstance(error, httpx.TimeoutException):
        return FailureKind.TIMEOUT
    return FailureKind.CONNECTION_ERROR


def provider_error_message(data: Any) -> str | None:
    """Message of a DingTalk error envelope, or None if ``data`` isn't one.

    The legacy API reports ``{"errcode": N, "errmsg": ...}`` with N != 0;
    the v1.0 API reports ``{"code": ..., "message": ...}``.
    """
    if not isinstance(data, dict):
        return None

    errcode = data.get("errcode")
    if errcode not in (None, 0, "0"):
        return f"{data.get('errmsg') or 'unknown error'} (code: {errcode})"

    if "code" in data and "message" in data and "accessToken" not in data:
        return f"{data['message']} (code: {data['code']})"

    return None


class RetryingHttpClient:
    """Sends one request with DingTalk's timeout and retry policy."""

    def __init__(
        self,
        settings: HttpSettings,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """Initialize the retrying client.

        Args:
            settings: Timeouts, retry count, backoff and retryable statuses
            transport: Optional httpx transport (tests use httpx.MockTransport)
            sleep: Awaitable used between attempts
        """
        self.settings = settings
        self.transport = transport
        self.sleep = sleep

    def _timeout(self) -> httpx.Timeout:
        return httpx.Timeout(
            self.settings.total_timeout, connect=self.settings.connect_timeout
        )

    async def send(
        self,
        method: str,
        url: str,
        *,
        retry_statuses: bool = True,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a request, retrying transport failures.

        Args:
            method: HTTP method
            url: Absolute URL
            retry_statuses: Also retry the configured HTTP statuses
                (429/5xx); the last such response is returned once retries
                are spent
            **kwargs: Passed through to ``httpx.AsyncClient.request``

        Returns:
            The HTTP response

        Raises:
            httpx.TransportError: The last transport failure once retries
                are spent
        """
        delays = backoff_schedule(self.settings)
        attempts = len(delays) + 1

        async with httpx.AsyncClient(
            timeout=self._timeout(), transport=self.transport
        ) as client:
            for attempt, delay in enumerate(delays, start=1):
                try:
                    response = await client.request(method, url, **kwargs)
                except httpx.TransportError as e:
                    logger.warning(
                        f"DingTalk {method} {url} attempt {attempt} failed: "
                        f"{type(e).__name__}, retrying"
                    )
                else:
                    if not (
                        retry_statuses
                        and response.status_code in self.settings.retry_statuses
                    ):
                        return response
                    logger.warning(
                        f"DingTalk {method} {url} returned {response.status_code}, retrying"
                    )
                await self.sleep(delay)

            # Final attempt: its response or failure is the result
            try:
                return await client.request(method, url, **kwargs)
            except httpx.TransportError as e:
                logger.error(
                    f"DingTalk {method} {url} failed after {attempts} attempts: "
                    f"{type(e).__name__} - {e}"
                )
                raise
