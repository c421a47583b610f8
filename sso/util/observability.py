"""Logfire setup for the SSO service.

Services and use cases log through the ``logfire`` module directly; this
module only configures it and turns on library instrumentation.
"""

import logfire
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine

from sso.config import Settings

# Query parameters that must never reach a trace
REDACTED_QUERY_PARAMS = frozenset({"code", "state", "authCode"})


def configure_logfire(settings: Settings) -> None:
    """Configure Logfire for the running environment.

    Cloud sending follows OBSERVABILITY__SEND_TO_LOGFIRE when set, and the
    presence of OBSERVABILITY__LOGFIRE_TOKEN otherwise.

    Args:
        settings: Application settings
    """
    observability = settings.observability
    send_to_logfire = observability.send_to_logfire
    if send_to_logfire is None:
        send_to_logfire = bool(observability.logfire_token)

    logfire.configure(
        service_name="dingtalk-sso",
        environment=settings.environment,
        token=observability.logfire_token,
        send_to_logfire=send_to_logfire,
        console=logfire.ConsoleOptions(
            span_style="show-parents",
            verbose=settings.debug or settings.dingtalk.debug_auth,
        ),
    )

    logfire.info(
        "Observability configured",
        environment=settings.environment,
        send_to_logfire=send_to_logfire,
        dingtalk_enabled=settings.dingtalk.enabled,
    )


def redact_query(params: dict[str, object]) -> dict[str, object]:
    """Mask OAuth secrets in a query-parameter mapping."""
    return {
        key: ("[redacted]" if key in REDACTED_QUERY_PARAMS else value)
        for key, value in params.items()
    }


def instrument_fastapi(app: FastAPI) -> None:
    """Trace incoming requests, keeping authorization codes out of spans.

    Args:
        app: FastAPI application instance
    """

    def _request_attributes(request, attributes):
        result = {**attributes}
        if "values" in result:
            result["values"] = redact_query(result["values"])
        result["query"] = redact_query(dict(request.query_params))
        return result

    logfire.instrument_fastapi(
        app,
        request_attributes_mapper=_request_attributes,
        excluded_urls="/health",
    )


def instrument_sqlalchemy(engine: AsyncEngine) -> None:
    """Trace account store queries."""
    logfire.instrument_sqlalchemy(engine=engine.sync_engine)


def instrument_httpx() -> None:
    """Trace outbound calls to the DingTalk API."""
    logfire.instrument_httpx()
