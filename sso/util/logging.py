"""Logging configuration for the application."""

import logging
import sys
from contextlib import AbstractContextManager
from typing import Any, Protocol

from sso.config import Settings


class StructuredLogger(Protocol):
    """Structured log sink used by the SSO services.

    The ``logfire`` module satisfies this protocol and is the default;
    tests inject a recording implementation instead.
    """

    def info(self, msg_template: str, /, **attributes: Any) -> None: ...

    def warn(self, msg_template: str, /, **attributes: Any) -> None: ...

    def error(self, msg_template: str, /, **attributes: Any) -> None: ...

    def span(
        self, msg_template: str, /, **attributes: Any
    ) -> AbstractContextManager[Any]: ...


def setup_logging(settings: Settings) -> None:
    """Configure application logging.

    Sets up stdlib logging with a level based on environment. Services emit
    structured events through logfire; the stdlib loggers cover the HTTP
    adapter and the API layer.

    Args:
        settings: Application settings
    """
    if settings.debug or settings.dingtalk.debug_auth:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )

    # Third-party loggers stay quiet
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logging.getLogger("sso").setLevel(level)

    logger = logging.getLogger(__name__)
    logger.info(
        f"Logging configured: environment={settings.environment}, level={logging.getLevelName(level)}"
    )
