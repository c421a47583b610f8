#!/usr/bin/env python3
"""Start the SSO service with Logfire error tracking for startup errors."""

import sys

import logfire
import uvicorn

from sso.config import Settings
from sso.util.observability import configure_logfire


def main() -> int:
    """Start the application and log any startup errors to Logfire."""
    settings = Settings()

    # Configure Logfire early to catch startup errors
    configure_logfire(settings)

    try:
        logfire.info(
            "Starting DingTalk SSO service",
            dingtalk_enabled=settings.dingtalk.enabled,
            callback_url=settings.dingtalk.callback_url,
        )

        # The app module configures nothing further; Logfire is already set up
        uvicorn.run(
            "sso.interface.api.app:app",
            host="0.0.0.0",
            port=settings.port,
            log_level="debug" if settings.debug else "info",
        )

        return 0

    except Exception as e:
        logfire.error(
            "Application startup failed",
            error=str(e),
            error_type=type(e).__name__,
            _exc_info=sys.exc_info(),
        )
        # Re-raise so the container fails properly
        raise


if __name__ == "__main__":
    sys.exit(main())
