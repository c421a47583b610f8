"""FastAPI application."""

from dishka import AsyncContainer
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from sso.config import Settings
from sso.interface.api.routes import auth, health, organizations
from sso.interface.error import HostAuthenticationError, ProviderDisabledError
from sso.util.di.container import create_container, setup_di
from sso.util.logging import setup_logging
from sso.util.observability import (
    instrument_fastapi,
    instrument_httpx,
)


def create_app(container: AsyncContainer | None = None) -> FastAPI:
    """Create FastAPI application.

    Note: Logfire should be configured before calling this function.
    In production, start_app.py handles this.

    Args:
        container: DI container to use; the production container when omitted

    Returns:
        Configured application
    """
    settings = Settings()
    setup_logging(settings)

    # Instrument httpx for outbound DingTalk requests
    # (Logfire must be configured before instrumentation)
    instrument_httpx()

    app_instance = FastAPI(
        title="DingTalk SSO",
        description="DingTalk enterprise single sign-on: code exchange, account linking and organization tracking",
        version="0.1.0",
    )

    # Instrument FastAPI for automatic tracing of HTTP requests
    instrument_fastapi(app_instance)

    # Setup dependency injection
    # Settings are loaded from environment automatically
    setup_di(app_instance, container or create_container())

    # Register routes
    app_instance.include_router(health.router)
    app_instance.include_router(auth.router)
    app_instance.include_router(organizations.router)

    @app_instance.exception_handler(ProviderDisabledError)
    async def provider_disabled_handler(
        request: Request, exc: ProviderDisabledError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)}
        )

    @app_instance.exception_handler(HostAuthenticationError)
    async def host_authentication_handler(
        request: Request, exc: HostAuthenticationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED, content={"detail": str(exc)}
        )

    return app_instance


# Create app instance for uvicorn
# Note: Logfire must be configured before this module is imported
# In production: start_app.py handles this
app = create_app()
