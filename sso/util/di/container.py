"""Production container wiring."""

import logfire
from dishka import AsyncContainer, make_async_container
from dishka.integrations.fastapi import FastapiProvider, setup_dishka
from fastapi import FastAPI

from sso.util.di import select_providers


def create_container() -> AsyncContainer:
    """Container with every production provider plus the FastAPI request bridge.

    Settings come from the environment when first resolved.
    """
    providers = select_providers()
    logfire.debug(
        "DI container created",
        providers=[type(provider).__name__ for provider in providers],
    )
    return make_async_container(*providers, FastapiProvider())


def setup_di(app: FastAPI, container: AsyncContainer) -> None:
    """Attach the container so DishkaRoute handlers can resolve from it.

    The caller owns the container and closes it.
    """
    setup_dishka(container, app)
