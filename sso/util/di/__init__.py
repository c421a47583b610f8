"""Dependency injection module."""

from collections.abc import Collection

from sso.util.di.application import ProdApplicationProvider
from sso.util.di.base import Component, ProviderBase
from sso.util.di.core import ProdConfigProvider
from sso.util.di.domain import ProdDomainProvider
from sso.util.di.infrastructure import (
    DingtalkProvider,
    OAuthAggregatorProvider,
    PersistenceProvider,
    ProdDingtalkProvider,
    ProdPersistenceProvider,
)
from sso.util.error import DependencyInjectionError

# Order only matters for readability; dishka resolves the graph itself
PROVIDERS: list[type[ProviderBase]] = [
    ProdConfigProvider,
    ProdDomainProvider,
    ProdApplicationProvider,
    # Mockable: the DingTalk API and the account store
    DingtalkProvider,
    PersistenceProvider,
    OAuthAggregatorProvider,
]


def mockable_components() -> set[Component]:
    """Names of the components that ship a mock implementation."""
    return {
        base.__mock_component__
        for base in PROVIDERS
        if base.__mock_component__ and base.__subclasses__()
    }


def get_provider(base: type[ProviderBase], use_mock: bool = False) -> type[ProviderBase]:
    """Pick the implementation class for a provider base.

    A base without subclasses is concrete and returned as is. Otherwise the
    subclass whose ``__is_mock__`` matches ``use_mock`` wins.

    Raises:
        DependencyInjectionError: If no subclass matches
    """
    subclasses = base.__subclasses__()
    if not subclasses:
        return base

    for impl in subclasses:
        if impl.__is_mock__ == use_mock:
            return impl

    kind = "mock" if use_mock else "production"
    raise DependencyInjectionError(
        f"No {kind} implementation for {base.__mock_component__ or base.__name__}"
    )


def select_providers(mocked: Collection[Component] = ()) -> list[ProviderBase]:
    """Instantiate every provider, using mocks for the named components.

    Args:
        mocked: Components to replace with their mock implementation

    Returns:
        Provider instances ready for ``make_async_container``
    """
    return [
        get_provider(base, use_mock=base.__mock_component__ in mocked)()
        for base in PROVIDERS
    ]


__all__ = [
    "Component",
    "DingtalkProvider",
    "OAuthAggregatorProvider",
    "PROVIDERS",
    "PersistenceProvider",
    "ProdApplicationProvider",
    "ProdConfigProvider",
    "ProdDingtalkProvider",
    "ProdDomainProvider",
    "ProdPersistenceProvider",
    "ProviderBase",
    "get_provider",
    "mockable_components",
    "select_providers",
]
