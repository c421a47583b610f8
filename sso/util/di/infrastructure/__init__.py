"""Infrastructure providers."""

# Import bases
from .dingtalk import DingtalkProvider
from .oauth import OAuthAggregatorProvider
from .persistence import PersistenceProvider

# Import implementations (needed for __subclasses__())
from .dingtalk import ProdDingtalkProvider  # noqa: F401
from .persistence import ProdPersistenceProvider  # noqa: F401

__all__ = [
    "DingtalkProvider",
    "OAuthAggregatorProvider",
    "PersistenceProvider",
    "ProdDingtalkProvider",
    "ProdPersistenceProvider",
]
