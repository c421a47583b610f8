"""Mock providers for testing."""

from .dingtalk import MockDingtalkProvider
from .persistence import MockPersistenceProvider
from .container import build_test_container

__all__ = [
    "MockDingtalkProvider",
    "MockPersistenceProvider",
    "build_test_container",
]
