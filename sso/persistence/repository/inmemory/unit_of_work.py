"""In-memory transaction boundary for testing."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sso.domain.repository import UnitOfWork

from .store import InMemoryStore


class InMemoryUnitOfWork(UnitOfWork):
    """Snapshots the store on entry and restores it if the block raises."""

    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        snapshot = self.store.snapshot()
        try:
            yield
        except BaseException:
            self.store.restore(snapshot)
            raise
