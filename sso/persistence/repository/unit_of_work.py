"""PostgreSQL transaction boundary."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession

from sso.domain.repository import UnitOfWork


class PostgresUnitOfWork(UnitOfWork):
    """Runs each transaction as a SAVEPOINT on the request session.

    A failure inside ``transaction()`` rolls back to the savepoint only; the
    request-level commit in the session provider keeps everything else.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        async with self.session.begin_nested():
            yield
