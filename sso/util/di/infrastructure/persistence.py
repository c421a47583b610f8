"""Persistence infrastructure providers."""

from collections.abc import AsyncIterator

import logfire
from dishka import Scope, provide
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from sso.config import Settings
from sso.domain.repository import (
    AccountRepository,
    ExternalLinkRepository,
    MembershipRepository,
    UnitOfWork,
)
from sso.persistence.database import create_engine, create_session_factory
from sso.persistence.repository import (
    PostgresAccountRepository,
    PostgresExternalLinkRepository,
    PostgresMembershipRepository,
    PostgresUnitOfWork,
)
from sso.util.di.base import ProviderBase
from sso.util.observability import instrument_sqlalchemy


class PersistenceProvider(ProviderBase):
    """Persistence component base."""

    __mock_component__ = "persistence"


class ProdPersistenceProvider(PersistenceProvider):
    """Production persistence provider using PostgreSQL."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    def get_engine(self, settings: Settings) -> AsyncEngine:
        """Provide database engine."""
        engine = create_engine(settings.database, echo=settings.debug)
        instrument_sqlalchemy(engine)
        return engine

    @provide(scope=Scope.APP)
    def get_session_factory(
        self, engine: AsyncEngine
    ) -> async_sessionmaker[AsyncSession]:
        """Provide session factory."""
        return create_session_factory(engine)

    @provide(scope=Scope.REQUEST)
    async def get_session(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> AsyncIterator[AsyncSession]:
        """Provide database session for request scope.

        The session is committed at the end of the request if no exception
        occurred, or rolled back if one was raised.
        """
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
                logfire.info("Session committed")
            except Exception as e:
                logfire.warn("Session rollback", error=str(e))
                await session.rollback()
                raise

    @provide(scope=Scope.REQUEST)
    def get_account_repository(self, session: AsyncSession) -> AccountRepository:
        """Provide Account repository."""
        return PostgresAccountRepository(session)

    @provide(scope=Scope.REQUEST)
    def get_external_link_repository(
        self, session: AsyncSession
    ) -> ExternalLinkRepository:
        """Provide ExternalLink repository."""
        return PostgresExternalLinkRepository(session)

    @provide(scope=Scope.REQUEST)
    def get_membership_repository(self, session: AsyncSession) -> MembershipRepository:
        """Provide OrganizationMembership repository."""
        return PostgresMembershipRepository(session)

    @provide(scope=Scope.REQUEST)
    def get_unit_of_work(self, session: AsyncSession) -> UnitOfWork:
        """Provide transaction boundary on the request session."""
        return PostgresUnitOfWork(session)
