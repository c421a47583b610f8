"""Async engine and session factory for the account store."""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from sso.config import DatabaseSettings


def create_engine(database: DatabaseSettings, echo: bool = False) -> AsyncEngine:
    """Create the asyncpg-backed engine.

    The statement timeout is applied per connection through asyncpg's
    ``server_settings`` so a stuck uniqueness check cannot hold a login open.

    Args:
        database: Database settings
        echo: Log emitted SQL

    Returns:
        Configured async engine
    """
    server_settings = {"application_name": "dingtalk-sso"}
    if database.statement_timeout_ms:
        server_settings["statement_timeout"] = str(database.statement_timeout_ms)

    return create_async_engine(
        database.url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=database.pool_size,
        max_overflow=database.max_overflow,
        pool_recycle=database.pool_recycle,
        connect_args={"server_settings": server_settings},
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Sessions outlive commit so returned accounts stay readable."""
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)
