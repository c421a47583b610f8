#!/usr/bin/env python3
"""Apply Alembic migrations, reporting failures to Logfire."""

import sys

import logfire
from alembic import command
from alembic.config import Config

from sso.config import Settings
from sso.util.observability import configure_logfire


def main(revision: str = "head") -> int:
    """Upgrade the SSO schema to ``revision``."""
    settings = Settings()
    configure_logfire(settings)

    with logfire.span("run_migrations", revision=revision):
        try:
            command.upgrade(Config("alembic.ini"), revision)
        except Exception as e:
            logfire.error(
                "Database migration failed",
                revision=revision,
                error=str(e),
                error_type=type(e).__name__,
                _exc_info=sys.exc_info(),
            )
            # Fail the deploy instead of serving logins on a broken schema
            raise

    logfire.info("Database migrations applied", revision=revision)
    return 0


if __name__ == "__main__":
    sys.exit(main(*sys.argv[1:2]))
