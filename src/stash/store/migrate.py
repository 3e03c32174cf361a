"""Alembic migrations for stash databases addressed by SQLAlchemy URL.

The application itself migrates through :class:`~stash.store.migrations.MigrationRunner`;
these helpers serve tooling that opens a store through SQLAlchemy instead,
and :func:`stamp` lets Alembic adopt a database the runner already built.

Example:
    from stash.store.migrate import stamp, upgrade

    upgrade("sqlite:///fresh.db")
    stamp("sqlite:///~/.local/share/stash/stash.db")
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from loguru import logger
from sqlalchemy import Connection, create_engine, text

SCRIPT_LOCATION = Path(__file__).parent / "alembic"


def _alembic_config(db_url: str) -> Config:
    config = Config()
    config.set_main_option("script_location", str(SCRIPT_LOCATION))
    config.set_main_option("sqlalchemy.url", db_url)
    return config


@contextmanager
def _connect(db_url: str) -> Iterator[Connection]:
    """Open a connection with SQLite foreign keys enforced, disposing the engine after."""
    engine = create_engine(db_url)
    try:
        with engine.connect() as connection:
            if engine.dialect.name == "sqlite":
                connection.execute(text("PRAGMA foreign_keys = ON"))
            yield connection
    finally:
        engine.dispose()


def _run(db_url: str, action, revision: str) -> None:
    config = _alembic_config(db_url)
    with _connect(db_url) as connection:
        config.attributes["connection"] = connection
        action(config, revision)
        connection.commit()


def upgrade(db_url: str, revision: str = "head") -> None:
    """Upgrade the database to ``revision``.

    Raises:
        alembic.util.exc.CommandError: If the revision is unknown.
    """
    _run(db_url, command.upgrade, revision)
    logger.info(f"Alembic upgrade to {revision!r} complete")


def downgrade(db_url: str, revision: str) -> None:
    """Downgrade the database to ``revision`` (e.g. "-1" or "base")."""
    _run(db_url, command.downgrade, revision)
    logger.info(f"Alembic downgrade to {revision!r} complete")


def stamp(db_url: str, revision: str = "head") -> None:
    """Record ``revision`` as applied without running it."""
    _run(db_url, command.stamp, revision)
    logger.info(f"Alembic stamped at {revision!r}")


def get_current_revision(db_url: str) -> str | None:
    """Applied revision, or None for a database Alembic has never touched."""
    with _connect(db_url) as connection:
        return MigrationContext.configure(connection).get_current_revision()


def get_head_revision(db_url: str) -> str | None:
    return ScriptDirectory.from_config(_alembic_config(db_url)).get_current_head()


def is_up_to_date(db_url: str) -> bool:
    return get_current_revision(db_url) == get_head_revision(db_url)
