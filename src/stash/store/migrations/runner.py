"""Versioned schema migrations tracked in SQLite's ``PRAGMA user_version``."""

from __future__ import annotations

import importlib
import pkgutil
import sqlite3
from dataclasses import dataclass
from typing import Callable

from loguru import logger

from ...core.exceptions import StoreError


@dataclass
class Migration:
    """One numbered schema step."""

    version: int
    description: str
    up: Callable[[sqlite3.Connection], None]

    def __repr__(self) -> str:
        return f"Migration({self.version}, {self.description!r})"


def discover_migrations() -> list[Migration]:
    """Load every module in ``versions`` that defines ``VERSION`` and ``up``."""
    from . import versions

    found = []
    for module_info in pkgutil.iter_modules(versions.__path__):
        if module_info.ispkg:
            continue
        module = importlib.import_module(f"{versions.__name__}.{module_info.name}")
        if not hasattr(module, "VERSION") or not hasattr(module, "up"):
            logger.warning(f"Skipping invalid migration module: {module_info.name}")
            continue
        found.append(
            Migration(module.VERSION, getattr(module, "DESCRIPTION", module_info.name), module.up)
        )
    return sorted(found, key=lambda m: m.version)


class MigrationRunner:
    """Brings a stash database up to the latest schema version.

    A database written by a newer release (for example one restored from
    another device) reports a version this code has no migration for; the
    runner refuses it instead of reading an unknown schema.

    Example:
        applied = MigrationRunner(connection).run()
    """

    def __init__(self, connection: sqlite3.Connection):
        self.conn = connection
        self._migrations: list[Migration] | None = None

    def get_version(self) -> int:
        return self.conn.execute("PRAGMA user_version").fetchone()[0]

    def set_version(self, version: int) -> None:
        # PRAGMA takes no bound parameters
        self.conn.execute(f"PRAGMA user_version = {int(version)}")

    def get_migrations(self) -> list[Migration]:
        if self._migrations is None:
            self._migrations = discover_migrations()
        return self._migrations

    def get_latest_version(self) -> int:
        migrations = self.get_migrations()
        return migrations[-1].version if migrations else 0

    def get_pending_migrations(self) -> list[Migration]:
        current = self.get_version()
        return [m for m in self.get_migrations() if m.version > current]

    def is_up_to_date(self) -> bool:
        return self.get_version() >= self.get_latest_version()

    def check_supported(self) -> None:
        """Raise if the database schema is newer than any known migration.

        Raises:
            StoreError: If the stored version exceeds the latest migration.
        """
        current, latest = self.get_version(), self.get_latest_version()
        if current > latest:
            raise StoreError(
                f"Database schema version {current} is newer than supported version {latest}"
            )

    def run(self) -> int:
        """Apply pending migrations, committing after each one.

        A failing migration is rolled back and its error re-raised; earlier
        migrations stay applied.

        Returns:
            Number of migrations applied.
        """
        self.check_supported()
        pending = self.get_pending_migrations()
        if not pending:
            logger.debug(f"Schema at version {self.get_version()}, nothing to migrate")
            return 0

        for migration in pending:
            logger.info(f"Applying migration {migration.version}: {migration.description}")
            try:
                migration.up(self.conn)
                self.set_version(migration.version)
                self.conn.commit()
            except Exception as e:
                logger.error(f"Migration {migration.version} failed: {e}")
                self.conn.rollback()
                raise

        logger.info(f"Schema migrated to version {self.get_version()}")
        return len(pending)
