"""SQLite database connection manager for stash."""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from loguru import logger

from ..core.exceptions import StashError, StoreError
from ..core.types import fold_text
from .migrations import MigrationRunner


class Database:
    """SQLite database connection manager.

    One connection is shared by every repository; it is the single shared
    mutable resource and all writes go through :meth:`transaction`.
    """

    def __init__(self, path: Path):
        """Initialize database with path.

        Args:
            path: Path to the SQLite database file.
        """
        self.path = path
        self._connection: sqlite3.Connection | None = None
        self._depth = 0

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    @property
    def in_transaction(self) -> bool:
        """True while inside a :meth:`transaction` block."""
        return self._depth > 0

    def connect(self) -> None:
        """Open the connection and bring the schema up to date."""
        if self._connection is not None:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._connection = sqlite3.connect(str(self.path))
            self._connection.row_factory = sqlite3.Row
            self._connection.execute("PRAGMA foreign_keys = ON")
            self._connection.create_function("fold", 1, fold_text, deterministic=True)
            MigrationRunner(self._connection).run()
        except Exception as e:
            if self._connection is not None:
                self._connection.close()
            self._connection = None
            raise StoreError(f"Failed to connect to database: {e}") from e
        logger.debug(f"Database connected: {self.path}")

    def close(self) -> None:
        """Close database connection."""
        if self._connection:
            try:
                self._connection.close()
            except Exception as e:
                raise StoreError(f"Failed to close database: {e}") from e
            finally:
                self._connection = None
                self._depth = 0

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Cursor]:
        """Context manager for database transactions.

        Blocks nest: only the outermost block commits, so a service can wrap
        several repository calls into one atomic save. A failure anywhere
        rolls back everything staged since the outermost block opened.

        Yields:
            A cursor for executing SQL statements.

        Raises:
            StoreError: If connection is not available or transaction fails.
                Project errors raised inside the block are re-raised as is.
        """
        if not self._connection:
            raise StoreError("Database not connected")

        cursor = self._connection.cursor()

        if self._depth > 0:
            self._depth += 1
            try:
                yield cursor
            finally:
                self._depth -= 1
                cursor.close()
            return

        self._depth = 1
        try:
            yield cursor
            self._commit()
        except StashError:
            self._connection.rollback()
            raise
        except Exception as e:
            self._connection.rollback()
            raise StoreError(f"Transaction failed: {e}") from e
        finally:
            self._depth = 0
            cursor.close()

    def execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        """Execute a SQL query.

        Args:
            sql: SQL statement to execute.
            params: Parameters for the SQL statement.

        Returns:
            A cursor with the query results.

        Raises:
            StoreError: If connection is not available or query fails.
        """
        if not self._connection:
            raise StoreError("Database not connected")

        try:
            return self._connection.execute(sql, params)
        except Exception as e:
            raise StoreError(f"Query execution failed: {e}") from e

    def _commit(self) -> None:
        assert self._connection is not None
        self._connection.commit()
