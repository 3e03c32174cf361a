"""SQLite schema migrations for stash (see :class:`MigrationRunner`)."""

from .runner import Migration, MigrationRunner, discover_migrations

__all__ = [
    "Migration",
    "MigrationRunner",
    "discover_migrations",
]
