"""Tests for database connection and transaction management."""

import sqlite3
from pathlib import Path

import pytest

from stash.core.exceptions import CategoryNotFoundError, StoreError
from stash.core.types import Category, ContentItem
from stash.store.database import Database


class TestDatabaseConnection:
    """Tests for database connection lifecycle."""

    def test_connect_creates_database_file(self, test_db_path: Path):
        """Database file should be created on connect."""
        db = Database(test_db_path)
        db.connect()

        assert test_db_path.exists()
        db.close()

    def test_connect_creates_parent_directories(self, tmp_path: Path):
        """Connect should create parent directories if needed."""
        db_path = tmp_path / "subdir" / "nested" / "test.db"
        db = Database(db_path)
        db.connect()

        assert db_path.exists()
        db.close()

    def test_close_without_connect(self, test_db_path: Path):
        """Close should not raise if not connected."""
        db = Database(test_db_path)
        db.close()

    def test_double_connect(self, test_db_path: Path):
        """Connecting twice should work without error."""
        db = Database(test_db_path)
        db.connect()
        db.connect()

        assert db.is_connected
        db.close()

    def test_close_clears_connection(self, test_db_path: Path):
        """Queries after close should raise StoreError."""
        db = Database(test_db_path)
        db.connect()
        db.close()

        with pytest.raises(StoreError, match="not connected"):
            db.execute("SELECT 1")

    def test_transaction_requires_connection(self, test_db_path: Path):
        """transaction() should refuse to run before connect."""
        db = Database(test_db_path)

        with pytest.raises(StoreError, match="not connected"):
            with db.transaction():
                pass

    def test_foreign_keys_enabled(self, db: Database):
        """Connections should enforce foreign keys."""
        cursor = db.execute("PRAGMA foreign_keys")
        assert cursor.fetchone()[0] == 1

    def test_bad_query_raises_store_error(self, db: Database):
        """SQL errors should surface as StoreError."""
        with pytest.raises(StoreError, match="Query execution failed"):
            db.execute("SELECT * FROM no_such_table")


class TestDatabaseSchema:
    """Tests for schema initialization."""

    def test_schema_creates_tables(self, db: Database):
        """Schema should create categories and content_items tables."""
        cursor = db.execute("SELECT name FROM sqlite_master WHERE type='table'")
        tables = {row[0] for row in cursor.fetchall()}

        assert "categories" in tables
        assert "content_items" in tables

    def test_schema_creates_indexes(self, db: Database):
        """Schema should create lookup indexes."""
        cursor = db.execute("SELECT name FROM sqlite_master WHERE type='index'")
        indexes = {row[0] for row in cursor.fetchall()}

        assert "idx_content_items_category" in indexes
        assert "idx_content_items_created" in indexes
        assert "idx_categories_sort" in indexes

    def test_category_names_not_unique_at_storage_level(self, db: Database):
        """Two rows may share a name; uniqueness is enforced above the store."""
        for category_id in ("a", "b"):
            db.execute(
                "INSERT INTO categories (id, name, created_at, updated_at) VALUES (?, ?, ?, ?)",
                (category_id, "Food", "t", "t"),
            )

        cursor = db.execute("SELECT COUNT(*) FROM categories WHERE name = 'Food'")
        assert cursor.fetchone()[0] == 2


def _insert_category(db: Database, category_id: str, name: str) -> None:
    with db.transaction() as cursor:
        cursor.execute(
            "INSERT INTO categories (id, name, created_at, updated_at) VALUES (?, ?, ?, ?)",
            (category_id, name, "t", "t"),
        )


def _category_ids(db: Database) -> set[str]:
    return {row["id"] for row in db.execute("SELECT id FROM categories").fetchall()}


class TestTransactions:
    """Tests for nestable transactions."""

    def test_transaction_commits(self, db: Database, test_db_path: Path):
        """Changes should be visible to another connection after the block."""
        _insert_category(db, "c1", "Food")

        other = sqlite3.connect(str(test_db_path))
        try:
            assert other.execute("SELECT COUNT(*) FROM categories").fetchone()[0] == 1
        finally:
            other.close()

    def test_exception_rolls_back_and_wraps(self, db: Database):
        """An error inside the block should roll back and raise StoreError."""
        with pytest.raises(StoreError, match="Transaction failed"):
            with db.transaction() as cursor:
                cursor.execute(
                    "INSERT INTO categories (id, name, created_at, updated_at) "
                    "VALUES ('c1', 'Food', 't', 't')"
                )
                raise RuntimeError("boom")

        assert _category_ids(db) == set()

    def test_project_error_rolls_back_unwrapped(self, db: Database):
        with pytest.raises(CategoryNotFoundError):
            with db.transaction():
                _insert_category(db, "c1", "Food")
                raise CategoryNotFoundError("Food")

        assert _category_ids(db) == set()

    def test_nested_blocks_commit_once(self, db: Database, monkeypatch):
        """Only the outermost block should commit."""
        commits = []
        original = db._commit
        monkeypatch.setattr(db, "_commit", lambda: (commits.append(1), original()))

        with db.transaction():
            _insert_category(db, "c1", "Food")
            _insert_category(db, "c2", "Tech")
            assert db.in_transaction

        assert len(commits) == 1
        assert not db.in_transaction
        assert _category_ids(db) == {"c1", "c2"}

    def test_inner_failure_rolls_back_outer_work(self, db: Database):
        """A failure in a nested block should discard the whole outer block."""
        with pytest.raises(StoreError):
            with db.transaction():
                _insert_category(db, "c1", "Food")
                with db.transaction():
                    raise ValueError("inner failure")

        assert _category_ids(db) == set()

    def test_commit_failure_applies_nothing(self, db: Database, monkeypatch):
        """A failing commit should roll back and raise StoreError."""

        def failing_commit():
            raise sqlite3.OperationalError("disk I/O error")

        monkeypatch.setattr(db, "_commit", failing_commit)

        with pytest.raises(StoreError, match="disk I/O error"):
            _insert_category(db, "c1", "Food")

        monkeypatch.undo()
        assert _category_ids(db) == set()


class TestNullifyOnDelete:
    """Tests for the category -> item delete rule."""

    def test_deleting_category_keeps_items(self, category_repo, content_repo):
        """Items should survive their category with category_id cleared."""
        category = category_repo.insert(Category(name="Food"))
        item = content_repo.insert(ContentItem(title="Pasta", category_id=category.id))

        category_repo.delete(category)

        stored = content_repo.fetch_by_id(item.id)
        assert stored is not None
        assert stored.category_id is None
        assert stored.category_name is None
