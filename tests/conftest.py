"""Pytest configuration and fixtures."""

import pytest
from pathlib import Path

from stash.core.config import Config
from stash.core.types import Category, ContentItem
from stash.services import ServiceContainer
from stash.store.database import Database
from stash.store.repositories import CategoryRepository, ContentItemRepository


@pytest.fixture
def test_db_path(tmp_path: Path) -> Path:
    """Provide a temporary database path for tests."""
    return tmp_path / "test.db"


@pytest.fixture
def db(test_db_path: Path) -> Database:
    """Provide a connected database instance."""
    database = Database(test_db_path)
    database.connect()
    yield database
    database.close()


@pytest.fixture
def category_repo(db: Database) -> CategoryRepository:
    """Provide a CategoryRepository instance."""
    return CategoryRepository(db)


@pytest.fixture
def content_repo(db: Database) -> ContentItemRepository:
    """Provide a ContentItemRepository instance."""
    return ContentItemRepository(db)


@pytest.fixture
def config(test_db_path: Path) -> Config:
    """Provide a Config instance pointing at the test database."""
    cfg = Config()
    cfg.db_path = test_db_path
    return cfg


@pytest.fixture
def container(config: Config) -> ServiceContainer:
    """Provide a ServiceContainer instance (not connected)."""
    return ServiceContainer(config)


@pytest.fixture
def connected_container(config: Config) -> ServiceContainer:
    """Provide a connected ServiceContainer instance."""
    container = ServiceContainer(config)
    container.connect()
    yield container
    container.close()


@pytest.fixture
def make_category(category_repo: CategoryRepository):
    """Insert a category with explicit ordering fields."""

    def _make(
        name: str,
        created_at: str = "2024-01-01T00:00:00+00:00",
        sort_order: int = 0,
        id: str | None = None,
    ) -> Category:
        category = Category(name=name, created_at=created_at, sort_order=sort_order)
        if id is not None:
            category.id = id
        return category_repo.insert(category)

    return _make


@pytest.fixture
def make_item(content_repo: ContentItemRepository):
    """Insert a content item, optionally filed under a category."""

    def _make(
        title: str,
        category: Category | None = None,
        url: str | None = None,
        created_at: str | None = None,
        **fields,
    ) -> ContentItem:
        item = ContentItem(
            title=title,
            url=url,
            category_id=category.id if category else None,
            category_name=category.name if category else None,
            **fields,
        )
        if created_at:
            item.created_at = created_at
        return content_repo.insert(item)

    return _make
