"""Content capture and item management."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from loguru import logger

from ..core.config import CategoryConfig, ContentConfig
from ..core.types import Category, ContentItem
from ..store.database import Database
from ..store.repositories import CategoryRepository, ContentItemRepository

if TYPE_CHECKING:
    from .container import ServiceContainer


@dataclass
class Page:
    """One page of items, newest first."""

    items: list[ContentItem]
    has_more: bool


class ContentService:
    """Service for saving, filing and paging content items.

    Each public method is one logical operation and commits once.
    """

    def __init__(
        self,
        db: Database,
        category_repo: CategoryRepository,
        content_repo: ContentItemRepository,
        content_config: ContentConfig | None = None,
        category_config: CategoryConfig | None = None,
    ):
        self._db = db
        self._category_repo = category_repo
        self._content_repo = content_repo
        self._content_config = content_config or ContentConfig()
        self._category_config = category_config or CategoryConfig()

    @classmethod
    def from_container(cls, container: "ServiceContainer") -> "ContentService":
        return cls(
            db=container.db,
            category_repo=container.category_repo,
            content_repo=container.content_repo,
            content_config=container.config.content,
            category_config=container.config.categories,
        )

    def save_item(
        self,
        title: str,
        category_name: str | None = None,
        description: str | None = None,
        url: str | None = None,
        thumbnail_url: str | None = None,
        image_data: bytes | None = None,
        metadata: dict[str, str] | None = None,
    ) -> ContentItem:
        """Save a capture, filing it under ``category_name``.

        A capture identical to one saved within the duplicate window is not
        stored again; the earlier item is returned instead. With no category
        name the item goes to the default category.

        Args:
            title: Item title.
            category_name: Category to file under (found or created).
            description: Optional description.
            url: Optional link.
            thumbnail_url: Optional remote thumbnail.
            image_data: Optional raw image bytes.
            metadata: Optional key -> string metadata.

        Returns:
            The stored item.
        """
        duplicate = self._content_repo.fetch_recent_duplicate(title, url)
        if duplicate:
            logger.debug(f"Skipping duplicate capture of {title!r}")
            return duplicate

        with self._db.transaction():
            name = category_name if category_name is not None else (
                self._category_repo.get_default_category_name()
            )
            category = self._category_repo.find_or_create(name)
            item = ContentItem(
                title=title,
                description=description,
                url=url,
                thumbnail_url=thumbnail_url,
                image_data=image_data,
                metadata=dict(metadata or {}),
                category_id=category.id,
                category_name=category.name,
            )
            self._content_repo.insert(item)

        logger.info(f"Saved item {item.id} in {category.name!r}")
        return item

    def move_item(self, item: ContentItem, category_name: str) -> Category:
        """File ``item`` under ``category_name``, creating the category if needed."""
        with self._db.transaction():
            category = self._category_repo.find_or_create(category_name)
            self._content_repo.update_category(item, category)
        logger.debug(f"Item {item.id} moved to {category.name!r}")
        return category

    def set_hidden(self, item: ContentItem, hidden: bool) -> None:
        item.is_hidden = hidden
        with self._db.transaction():
            self._content_repo.update(item)

    def delete_items(self, items: list[ContentItem]) -> int:
        with self._db.transaction():
            deleted = self._content_repo.delete_many(items)
        logger.info(f"Deleted {deleted} item(s)")
        return deleted

    def load_page(self, page: int = 1) -> Page:
        """Load the first ``page`` pages of items (1-based, cumulative)."""
        limit = self._content_config.items_per_page * max(page, 1)
        items = self._content_repo.fetch_all(limit=limit + 1)
        return Page(items=items[:limit], has_more=len(items) > limit)

    def seed_default_categories(self) -> list[Category]:
        """Create the configured default categories on an empty store.

        Returns:
            The categories created (empty if the store already had some).
        """
        if self._category_repo.count() > 0:
            logger.debug("Categories already present, skipping seed")
            return []

        created = []
        with self._db.transaction():
            for name in self._category_config.default_categories:
                category = self._category_repo.create(name)
                if category:
                    created.append(category)

        logger.info(f"Seeded {len(created)} default categories")
        return created
