"""Content item storage and retrieval for stash."""

import json
import random
from datetime import datetime, timedelta, timezone

from loguru import logger

from ...core.config import ContentConfig
from ...core.types import Category, ContentItem, fold_text, utc_now
from ..database import Database

_SELECT = """
    SELECT i.*, c.name AS category_name
    FROM content_items i
    LEFT JOIN categories c ON c.id = i.category_id
"""


def _like_pattern(query: str) -> str:
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class ContentItemRepository:
    """Repository for content item operations."""

    def __init__(self, db: Database, config: ContentConfig | None = None):
        """Initialize with database connection.

        Args:
            db: Database instance to use for operations.
            config: Content defaults (ephemeral URL prefixes, duplicate window).
        """
        self.db = db
        self.config = config or ContentConfig()

    # --- CRUD ---

    def insert(self, item: ContentItem) -> ContentItem:
        """Insert a content item record as-is."""
        with self.db.transaction() as cursor:
            cursor.execute(
                """
                INSERT INTO content_items
                (id, category_id, user_id, title, description, url, thumbnail_url,
                 image_data, metadata, is_hidden, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                self._item_params(item),
            )
        logger.debug(f"Content item inserted: id={item.id}, title={item.title!r}")
        return item

    def delete(self, item: ContentItem) -> None:
        with self.db.transaction() as cursor:
            cursor.execute("DELETE FROM content_items WHERE id = ?", (item.id,))
        logger.debug(f"Content item deleted: id={item.id}")

    def delete_many(self, items: list[ContentItem]) -> int:
        """Delete several items in one transaction.

        Returns:
            Number of rows deleted.
        """
        deleted = 0
        with self.db.transaction() as cursor:
            for item in items:
                cursor.execute("DELETE FROM content_items WHERE id = ?", (item.id,))
                deleted += cursor.rowcount
        logger.debug(f"Content items deleted: {deleted}")
        return deleted

    def update(self, item: ContentItem) -> None:
        """Persist every mutable field of ``item`` and bump updated_at."""
        item.updated_at = utc_now()
        self._write(item)

    def update_title(self, item: ContentItem, title: str) -> None:
        item.title = title
        self.update(item)

    def update_category(self, item: ContentItem, category: Category | None) -> None:
        """File ``item`` under ``category`` (None makes it categoryless)."""
        item.category_id = category.id if category else None
        item.category_name = category.name if category else None
        self.update(item)

    def update_categories(self, items: list[ContentItem], category: Category | None) -> None:
        with self.db.transaction():
            for item in items:
                self.update_category(item, category)

    def reassign_category(self, from_category_id: str, to_category_id: str | None) -> int:
        """Re-point every item of one category at another.

        Returns:
            Number of items moved.
        """
        with self.db.transaction() as cursor:
            cursor.execute(
                "UPDATE content_items SET category_id = ?, updated_at = ? WHERE category_id = ?",
                (to_category_id, utc_now(), from_category_id),
            )
            moved = cursor.rowcount
        logger.debug(f"Reassigned {moved} item(s): {from_category_id} -> {to_category_id}")
        return moved

    def upsert(
        self,
        id: str,
        title: str,
        user_id: str | None = None,
        description: str | None = None,
        url: str | None = None,
        metadata: dict[str, str] | None = None,
        thumbnail_url: str | None = None,
        image_data: bytes | None = None,
        is_hidden: bool = False,
        created_at: str | None = None,
    ) -> ContentItem:
        """Merge an item record by id, else insert it.

        The category link is left alone; callers resolve it separately.
        """
        existing = self.fetch_by_id(id)
        if existing:
            existing.user_id = user_id or existing.user_id
            existing.title = title
            existing.description = description
            existing.url = url
            existing.metadata = dict(metadata or {})
            existing.thumbnail_url = thumbnail_url
            existing.image_data = image_data
            existing.is_hidden = is_hidden
            existing.created_at = created_at or existing.created_at
            self.update(existing)
            return existing

        item = ContentItem(
            id=id,
            title=title,
            user_id=user_id,
            description=description,
            url=url,
            metadata=dict(metadata or {}),
            thumbnail_url=thumbnail_url,
            image_data=image_data,
            is_hidden=is_hidden,
        )
        if created_at:
            item.created_at = created_at
        return self.insert(item)

    # --- Fetch ---

    def fetch_by_id(self, item_id: str) -> ContentItem | None:
        cursor = self.db.execute(f"{_SELECT} WHERE i.id = ?", (item_id,))
        row = cursor.fetchone()
        return self._row_to_item(row) if row else None

    def fetch_all(self, limit: int | None = None) -> list[ContentItem]:
        """Get items newest first, optionally capped at ``limit``."""
        sql = f"{_SELECT} ORDER BY i.created_at DESC, i.id DESC"
        params: tuple = ()
        if limit is not None:
            sql += " LIMIT ?"
            params = (limit,)
        cursor = self.db.execute(sql, params)
        return [self._row_to_item(row) for row in cursor.fetchall()]

    def fetch_by_category(self, category_name: str) -> list[ContentItem]:
        """Items whose category has exactly this name, newest first."""
        cursor = self.db.execute(
            f"{_SELECT} WHERE c.name = ? ORDER BY i.created_at DESC, i.id DESC",
            (category_name,),
        )
        return self._unique(self._row_to_item(row) for row in cursor.fetchall())

    def fetch_by_category_id(self, category_id: str) -> list[ContentItem]:
        cursor = self.db.execute(
            f"{_SELECT} WHERE i.category_id = ? ORDER BY i.created_at DESC, i.id DESC",
            (category_id,),
        )
        return [self._row_to_item(row) for row in cursor.fetchall()]

    def fetch_recent_duplicate(
        self, title: str, url: str | None, within_seconds: float | None = None
    ) -> ContentItem | None:
        """Find an identical capture (same title and url) made moments ago.

        Args:
            title: Title of the capture being saved.
            url: Its url; None and "" both mean "no url".
            within_seconds: Look-back window, defaults to the configured one.
        """
        window = self.config.duplicate_window_seconds if within_seconds is None else within_seconds
        cutoff = (datetime.now(timezone.utc) - timedelta(seconds=window)).isoformat()

        if url:
            cursor = self.db.execute(
                f"""{_SELECT}
                WHERE i.title = ? AND i.url = ? AND i.created_at >= ?
                ORDER BY i.created_at DESC LIMIT 1
                """,
                (title, url, cutoff),
            )
        else:
            cursor = self.db.execute(
                f"""{_SELECT}
                WHERE i.title = ? AND (i.url IS NULL OR i.url = '') AND i.created_at >= ?
                ORDER BY i.created_at DESC LIMIT 1
                """,
                (title, cutoff),
            )
        row = cursor.fetchone()
        return self._row_to_item(row) if row else None

    def search(self, query: str) -> list[ContentItem]:
        """Substring match over title, description and url, ignoring case and accents."""
        pattern = _like_pattern(fold_text(query))
        cursor = self.db.execute(
            f"""{_SELECT}
            WHERE fold(i.title) LIKE ? ESCAPE '\\'
               OR fold(i.description) LIKE ? ESCAPE '\\'
               OR fold(i.url) LIKE ? ESCAPE '\\'
            ORDER BY i.created_at DESC, i.id DESC
            """,
            (pattern, pattern, pattern),
        )
        return [self._row_to_item(row) for row in cursor.fetchall()]

    def fetch_first_image_url(self, category_name: str) -> str | None:
        """Thumbnail url of the newest item in the category that has one."""
        cursor = self.db.execute(
            """
            SELECT i.thumbnail_url FROM content_items i
            JOIN categories c ON c.id = i.category_id
            WHERE c.name = ? AND i.thumbnail_url IS NOT NULL
            ORDER BY i.created_at DESC LIMIT 1
            """,
            (category_name,),
        )
        row = cursor.fetchone()
        return row["thumbnail_url"] if row else None

    def fetch_first_image_data(self, category_name: str) -> bytes | None:
        cursor = self.db.execute(
            """
            SELECT i.image_data FROM content_items i
            JOIN categories c ON c.id = i.category_id
            WHERE c.name = ? AND i.image_data IS NOT NULL
            ORDER BY i.created_at DESC LIMIT 1
            """,
            (category_name,),
        )
        row = cursor.fetchone()
        return row["image_data"] if row else None

    def fetch_random(self, category_name: str) -> ContentItem | None:
        items = self.fetch_by_category(category_name)
        return random.choice(items) if items else None

    def count(self, category_name: str) -> int:
        """Number of distinct items in the category called ``category_name``."""
        cursor = self.db.execute(
            """
            SELECT COUNT(DISTINCT i.id) AS count FROM content_items i
            JOIN categories c ON c.id = i.category_id
            WHERE c.name = ?
            """,
            (category_name,),
        )
        return cursor.fetchone()["count"]

    def count_all(self) -> int:
        cursor = self.db.execute("SELECT COUNT(*) AS count FROM content_items")
        return cursor.fetchone()["count"]

    def count_uncategorized(self) -> int:
        cursor = self.db.execute(
            "SELECT COUNT(*) AS count FROM content_items WHERE category_id IS NULL"
        )
        return cursor.fetchone()["count"]

    # --- Maintenance ---

    def cleanup_invalid_image_urls(self) -> int:
        """Null out url/thumbnail_url values pointing at ephemeral local files.

        All changes are staged in one transaction.

        Returns:
            Number of items updated.
        """
        prefixes = tuple(self.config.ephemeral_url_prefixes)
        if not prefixes:
            return 0

        cleaned = 0
        with self.db.transaction():
            for item in self.fetch_all():
                needs_update = False

                if item.thumbnail_url and item.thumbnail_url.startswith(prefixes):
                    item.thumbnail_url = None
                    needs_update = True

                if item.url and item.url.startswith(prefixes):
                    item.url = None
                    needs_update = True

                if needs_update:
                    self.update(item)
                    cleaned += 1

        if cleaned:
            logger.info(f"Cleaned ephemeral image urls on {cleaned} item(s)")
        return cleaned

    # --- Helpers ---

    def _write(self, item: ContentItem) -> None:
        with self.db.transaction() as cursor:
            cursor.execute(
                """
                UPDATE content_items
                SET category_id = ?, user_id = ?, title = ?, description = ?, url = ?,
                    thumbnail_url = ?, image_data = ?, metadata = ?, is_hidden = ?,
                    created_at = ?, updated_at = ?
                WHERE id = ?
                """,
                self._item_params(item)[1:] + (item.id,),
            )

    @staticmethod
    def _item_params(item: ContentItem) -> tuple:
        return (
            item.id,
            item.category_id,
            item.user_id,
            item.title,
            item.description,
            item.url,
            item.thumbnail_url,
            item.image_data,
            json.dumps(item.metadata) if item.metadata else None,
            int(item.is_hidden),
            item.created_at,
            item.updated_at,
        )

    @staticmethod
    def _unique(items) -> list[ContentItem]:
        """Drop repeated ids, keeping first occurrence."""
        seen: set[str] = set()
        unique = []
        for item in items:
            if item.id not in seen:
                seen.add(item.id)
                unique.append(item)
        return unique

    @staticmethod
    def _row_to_item(row) -> ContentItem:
        """Convert database row to ContentItem object."""
        metadata_json = row["metadata"]
        try:
            metadata = json.loads(metadata_json) if metadata_json else {}
        except json.JSONDecodeError:
            logger.warning(f"Unreadable metadata on item {row['id']}, ignoring")
            metadata = {}

        return ContentItem(
            id=row["id"],
            title=row["title"],
            description=row["description"],
            url=row["url"],
            thumbnail_url=row["thumbnail_url"],
            image_data=row["image_data"],
            metadata={str(k): str(v) for k, v in metadata.items()} if isinstance(metadata, dict) else {},
            is_hidden=bool(row["is_hidden"]),
            user_id=row["user_id"],
            category_id=row["category_id"],
            category_name=row["category_name"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
