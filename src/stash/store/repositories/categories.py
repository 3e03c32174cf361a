"""Category CRUD and query operations for stash."""

from loguru import logger

from ...core.config import CategoryConfig
from ...core.types import Category, normalize_name, utc_now
from ..database import Database


class CategoryRepository:
    """Repository for category operations.

    Mutating methods stage their writes in ``db.transaction()`` blocks, so a
    caller that opens an outer transaction decides when everything commits.
    """

    def __init__(self, db: Database, config: CategoryConfig | None = None):
        """Initialize with database connection.

        Args:
            db: Database instance to use for operations.
            config: Category defaults (misc aliases, colours, fallback name).
        """
        self.db = db
        self.config = config or CategoryConfig()

    # --- CRUD ---

    def insert(self, category: Category) -> Category:
        """Insert a category record as-is."""
        with self.db.transaction() as cursor:
            cursor.execute(
                """
                INSERT INTO categories
                (id, name, color_hex, icon_name, sort_order, is_default, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    category.id,
                    category.name,
                    category.color_hex,
                    category.icon_name,
                    category.sort_order,
                    int(category.is_default),
                    category.created_at,
                    category.updated_at,
                ),
            )
        logger.debug(f"Category inserted: id={category.id}, name={category.name!r}")
        return category

    def delete(self, category: Category) -> None:
        """Delete a category; its items become categoryless."""
        with self.db.transaction() as cursor:
            cursor.execute("DELETE FROM categories WHERE id = ?", (category.id,))
        logger.debug(f"Category deleted: id={category.id}, name={category.name!r}")

    def update(self, category: Category) -> None:
        """Persist every mutable field of ``category`` and bump updated_at."""
        category.updated_at = utc_now()
        self._write(category)

    def _write(self, category: Category) -> None:
        with self.db.transaction() as cursor:
            cursor.execute(
                """
                UPDATE categories
                SET name = ?, color_hex = ?, icon_name = ?, sort_order = ?,
                    is_default = ?, created_at = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    category.name,
                    category.color_hex,
                    category.icon_name,
                    category.sort_order,
                    int(category.is_default),
                    category.created_at,
                    category.updated_at,
                    category.id,
                ),
            )

    def rename(self, category: Category, new_name: str) -> bool:
        """Rename a category unless the name is empty or taken.

        Args:
            category: Category to rename.
            new_name: Proposed name (trimmed before use).

        Returns:
            True if the category was renamed.
        """
        trimmed = new_name.strip()
        if not trimmed:
            return False

        existing = self.fetch_by_name(trimmed)
        if existing and existing.id != category.id:
            return False

        existing = self.fetch_by_name_case_insensitive(trimmed)
        if existing and existing.id != category.id:
            return False

        old_name = category.name
        category.name = trimmed
        self.update(category)
        logger.info(f"Category renamed: {old_name!r} -> {trimmed!r}")
        return True

    def update_sort_order(self, orders: list[tuple[Category, int]]) -> None:
        """Write new sort_order values for the given categories."""
        now = utc_now()
        with self.db.transaction() as cursor:
            for category, order in orders:
                category.sort_order = order
                category.updated_at = now
                cursor.execute(
                    "UPDATE categories SET sort_order = ?, updated_at = ? WHERE id = ?",
                    (order, now, category.id),
                )

    # --- Fetch ---

    def fetch_all(self) -> list[Category]:
        """Get all categories ordered by sort_order."""
        cursor = self.db.execute(
            "SELECT * FROM categories ORDER BY sort_order ASC, created_at ASC, id ASC"
        )
        return [self._row_to_category(row) for row in cursor.fetchall()]

    def fetch_all_by_creation(self) -> list[Category]:
        """Get all categories oldest first (ties broken by id)."""
        cursor = self.db.execute("SELECT * FROM categories ORDER BY created_at ASC, id ASC")
        return [self._row_to_category(row) for row in cursor.fetchall()]

    def fetch_by_name(self, name: str) -> Category | None:
        """Get a category by exact name (no normalization)."""
        cursor = self.db.execute(
            "SELECT * FROM categories WHERE name = ? ORDER BY created_at ASC, id ASC LIMIT 1",
            (name,),
        )
        row = cursor.fetchone()
        return self._row_to_category(row) if row else None

    def fetch_by_name_case_insensitive(self, name: str) -> Category | None:
        """Get the first category whose trimmed, lowercased name matches."""
        key = normalize_name(name)
        for category in self.fetch_all():
            if category.normalized_name == key:
                return category
        return None

    def fetch_by_id(self, category_id: str) -> Category | None:
        cursor = self.db.execute("SELECT * FROM categories WHERE id = ?", (category_id,))
        row = cursor.fetchone()
        return self._row_to_category(row) if row else None

    def fetch_names(self) -> list[str]:
        """Category names in display order, without repeats."""
        seen: set[str] = set()
        names = []
        for category in self.fetch_all():
            if category.name not in seen:
                seen.add(category.name)
                names.append(category.name)
        return names

    def exists(self, name: str) -> bool:
        return self.fetch_by_name(name) is not None

    def count(self) -> int:
        cursor = self.db.execute("SELECT COUNT(*) AS count FROM categories")
        return cursor.fetchone()["count"]

    def item_count(self, category: Category) -> int:
        """Number of content items filed under ``category``."""
        cursor = self.db.execute(
            "SELECT COUNT(DISTINCT id) AS count FROM content_items WHERE category_id = ?",
            (category.id,),
        )
        return cursor.fetchone()["count"]

    def item_counts(self) -> dict[str, int]:
        """Map of category id to owned item count (zero included)."""
        cursor = self.db.execute(
            """
            SELECT c.id AS id, COUNT(DISTINCT i.id) AS count
            FROM categories c
            LEFT JOIN content_items i ON i.category_id = c.id
            GROUP BY c.id
            """
        )
        return {row["id"]: row["count"] for row in cursor.fetchall()}

    # --- Category management ---

    def create(
        self,
        name: str,
        color_hex: str | None = None,
        icon_name: str | None = None,
    ) -> Category | None:
        """Create a category appended after the existing ones.

        Empty names and names already taken (exactly or ignoring case) are
        skipped silently.

        Returns:
            The new category, or None if nothing was created.
        """
        trimmed = name.strip()
        if not trimmed:
            return None

        if self.exists(trimmed) or self.fetch_by_name_case_insensitive(trimmed):
            logger.debug(f"Category already exists, skipping create: {trimmed!r}")
            return None

        return self._insert_appended(
            trimmed,
            color_hex or self.config.default_color_hex,
            icon_name or self.config.default_icon_name,
        )

    def find_or_create(self, name: str) -> Category:
        """Return the category called ``name``, creating it if needed.

        An empty name resolves to the Misc category.
        """
        trimmed = name.strip()
        if not trimmed:
            return self.find_or_create_misc_category()

        existing = self.fetch_by_name(trimmed) or self.fetch_by_name_case_insensitive(trimmed)
        if existing:
            return existing

        return self._insert_appended(
            trimmed, self.config.default_color_hex, self.config.default_icon_name
        )

    def upsert(
        self,
        id: str,
        name: str,
        color_hex: str,
        icon_name: str,
        sort_order: int,
        is_default: bool,
        created_at: str,
        updated_at: str,
    ) -> Category:
        """Merge a category record by id, then by exact name, else insert it."""
        incoming = Category(
            id=id,
            name=name,
            color_hex=color_hex,
            icon_name=icon_name,
            sort_order=sort_order,
            is_default=is_default,
            created_at=created_at,
            updated_at=updated_at,
        )

        if self.fetch_by_id(id):
            self._write(incoming)
            return incoming

        by_name = self.fetch_by_name(name)
        if by_name is None:
            return self.insert(incoming)

        # Same name under another id: adopt the incoming identity, items follow
        with self.db.transaction() as cursor:
            self.insert(incoming)
            cursor.execute(
                "UPDATE content_items SET category_id = ? WHERE category_id = ?",
                (id, by_name.id),
            )
            cursor.execute("DELETE FROM categories WHERE id = ?", (by_name.id,))
        logger.debug(f"Category {name!r} re-keyed: {by_name.id} -> {id}")
        return incoming

    def get_default_category_name(self) -> str:
        """Name of the first category flagged default, else the fallback."""
        for category in self.fetch_all():
            if category.is_default:
                return category.name
        return self.config.default_category_name

    # --- Misc bucket ---

    def is_misc(self, category: Category) -> bool:
        return category.name in self.config.misc_names

    def fetch_misc_categories(self) -> list[Category]:
        """Every category carrying a misc alias, without repeats."""
        placeholders = ", ".join("?" for _ in self.config.misc_names)
        if not placeholders:
            return []
        cursor = self.db.execute(
            f"SELECT * FROM categories WHERE name IN ({placeholders}) "
            "ORDER BY created_at ASC, id ASC",
            tuple(self.config.misc_names),
        )
        return [self._row_to_category(row) for row in cursor.fetchall()]

    def find_or_create_misc_category(self) -> Category:
        """Return the first existing misc alias, else create "Misc"."""
        for name in self.config.misc_names:
            existing = self.fetch_by_name(name)
            if existing:
                return existing

        category = self._insert_appended(
            self.config.misc_name, self.config.misc_color_hex, self.config.misc_icon_name
        )
        logger.info(f"Misc category created: id={category.id}")
        return category

    def cleanup_empty_misc_categories(self) -> int:
        """Delete misc-aliased categories that own no items.

        The emptiness check and the delete are one statement, so an item
        re-pointed at the category earlier in the same transaction keeps it
        alive.

        Returns:
            Number of categories deleted.
        """
        candidates = self.fetch_misc_categories()
        if not candidates:
            return 0

        deleted = 0
        with self.db.transaction() as cursor:
            for category in candidates:
                cursor.execute(
                    """
                    DELETE FROM categories
                    WHERE id = ?
                      AND NOT EXISTS (SELECT 1 FROM content_items WHERE category_id = ?)
                    """,
                    (category.id, category.id),
                )
                deleted += cursor.rowcount

        if deleted:
            logger.info(f"Removed {deleted} empty misc categor{'y' if deleted == 1 else 'ies'}")
        return deleted

    # --- Helpers ---

    def _insert_appended(self, name: str, color_hex: str, icon_name: str) -> Category:
        count = self.count()
        category = Category(
            name=name,
            color_hex=color_hex,
            icon_name=icon_name,
            sort_order=count,
            is_default=count == 0,
        )
        self.insert(category)
        logger.info(f"Category created: name={name!r}, sort_order={count}")
        return category

    @staticmethod
    def _row_to_category(row) -> Category:
        """Convert database row to Category object."""
        return Category(
            id=row["id"],
            name=row["name"],
            color_hex=row["color_hex"],
            icon_name=row["icon_name"],
            sort_order=row["sort_order"],
            is_default=bool(row["is_default"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
