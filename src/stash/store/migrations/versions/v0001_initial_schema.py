"""Initial database schema.

- categories: user-defined buckets (name is not unique at this level)
- content_items: captured content, nullified on category delete
"""

VERSION = 1
DESCRIPTION = "Initial schema with categories and content items"


def up(conn):
    """Apply initial schema migration."""
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS categories (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            color_hex TEXT NOT NULL DEFAULT '#007AFF',
            icon_name TEXT NOT NULL DEFAULT 'folder',
            sort_order INTEGER NOT NULL DEFAULT 0,
            is_default INTEGER NOT NULL DEFAULT 0,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS content_items (
            id TEXT PRIMARY KEY,
            category_id TEXT REFERENCES categories(id) ON DELETE SET NULL,
            user_id TEXT,
            title TEXT NOT NULL,
            description TEXT,
            url TEXT,
            thumbnail_url TEXT,
            image_data BLOB,
            metadata TEXT,
            is_hidden INTEGER NOT NULL DEFAULT 0,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        CREATE INDEX IF NOT EXISTS idx_content_items_category ON content_items(category_id);
        CREATE INDEX IF NOT EXISTS idx_content_items_created ON content_items(created_at);
        CREATE INDEX IF NOT EXISTS idx_categories_sort ON categories(sort_order);
        """
    )
