"""Data access layer for stash.

- Database: SQLite connection and nestable transaction management
- Repositories: typed data access for categories and content items
"""

from .database import Database
from .repositories import CategoryRepository, ContentItemRepository

__all__ = [
    "Database",
    "CategoryRepository",
    "ContentItemRepository",
]
