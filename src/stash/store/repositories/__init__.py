"""Repository implementations for the stash data access layer.

- CategoryRepository: category CRUD, find-or-create, Misc bucket handling
- ContentItemRepository: content item CRUD, search, category counts, cleanup

All repositories:
- Accept a Database instance in __init__
- Stage writes in ``db.transaction()`` blocks; an outer block owned by the
  caller turns several calls into one commit

Example:
    from stash.store import Database
    from stash.store.repositories import CategoryRepository, ContentItemRepository

    db = Database(path)
    db.connect()
    categories = CategoryRepository(db)
    items = ContentItemRepository(db)
"""

from .categories import CategoryRepository
from .content_items import ContentItemRepository

__all__ = [
    "CategoryRepository",
    "ContentItemRepository",
]
