"""Command implementations for stash CLI."""

from .backup import handle_backup
from .category import handle_category
from .item import handle_item
from .maintenance import handle_maintenance

__all__ = [
    "handle_maintenance",
    "handle_category",
    "handle_item",
    "handle_backup",
]
