"""Service layer for stash.

- MaintenanceService: startup deduplication and cleanup passes
- CategoryManager: interactive create/rename/delete/reorder
- ContentService: capture, filing and paging of content items
- ContentFilterService: category and text filtering of fetched items
- BackupService: folder export/import
- ServiceContainer: wires the above around one Database
"""

from .backup import BackupService
from .categories import CategoryManager
from .container import ServiceContainer
from .content import ContentService, Page
from .filtering import ContentFilterService
from .maintenance import MaintenanceService

__all__ = [
    "ServiceContainer",
    "MaintenanceService",
    "CategoryManager",
    "ContentService",
    "Page",
    "ContentFilterService",
    "BackupService",
]
