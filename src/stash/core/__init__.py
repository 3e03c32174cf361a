"""Core types, configuration and errors for stash."""

from .config import CategoryConfig, Config, ContentConfig, MaintenanceConfig
from .exceptions import (
    BackupError,
    CategoryError,
    CategoryNotFoundError,
    ContentItemError,
    ContentItemNotFoundError,
    StashError,
    StoreError,
)
from .types import (
    Category,
    CommitOutcome,
    ContentItem,
    DeduplicationReport,
    DeleteResult,
    ImportResult,
    MaintenanceReport,
    ManagerState,
    normalize_name,
)

__all__ = [
    "Config",
    "CategoryConfig",
    "ContentConfig",
    "MaintenanceConfig",
    "StashError",
    "StoreError",
    "CategoryError",
    "CategoryNotFoundError",
    "ContentItemError",
    "ContentItemNotFoundError",
    "BackupError",
    "Category",
    "ContentItem",
    "CommitOutcome",
    "ManagerState",
    "DeduplicationReport",
    "MaintenanceReport",
    "DeleteResult",
    "ImportResult",
    "normalize_name",
]
