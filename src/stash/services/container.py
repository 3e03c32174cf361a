"""Service container for dependency injection and lifecycle management."""

from __future__ import annotations

from loguru import logger

from ..core.config import Config
from ..store.database import Database
from ..store.repositories import CategoryRepository, ContentItemRepository
from .backup import BackupService
from .categories import CategoryManager
from .content import ContentService
from .filtering import ContentFilterService
from .maintenance import MaintenanceService


class ServiceContainer:
    """Owns the database handle and hands out repositories and services.

    Everything shares one ``Database``; nothing is a process-wide global.
    Repositories and services are created lazily on first access.

    Usage:

        with ServiceContainer(config) as services:
            services.maintenance.perform_startup_maintenance()
            manager = services.category_manager()
            manager.prepare_create()
            manager.proposed_name = "Recipes"
            manager.commit()

    Attributes:
        config: Application configuration.
        db: Database instance (connected after connect() or __enter__).
    """

    def __init__(self, config: Config):
        """Initialize container with configuration.

        Args:
            config: Application configuration.
        """
        self.config = config
        self.db = Database(config.db_path)
        self._connected = False

        self._category_repo: CategoryRepository | None = None
        self._content_repo: ContentItemRepository | None = None

        self._maintenance: MaintenanceService | None = None
        self._content: ContentService | None = None
        self._backup: BackupService | None = None
        self._filter: ContentFilterService | None = None

    def connect(self) -> None:
        """Connect to database."""
        if not self._connected:
            self.db.connect()
            self._connected = True
            logger.debug("ServiceContainer connected to database")

    def close(self) -> None:
        """Close the database connection."""
        if self._connected:
            self.db.close()
            self._connected = False
            logger.debug("ServiceContainer closed")

    def __enter__(self) -> "ServiceContainer":
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # --- Repositories ---

    @property
    def category_repo(self) -> CategoryRepository:
        if self._category_repo is None:
            self._category_repo = CategoryRepository(self.db, self.config.categories)
        return self._category_repo

    @property
    def content_repo(self) -> ContentItemRepository:
        if self._content_repo is None:
            self._content_repo = ContentItemRepository(self.db, self.config.content)
        return self._content_repo

    # --- Services ---

    @property
    def maintenance(self) -> MaintenanceService:
        if self._maintenance is None:
            self._maintenance = MaintenanceService.from_container(self)
        return self._maintenance

    @property
    def content(self) -> ContentService:
        if self._content is None:
            self._content = ContentService.from_container(self)
        return self._content

    @property
    def backup(self) -> BackupService:
        if self._backup is None:
            self._backup = BackupService.from_container(self)
        return self._backup

    @property
    def filter(self) -> ContentFilterService:
        if self._filter is None:
            self._filter = ContentFilterService()
        return self._filter

    def category_manager(self) -> CategoryManager:
        """Create a manager for one interactive session (it carries UI state)."""
        return CategoryManager.from_container(self)
