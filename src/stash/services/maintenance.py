"""Startup maintenance: category deduplication and cleanup passes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from ..core.config import MaintenanceConfig
from ..core.exceptions import StoreError
from ..core.types import Category, DeduplicationReport, MaintenanceReport
from ..store.database import Database
from ..store.repositories import CategoryRepository, ContentItemRepository

if TYPE_CHECKING:
    from .container import ServiceContainer


class MaintenanceService:
    """Repairs the category graph after concurrent, multi-device edits.

    Devices can each create a category with the same name before sync
    converges, leaving several categories whose names differ only by case
    or surrounding whitespace. :meth:`deduplicate_categories` folds each
    such group into its oldest member. The pass is idempotent and holds no
    lock beyond its own transaction; a duplicate delivered by sync after the
    pass is picked up by the next run.

    Example:

        with ServiceContainer(config) as services:
            report = services.maintenance.perform_startup_maintenance()
    """

    def __init__(
        self,
        db: Database,
        category_repo: CategoryRepository,
        content_repo: ContentItemRepository,
        config: MaintenanceConfig | None = None,
    ):
        """Initialize MaintenanceService.

        Args:
            db: Database whose transaction bounds each pass.
            category_repo: Category repository sharing ``db``.
            content_repo: Content item repository sharing ``db``.
            config: Which optional cleanups run at startup.
        """
        self._db = db
        self._category_repo = category_repo
        self._content_repo = content_repo
        self._config = config or MaintenanceConfig()

    @classmethod
    def from_container(cls, container: "ServiceContainer") -> "MaintenanceService":
        return cls(
            db=container.db,
            category_repo=container.category_repo,
            content_repo=container.content_repo,
            config=container.config.maintenance,
        )

    def deduplicate_categories(self) -> DeduplicationReport:
        """Merge categories whose trimmed, lowercased names collide.

        The survivor of each group is the earliest created (ties broken by
        id). Items of the other members are re-pointed at it before those
        members are deleted, and the whole pass commits once. Nothing is
        written when there is nothing to merge.

        Returns:
            DeduplicationReport with removal and move counts.

        Raises:
            StoreError: If reading or committing fails; nothing is applied.
        """
        categories = self._category_repo.fetch_all_by_creation()
        plan = self._plan_merges(categories)
        report = DeduplicationReport()

        if not plan:
            logger.info("No duplicate categories found")
            return report

        with self._db.transaction():
            for key, survivor, duplicates in plan:
                logger.debug(
                    f"Merging {len(duplicates)} duplicate(s) of {key!r} into {survivor.id}"
                )
                for duplicate in duplicates:
                    report.items_moved += self._content_repo.reassign_category(
                        duplicate.id, survivor.id
                    )
                    self._category_repo.delete(duplicate)
                    report.categories_removed += 1
                report.groups[key] = len(duplicates) + 1

        logger.info(
            f"Removed {report.categories_removed} duplicate categor"
            f"{'y' if report.categories_removed == 1 else 'ies'}, "
            f"moved {report.items_moved} item(s)"
        )
        return report

    def perform_startup_maintenance(self) -> MaintenanceReport | None:
        """Run every startup pass.

        A store failure aborts the remaining passes and is logged, never
        raised; the next startup retries.

        Returns:
            MaintenanceReport, or None if a pass failed.
        """
        try:
            report = MaintenanceReport(deduplication=self.deduplicate_categories())

            if self._config.cleanup_invalid_urls:
                report.invalid_urls_cleaned = self._content_repo.cleanup_invalid_image_urls()

            if self._config.cleanup_empty_misc:
                report.empty_misc_removed = self._category_repo.cleanup_empty_misc_categories()
        except StoreError as e:
            logger.error(f"Startup maintenance aborted: {e}")
            return None

        return report

    @staticmethod
    def _plan_merges(
        categories: list[Category],
    ) -> list[tuple[str, Category, list[Category]]]:
        """Group categories by normalized name, oldest first in each group.

        Args:
            categories: Categories in any order.

        Returns:
            (key, survivor, duplicates) for every group with more than one member.
        """
        groups: dict[str, list[Category]] = {}
        for category in categories:
            groups.setdefault(category.normalized_name, []).append(category)

        plan = []
        for key, members in groups.items():
            if len(members) < 2:
                continue
            members = sorted(members, key=lambda c: (c.created_at, c.id))
            plan.append((key, members[0], members[1:]))
        return plan
