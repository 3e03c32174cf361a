"""Maintenance command for stash CLI."""

from ...core.config import Config
from ...core.exceptions import StoreError
from ...services import ServiceContainer


def handle_maintenance(args, config: Config) -> None:
    """Handle maintenance command.

    Args:
        args: Parsed command arguments.
        config: Application configuration.

    Raises:
        StoreError: If a maintenance pass failed.
    """
    with ServiceContainer(config) as services:
        report = services.maintenance.perform_startup_maintenance()

    if report is None:
        raise StoreError("Maintenance aborted, see log for details")

    dedup = report.deduplication
    print("Stash Maintenance")
    print("=" * 50)
    print(f"Duplicate categories removed: {dedup.categories_removed}")
    print(f"Items moved: {dedup.items_moved}")
    for key, size in sorted(dedup.groups.items()):
        print(f"  • {key!r}: {size} merged into 1")
    print(f"Stale image urls cleared: {report.invalid_urls_cleaned}")
    print(f"Empty Misc categories removed: {report.empty_misc_removed}")
