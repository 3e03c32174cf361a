"""Backup commands for stash CLI."""

from pathlib import Path

from ...core.config import Config
from ...services import ServiceContainer


def handle_backup(args, config: Config) -> None:
    """Handle backup subcommands.

    Args:
        args: Parsed command arguments.
        config: Application configuration.

    Raises:
        BackupError: If the backup folder cannot be read.
        StoreError: If the import fails (nothing is applied).
    """
    with ServiceContainer(config) as services:
        if args.backup_cmd == "export":
            root = services.backup.export_backup(Path(args.directory).expanduser())
            print(f"✓ Backup written to {root}")
        elif args.backup_cmd == "import":
            result = services.backup.import_backup(Path(args.path).expanduser())
            print(
                f"✓ Imported {result.categories} categories, "
                f"{result.items} items, {result.images} images"
            )
