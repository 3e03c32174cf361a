"""CLI entry point for stash."""

import argparse
import sys
from typing import NoReturn

from loguru import logger

from .. import __version__
from ..core.config import Config
from . import commands


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="stash",
        description="Stash - categorised bookmarks for links, images and notes",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Show debug logging on stderr"
    )

    subparsers = parser.add_subparsers(dest="command", required=False)

    # Maintenance
    subparsers.add_parser(
        "maintenance", help="Merge duplicate categories and clean stale references"
    )

    # Category commands
    cat_parser = subparsers.add_parser("category", help="Manage categories")
    cat_subparsers = cat_parser.add_subparsers(dest="category_cmd", required=True)

    cat_list = cat_subparsers.add_parser("list", help="List categories in display order")
    cat_list.add_argument(
        "-a", "--all", action="store_true", help="Include hidden (empty Misc) categories"
    )

    cat_add = cat_subparsers.add_parser("add", help="Create a category")
    cat_add.add_argument("name", help="Category name")

    cat_rename = cat_subparsers.add_parser("rename", help="Rename a category")
    cat_rename.add_argument("old_name", help="Current category name")
    cat_rename.add_argument("new_name", help="New category name")

    cat_delete = cat_subparsers.add_parser(
        "delete", help="Delete a category, moving its items to Misc"
    )
    cat_delete.add_argument("name", help="Category name")

    cat_move = cat_subparsers.add_parser("move", help="Reorder visible categories")
    cat_move.add_argument("name", help="Category to move")
    cat_move.add_argument(
        "position", type=int, help="Drop position in the visible list (0-based)"
    )

    cat_subparsers.add_parser("seed", help="Create the default categories on an empty store")
    cat_subparsers.add_parser("cleanup-misc", help="Delete Misc categories that own no items")

    # Item commands
    item_parser = subparsers.add_parser("item", help="Manage content items")
    item_subparsers = item_parser.add_subparsers(dest="item_cmd", required=True)

    item_add = item_subparsers.add_parser("add", help="Save a content item")
    item_add.add_argument("title", help="Item title")
    item_add.add_argument("-c", "--category", help="Category name (default category if omitted)")
    item_add.add_argument("-u", "--url", help="Link")
    item_add.add_argument("-d", "--description", help="Description")
    item_add.add_argument(
        "-m",
        "--meta",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Metadata entry (repeatable)",
    )

    item_list = item_subparsers.add_parser("list", help="List items, newest first")
    item_list.add_argument("-c", "--category", help="Only items in this category")
    item_list.add_argument("-p", "--page", type=int, default=1, help="Pages to load (default: 1)")

    item_search = item_subparsers.add_parser("search", help="Search items")
    item_search.add_argument("query", help="Search text")
    item_search.add_argument("-c", "--category", help="Only items in this category")

    item_move = item_subparsers.add_parser("move", help="File an item under a category")
    item_move.add_argument("item_id", help="Item id")
    item_move.add_argument("category", help="Target category name")

    item_hide = item_subparsers.add_parser("hide", help="Hide or unhide an item")
    item_hide.add_argument("item_id", help="Item id")
    item_hide.add_argument("--unhide", action="store_true", help="Make the item visible again")

    item_delete = item_subparsers.add_parser("delete", help="Delete items")
    item_delete.add_argument("item_ids", nargs="+", help="Item ids")

    # Backup commands
    backup_parser = subparsers.add_parser("backup", help="Export or import backups")
    backup_subparsers = backup_parser.add_subparsers(dest="backup_cmd", required=True)

    export_parser = backup_subparsers.add_parser("export", help="Write a backup folder")
    export_parser.add_argument("directory", help="Parent directory for the backup")

    import_parser = backup_subparsers.add_parser("import", help="Merge a backup folder")
    import_parser.add_argument("path", help="Backup folder")

    return parser


def configure_logging(verbose: bool) -> None:
    """Route loguru output to stderr at INFO, or DEBUG when verbose."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO")


def main() -> NoReturn:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()
    configure_logging(args.verbose)
    config = Config.from_env()

    try:
        if args.command == "maintenance":
            commands.handle_maintenance(args, config)
        elif args.command == "category":
            commands.handle_category(args, config)
        elif args.command == "item":
            commands.handle_item(args, config)
        elif args.command == "backup":
            commands.handle_backup(args, config)
        else:
            parser.print_help()

        sys.exit(0)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
