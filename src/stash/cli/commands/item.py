"""Content item commands for stash CLI."""

from ...core.config import Config
from ...core.exceptions import ContentItemNotFoundError
from ...core.types import ContentItem
from ...services import ServiceContainer


def _get_item(services: ServiceContainer, item_id: str) -> ContentItem:
    """Get an item by id.

    Raises:
        ContentItemNotFoundError: If the item does not exist.
    """
    item = services.content_repo.fetch_by_id(item_id)
    if item is None:
        raise ContentItemNotFoundError(item_id)
    return item


def _parse_metadata(entries: list[str]) -> dict[str, str]:
    metadata = {}
    for entry in entries:
        key, sep, value = entry.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Metadata must be KEY=VALUE, got {entry!r}")
        metadata[key.strip()] = value
    return metadata


def handle_item(args, config: Config) -> None:
    """Handle item subcommands.

    Args:
        args: Parsed command arguments.
        config: Application configuration.
    """
    with ServiceContainer(config) as services:
        if args.item_cmd == "add":
            item = services.content.save_item(
                args.title,
                category_name=args.category,
                description=args.description,
                url=args.url,
                metadata=_parse_metadata(args.meta),
            )
            print(f"✓ Saved '{item.title}' in '{item.category_name}'")
            print(f"  ID: {item.id}")
        elif args.item_cmd == "list":
            page = services.content.load_page(args.page)
            items = services.filter.filter(page.items, args.category, "")
            _print_items(items)
            if page.has_more:
                print(f"... more items, use --page {args.page + 1}")
        elif args.item_cmd == "search":
            items = services.content_repo.search(args.query)
            _print_items(services.filter.filter(items, args.category, ""))
        elif args.item_cmd == "move":
            item = _get_item(services, args.item_id)
            category = services.content.move_item(item, args.category)
            print(f"✓ Moved '{item.title}' to '{category.name}'")
        elif args.item_cmd == "hide":
            item = _get_item(services, args.item_id)
            services.content.set_hidden(item, not args.unhide)
            print(f"✓ {'Unhid' if args.unhide else 'Hid'} '{item.title}'")
        elif args.item_cmd == "delete":
            items = [_get_item(services, item_id) for item_id in args.item_ids]
            deleted = services.content.delete_items(items)
            print(f"✓ Deleted {deleted} item(s)")


def _print_items(items: list[ContentItem]) -> None:
    if not items:
        print("No items found.")
        return

    for item in items:
        hidden = " [hidden]" if item.is_hidden else ""
        print(f"{item.id}  {item.title}{hidden}")
        print(f"    {item.category_name or '(no category)'}  {item.url or ''}".rstrip())
