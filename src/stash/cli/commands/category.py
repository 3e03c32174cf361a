"""Category management commands for stash CLI."""

from ...core.config import Config
from ...core.exceptions import CategoryError, CategoryNotFoundError
from ...core.types import Category, CommitOutcome
from ...services import CategoryManager, ServiceContainer


def _get_category(categories: list[Category], name: str) -> Category:
    """Find a category by exact name, else ignoring case.

    Raises:
        CategoryNotFoundError: If no category matches.
    """
    for category in categories:
        if category.name == name:
            return category
    key = name.strip().lower()
    for category in categories:
        if category.normalized_name == key:
            return category
    raise CategoryNotFoundError(name)


def handle_category(args, config: Config) -> None:
    """Handle category subcommands.

    Args:
        args: Parsed command arguments.
        config: Application configuration.

    Raises:
        CategoryError: If a create, rename or delete is refused.
    """
    with ServiceContainer(config) as services:
        manager = services.category_manager()

        if args.category_cmd == "list":
            _list_categories(services, manager, args)
        elif args.category_cmd == "add":
            _add_category(manager, args)
        elif args.category_cmd == "rename":
            _rename_category(services, manager, args)
        elif args.category_cmd == "delete":
            _delete_category(services, manager, args)
        elif args.category_cmd == "move":
            _move_category(manager, args)
        elif args.category_cmd == "seed":
            created = services.content.seed_default_categories()
            print(f"✓ Created {len(created)} default categories")
        elif args.category_cmd == "cleanup-misc":
            removed = services.category_repo.cleanup_empty_misc_categories()
            print(f"✓ Removed {removed} empty Misc categories")


def _list_categories(services: ServiceContainer, manager: CategoryManager, args) -> None:
    counts = services.category_repo.item_counts()
    categories = services.category_repo.fetch_all()

    if not categories:
        print("No categories yet.")
        return

    for category in categories:
        hidden = manager.is_hidden(category, counts)
        if hidden and not args.all:
            continue
        flags = []
        if category.is_default:
            flags.append("default")
        if hidden:
            flags.append("hidden")
        suffix = f" [{', '.join(flags)}]" if flags else ""
        print(
            f"{category.sort_order:>3}  {category.name} "
            f"({counts.get(category.id, 0)} items){suffix}"
        )


def _report_commit(outcome: CommitOutcome, name: str) -> None:
    if outcome.applied:
        return
    if outcome is CommitOutcome.REJECTED_EMPTY:
        raise CategoryError("Category name cannot be empty")
    if outcome is CommitOutcome.REJECTED_DUPLICATE:
        raise CategoryError(f"A category named '{name.strip()}' already exists")
    raise CategoryError(f"Category not changed: {outcome.value}")


def _add_category(manager: CategoryManager, args) -> None:
    manager.prepare_create()
    manager.proposed_name = args.name
    outcome = manager.commit()
    _report_commit(outcome, args.name)
    print(f"✓ Created category '{args.name.strip()}'")


def _rename_category(services: ServiceContainer, manager: CategoryManager, args) -> None:
    category = _get_category(services.category_repo.fetch_all(), args.old_name)
    manager.prepare_rename(category)
    manager.proposed_name = args.new_name
    outcome = manager.commit()
    _report_commit(outcome, args.new_name)
    print(f"✓ Renamed '{args.old_name}' to '{args.new_name.strip()}'")


def _delete_category(services: ServiceContainer, manager: CategoryManager, args) -> None:
    category = _get_category(services.category_repo.fetch_all(), args.name)
    manager.prepare_delete(category)
    result = manager.confirm_delete()

    if result is None or not result.deleted:
        raise CategoryError(f"Category '{category.name}' still owns items and was kept")

    print(f"✓ Deleted category '{result.category_name}'")
    if result.items_reassigned:
        print(f"  Moved {result.items_reassigned} item(s) to Misc")
    if result.misc_created:
        print("  Created Misc category")


def _move_category(manager: CategoryManager, args) -> None:
    visible = manager.visible_categories()
    category = _get_category(visible, args.name)
    index = next(i for i, c in enumerate(visible) if c.id == category.id)

    # Drop positions index into the original list; moving down skips itself
    destination = args.position + 1 if args.position > index else args.position
    ordered = manager.move_categories([index], destination)
    print("✓ New order: " + ", ".join(c.name for c in ordered))
