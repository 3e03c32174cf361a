"""Custom exceptions for stash."""


class StashError(Exception):
    """Base exception for all stash errors."""

    pass


class StoreError(StashError):
    """Entity store operation (fetch or save) failed.

    Nothing staged in the failing transaction is applied; callers treat the
    operation as not-yet-applied.
    """

    pass


class CategoryError(StashError):
    """Category operation failed."""

    pass


class CategoryNotFoundError(CategoryError):
    """Category does not exist."""

    def __init__(self, name: str):
        """Initialize exception with the missing category name.

        Args:
            name: Name (or identifier) that was looked up.
        """
        self.name = name
        super().__init__(f"Category not found: {name}")


class ContentItemError(StashError):
    """Content item operation failed."""

    pass


class ContentItemNotFoundError(ContentItemError):
    """Content item does not exist."""

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Content item not found: {item_id}")


class BackupError(StashError):
    """Backup export or import failed."""

    pass
