"""Interactive category management: create, rename, delete, reorder."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from loguru import logger

from ..core.exceptions import CategoryNotFoundError, StoreError
from ..core.types import Category, CommitOutcome, DeleteResult, ManagerState, normalize_name
from ..store.database import Database
from ..store.repositories import CategoryRepository, ContentItemRepository

if TYPE_CHECKING:
    from .container import ServiceContainer


def move_elements(sequence: list, source_indices: Iterable[int], destination: int) -> list:
    """Move the elements at ``source_indices`` so they land before ``destination``.

    ``destination`` is an index into the original sequence (list-view drag
    semantics); the moved elements keep their relative order.

    Raises:
        ValueError: If any index is out of range.
    """
    index_set = set(source_indices)
    indices = sorted(index_set)
    size = len(sequence)
    if any(i < 0 or i >= size for i in indices):
        raise ValueError(f"Source index out of range for {size} element(s): {indices}")
    if destination < 0 or destination > size:
        raise ValueError(f"Destination {destination} out of range for {size} element(s)")

    moving = [sequence[i] for i in indices]
    remaining = [element for i, element in enumerate(sequence) if i not in index_set]
    insert_at = destination - sum(1 for i in indices if i < destination)
    return remaining[:insert_at] + moving + remaining[insert_at:]


class CategoryManager:
    """Drives create/rename/delete/reorder for one interactive session.

    Create and rename go through ``prepare_*`` then :meth:`commit`; delete
    goes through :meth:`prepare_delete` then :meth:`confirm_delete`. Every
    path returns to ``IDLE``. Names are unique ignoring case and surrounding
    whitespace; a commit that would break that writes nothing and reports
    why through :class:`CommitOutcome`.

    ``selected_category`` is the active filter (a category name, or None
    for all items) and follows renames and deletions.
    """

    def __init__(
        self,
        db: Database,
        category_repo: CategoryRepository,
        content_repo: ContentItemRepository,
    ):
        self._db = db
        self._category_repo = category_repo
        self._content_repo = content_repo

        self.state = ManagerState.IDLE
        self.target: Category | None = None
        self.proposed_name = ""
        self.pending_delete: Category | None = None
        self.selected_category: str | None = None

    @classmethod
    def from_container(cls, container: "ServiceContainer") -> "CategoryManager":
        return cls(
            db=container.db,
            category_repo=container.category_repo,
            content_repo=container.content_repo,
        )

    # --- Visibility ---

    def is_hidden(self, category: Category, item_counts: dict[str, int]) -> bool:
        """An empty Misc bucket is hidden; everything else is shown."""
        return self._category_repo.is_misc(category) and item_counts.get(category.id, 0) == 0

    def visible_categories(self) -> list[Category]:
        """Categories shown to the user, in sort order."""
        counts = self._category_repo.item_counts()
        return [c for c in self._category_repo.fetch_all() if not self.is_hidden(c, counts)]

    # --- Create / rename ---

    def prepare_rename(self, category: Category) -> None:
        self._reset()
        self.state = ManagerState.EDITING
        self.target = category
        self.proposed_name = category.name

    def prepare_create(self) -> None:
        self._reset()
        self.state = ManagerState.EDITING
        self.target = None
        self.proposed_name = ""

    def commit(self) -> CommitOutcome:
        """Validate the proposed name and apply the pending create or rename.

        Returns:
            What happened; rejected commits leave the store untouched.

        Raises:
            CategoryNotFoundError: If the category being renamed was deleted
                meanwhile (by maintenance or another session).
            StoreError: If the write fails (nothing applied).
        """
        if self.state is not ManagerState.EDITING:
            return CommitOutcome.NOT_EDITING

        target = self.target
        name = self.proposed_name.strip()
        try:
            outcome = self.validate_name(name, excluding_id=target.id if target else None)
            if outcome is not None:
                logger.debug(f"Category name {name!r} rejected: {outcome.value}")
                return outcome

            if target is None:
                return self._create(name)
            return self._rename(target, name)
        finally:
            self._reset()

    def validate_name(
        self, name: str, excluding_id: str | None = None
    ) -> CommitOutcome | None:
        """Check a proposed name against every other category.

        Args:
            name: Proposed name.
            excluding_id: Category being renamed, which may keep its own name.

        Returns:
            A rejection outcome, or None if the name is acceptable.
        """
        key = normalize_name(name)
        if not key:
            return CommitOutcome.REJECTED_EMPTY

        for category in self._category_repo.fetch_all():
            if category.id != excluding_id and category.normalized_name == key:
                return CommitOutcome.REJECTED_DUPLICATE
        return None

    def _create(self, name: str) -> CommitOutcome:
        with self._db.transaction():
            created = self._category_repo.create(name)
        if created is None:
            return CommitOutcome.REJECTED_DUPLICATE
        self.selected_category = None
        return CommitOutcome.CREATED

    def _rename(self, category: Category, name: str) -> CommitOutcome:
        old_name = category.name
        if name == old_name:
            return CommitOutcome.RENAMED

        category.name = name
        try:
            with self._db.transaction():
                self._require_existing(category, old_name)
                self._category_repo.update(category)
        except (CategoryNotFoundError, StoreError):
            category.name = old_name
            raise
        logger.info(f"Category renamed: {old_name!r} -> {name!r}")

        if self.selected_category == old_name:
            self.selected_category = name
        return CommitOutcome.RENAMED

    # --- Delete ---

    def prepare_delete(self, category: Category) -> None:
        self._reset()
        self.state = ManagerState.CONFIRMING_DELETE
        self.pending_delete = category

    def confirm_delete(self) -> DeleteResult | None:
        """Delete the pending category, moving its items to Misc first.

        Re-pointing and deletion commit together, so no item is ever left
        pointing at a deleted category. The Misc bucket itself is not
        deleted while it owns items.

        Returns:
            DeleteResult, or None if no delete was pending.

        Raises:
            CategoryNotFoundError: If the category was deleted meanwhile.
            StoreError: If the store fails; nothing is applied.
        """
        if self.state is not ManagerState.CONFIRMING_DELETE or self.pending_delete is None:
            return None

        category = self.pending_delete
        try:
            result = self._delete(category)
        except StoreError as e:
            logger.error(f"Failed to delete category {category.name!r}: {e}")
            raise
        finally:
            self._reset()

        if result.deleted and self.selected_category == category.name:
            self.selected_category = None
        return result

    def _delete(self, category: Category) -> DeleteResult:
        result = DeleteResult(category_name=category.name, deleted=False)

        with self._db.transaction():
            self._require_existing(category, category.name)
            owned = self._category_repo.item_count(category)

            if owned and self._category_repo.is_misc(category):
                logger.warning(
                    f"Refusing to delete misc category {category.name!r} owning {owned} item(s)"
                )
                return result

            if owned:
                misc = self._find_misc(excluding=category)
                if misc is None:
                    misc = self._category_repo.find_or_create_misc_category()
                    result.misc_created = True
                result.items_reassigned = self._content_repo.reassign_category(
                    category.id, misc.id
                )

            self._category_repo.delete(category)
            result.deleted = True

        logger.info(
            f"Category deleted: {category.name!r}, "
            f"{result.items_reassigned} item(s) moved to misc"
        )
        return result

    def _require_existing(self, category: Category, name: str) -> None:
        if self._category_repo.fetch_by_id(category.id) is None:
            logger.warning(f"Category {name!r} no longer exists")
            raise CategoryNotFoundError(name)

    def _find_misc(self, excluding: Category) -> Category | None:
        for candidate in self._category_repo.fetch_misc_categories():
            if candidate.id != excluding.id:
                return candidate
        return None

    # --- Reorder ---

    def move_categories(
        self, source_indices: Iterable[int], destination_index: int
    ) -> list[Category]:
        """Reorder the visible categories and renumber every category.

        Visible categories get sort_order 0..k-1 in their new order; hidden
        ones follow from k, keeping their relative order. Only changed
        values are written, in one commit.

        Args:
            source_indices: Positions in :meth:`visible_categories` being dragged.
            destination_index: Drop position in the same list.

        Returns:
            All categories in their new order.

        Raises:
            ValueError: If an index is out of range.
            StoreError: If the write fails (nothing applied).
        """
        all_categories = self._category_repo.fetch_all()
        counts = self._category_repo.item_counts()
        visible = [c for c in all_categories if not self.is_hidden(c, counts)]
        hidden = [c for c in all_categories if self.is_hidden(c, counts)]

        ordered = move_elements(visible, source_indices, destination_index) + hidden
        changes = [(c, index) for index, c in enumerate(ordered) if c.sort_order != index]

        if changes:
            with self._db.transaction():
                self._category_repo.update_sort_order(changes)
            logger.debug(f"Reordered categories, {len(changes)} sort order(s) changed")
        return ordered

    # --- State ---

    def cancel(self) -> None:
        """Drop any pending edit or delete."""
        self._reset()

    def _reset(self) -> None:
        self.state = ManagerState.IDLE
        self.target = None
        self.proposed_name = ""
        self.pending_delete = None
