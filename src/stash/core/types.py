"""Type definitions for stash."""

import unicodedata
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


def new_id() -> str:
    """Generate a new stable identifier."""
    return str(uuid.uuid4())


def utc_now() -> str:
    """Current time as an ISO-8601 UTC string (sorts chronologically)."""
    return datetime.now(timezone.utc).isoformat()


def normalize_name(name: str) -> str:
    """Key used for case-insensitive category name comparison."""
    return name.strip().lower()


def fold_text(text: Optional[str]) -> Optional[str]:
    """Fold case and strip accents so "CRÈME" and "creme" compare equal."""
    if text is None:
        return None
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()


@dataclass
class Category:
    """A user-defined bucket that content items are filed under."""

    name: str
    id: str = field(default_factory=new_id)
    color_hex: str = "#007AFF"
    icon_name: str = "folder"
    sort_order: int = 0
    is_default: bool = False
    created_at: str = field(default_factory=utc_now)
    updated_at: str = field(default_factory=utc_now)

    @property
    def normalized_name(self) -> str:
        return normalize_name(self.name)


@dataclass
class ContentItem:
    """A captured link, image or note.

    ``category_id`` is the only membership link; ``category_name`` is filled
    in from a join when the item is read back and is never written.
    """

    title: str
    id: str = field(default_factory=new_id)
    description: Optional[str] = None
    url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    image_data: Optional[bytes] = None
    metadata: dict[str, str] = field(default_factory=dict)
    is_hidden: bool = False
    user_id: Optional[str] = None
    category_id: Optional[str] = None
    category_name: Optional[str] = None
    created_at: str = field(default_factory=utc_now)
    updated_at: str = field(default_factory=utc_now)


class CommitOutcome(Enum):
    """Result of committing an interactive create or rename."""

    CREATED = "created"
    RENAMED = "renamed"
    REJECTED_EMPTY = "rejected_empty"
    REJECTED_DUPLICATE = "rejected_duplicate"
    NOT_EDITING = "not_editing"

    @property
    def applied(self) -> bool:
        return self in (CommitOutcome.CREATED, CommitOutcome.RENAMED)


class ManagerState(Enum):
    """State of the interactive category manager."""

    IDLE = "idle"
    EDITING = "editing"
    CONFIRMING_DELETE = "confirming_delete"


@dataclass
class DeduplicationReport:
    """Result of a category deduplication pass."""

    categories_removed: int = 0
    """Number of duplicate categories deleted."""

    items_moved: int = 0
    """Number of content items re-pointed at a survivor."""

    groups: dict[str, int] = field(default_factory=dict)
    """Normalized name -> group size, for every group that had duplicates."""

    @property
    def changed(self) -> bool:
        return self.categories_removed > 0


@dataclass
class MaintenanceReport:
    """Result of the startup maintenance routine."""

    deduplication: DeduplicationReport
    invalid_urls_cleaned: int = 0
    empty_misc_removed: int = 0


@dataclass
class DeleteResult:
    """Result of confirming a category deletion."""

    category_name: str
    deleted: bool
    items_reassigned: int = 0
    misc_created: bool = False


@dataclass
class ImportResult:
    """Result of importing a backup folder."""

    categories: int
    items: int
    images: int
