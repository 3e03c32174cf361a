"""Configuration management for stash."""

import os
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class CategoryConfig:
    """Category naming and presentation defaults."""

    # Names recognised as the fallback bucket, searched in order
    misc_names: list[str] = field(default_factory=lambda: ["Misc"])
    default_category_name: str = "Misc"
    default_color_hex: str = "#007AFF"
    default_icon_name: str = "folder"
    misc_color_hex: str = "#6B7280"
    misc_icon_name: str = "folder"
    default_categories: list[str] = field(
        default_factory=lambda: [
            "Home",
            "Clothes",
            "Food",
            "Tech",
            "Ideas",
            "Outdoor",
            "Music",
            "Books",
            "Cars",
        ]
    )

    @property
    def misc_name(self) -> str:
        """Name used when a Misc category has to be created."""
        return self.misc_names[0] if self.misc_names else "Misc"


@dataclass
class ContentConfig:
    """Content item defaults."""

    items_per_page: int = 10
    # Identical captures within this window are treated as one
    duplicate_window_seconds: float = 2.0
    ephemeral_url_prefixes: list[str] = field(
        default_factory=lambda: [
            "file:///var/mobile/Media/PhotoData/",
            "file:///private/var/mobile/Media/PhotoData/",
        ]
    )


@dataclass
class MaintenanceConfig:
    """Startup maintenance switches."""

    cleanup_invalid_urls: bool = True
    cleanup_empty_misc: bool = False


def _default_db_path() -> Path:
    """Get default database path."""
    data_dir = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))
    return data_dir / "stash" / "stash.db"


@dataclass
class Config:
    """Main application configuration."""

    db_path: Path = field(default_factory=_default_db_path)
    categories: CategoryConfig = field(default_factory=CategoryConfig)
    content: ContentConfig = field(default_factory=ContentConfig)
    maintenance: MaintenanceConfig = field(default_factory=MaintenanceConfig)

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        config = cls()

        if path := os.environ.get("STASH_DB_PATH"):
            config.db_path = Path(path)

        if names := os.environ.get("STASH_MISC_NAMES"):
            parsed = [n.strip() for n in names.split(",") if n.strip()]
            if parsed:
                config.categories.misc_names = parsed

        if default_name := os.environ.get("STASH_DEFAULT_CATEGORY"):
            config.categories.default_category_name = default_name

        return config
