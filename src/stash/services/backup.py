"""Backup export and import as a portable folder."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

from loguru import logger

from ..core.exceptions import BackupError
from ..core.types import ImportResult, utc_now
from ..store.database import Database
from ..store.repositories import CategoryRepository, ContentItemRepository

if TYPE_CHECKING:
    from .container import ServiceContainer

BACKUP_VERSION = 2
BACKUP_FILENAME = "items.json"
IMAGES_DIRNAME = "images"


class BackupService:
    """Exports the store to a folder and merges such a folder back in.

    Layout::

        stash-backup-<stamp>/
            items.json          categories and items (format version 2)
            images/<id>.jpg     raw image data of items that have one

    Import merges by id, so importing the same backup twice is harmless.
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

    @classmethod
    def from_container(cls, container: "ServiceContainer") -> "BackupService":
        return cls(
            db=container.db,
            category_repo=container.category_repo,
            content_repo=container.content_repo,
        )

    def export_backup(self, directory: Path) -> Path:
        """Write a backup folder under ``directory``.

        Args:
            directory: Parent directory; created if missing.

        Returns:
            Path of the backup folder.
        """
        stamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
        root = Path(directory) / f"stash-backup-{stamp}"
        images_dir = root / IMAGES_DIRNAME
        images_dir.mkdir(parents=True, exist_ok=True)

        categories = self._category_repo.fetch_all()
        items = self._content_repo.fetch_all()

        payload: dict[str, Any] = {
            "version": BACKUP_VERSION,
            "created_at": utc_now(),
            "categories": [
                {
                    "id": c.id,
                    "name": c.name,
                    "color_hex": c.color_hex,
                    "icon_name": c.icon_name,
                    "sort_order": c.sort_order,
                    "is_default": c.is_default,
                    "created_at": c.created_at,
                    "updated_at": c.updated_at,
                }
                for c in categories
            ],
            "items": [],
        }

        for item in items:
            if item.image_data:
                (images_dir / f"{item.id}.jpg").write_bytes(item.image_data)
            payload["items"].append(
                {
                    "id": item.id,
                    "user_id": item.user_id,
                    "category_name": item.category_name,
                    "title": item.title,
                    "description": item.description,
                    "url": item.url,
                    "metadata": item.metadata,
                    "thumbnail_url": item.thumbnail_url,
                    "has_image": bool(item.image_data),
                    "is_hidden": item.is_hidden,
                    "created_at": item.created_at,
                    "updated_at": item.updated_at,
                }
            )

        (root / BACKUP_FILENAME).write_text(json.dumps(payload, indent=2), encoding="utf-8")
        logger.info(f"Backup exported: {root} ({len(categories)} categories, {len(items)} items)")
        return root

    def import_backup(self, path: Path) -> ImportResult:
        """Merge a backup folder into the store in one transaction.

        Args:
            path: Backup folder (``items.json`` at its root or below it).

        Returns:
            ImportResult with counts of merged categories, items and images.

        Raises:
            BackupError: If the folder has no readable, well-formed ``items.json``;
                nothing is applied.
            StoreError: If the merge fails; nothing is applied.
        """
        json_path = self._locate_backup_file(Path(path))
        try:
            backup = json.loads(json_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise BackupError(f"Unreadable backup file {json_path}: {e}") from e

        categories, items = self._parse_records(backup, json_path)
        images_dir = json_path.parent / IMAGES_DIRNAME
        result = ImportResult(categories=0, items=0, images=0)

        with self._db.transaction():
            for fields in categories:
                self._category_repo.upsert(**fields)
                result.categories += 1

            for bi in items:
                image_data = None
                if bi["has_image"]:
                    image_path = images_dir / f"{bi['fields']['id']}.jpg"
                    if image_path.exists():
                        image_data = image_path.read_bytes()
                        result.images += 1
                    else:
                        logger.warning(f"Backup image missing: {image_path.name}")

                item = self._content_repo.upsert(**bi["fields"], image_data=image_data)

                if category_name := bi["category_name"]:
                    category = self._category_repo.fetch_by_name(category_name)
                    if category:
                        self._content_repo.update_category(item, category)
                result.items += 1

        logger.info(
            f"Backup imported: {result.categories} categories, "
            f"{result.items} items, {result.images} images"
        )
        return result

    def _parse_records(self, backup: Any, json_path: Path) -> tuple[list[dict], list[dict]]:
        """Convert raw backup records to upsert arguments.

        Raises:
            BackupError: If a record lacks an id or has a field of the wrong type.
        """
        defaults = self._category_repo.config
        try:
            categories = [
                {
                    "id": str(bc["id"]),
                    "name": str(bc["name"]),
                    "color_hex": bc.get("color_hex", defaults.default_color_hex),
                    "icon_name": bc.get("icon_name", defaults.default_icon_name),
                    "sort_order": int(bc.get("sort_order", 0)),
                    "is_default": bool(bc.get("is_default", False)),
                    "created_at": bc.get("created_at") or utc_now(),
                    "updated_at": bc.get("updated_at") or utc_now(),
                }
                for bc in backup.get("categories", [])
            ]
            items = [
                {
                    "fields": {
                        "id": str(bi["id"]),
                        "title": str(bi.get("title", "")),
                        "user_id": bi.get("user_id"),
                        "description": bi.get("description"),
                        "url": bi.get("url"),
                        "metadata": dict(bi.get("metadata") or {}),
                        "thumbnail_url": bi.get("thumbnail_url"),
                        "is_hidden": bool(bi.get("is_hidden", False)),
                        "created_at": bi.get("created_at"),
                    },
                    "has_image": bool(bi.get("has_image")),
                    "category_name": bi.get("category_name"),
                }
                for bi in backup.get("items", [])
            ]
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise BackupError(f"Malformed backup file {json_path}: {e!r}") from e
        return categories, items

    @staticmethod
    def _locate_backup_file(root: Path) -> Path:
        if root.suffix.lower() == ".zip":
            raise BackupError("Zip import is not supported, select the backup folder")

        candidate = root / BACKUP_FILENAME
        if candidate.exists():
            return candidate

        # A parent folder may have been picked by mistake
        for found in sorted(root.rglob(BACKUP_FILENAME)):
            return found
        raise BackupError(f"{BACKUP_FILENAME} not found under {root}")
