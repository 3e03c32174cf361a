"""Tests for BackupService."""

import json
import shutil
from pathlib import Path

import pytest

from stash.core.exceptions import BackupError
from stash.core.types import ContentItem
from stash.services.backup import BackupService
from stash.store.database import Database
from stash.store.repositories import CategoryRepository, ContentItemRepository


@pytest.fixture
def backup(db: Database, category_repo, content_repo) -> BackupService:
    return BackupService(db, category_repo, content_repo)


@pytest.fixture
def other_db(tmp_path: Path) -> Database:
    """A second, empty store to import into."""
    database = Database(tmp_path / "other.db")
    database.connect()
    yield database
    database.close()


@pytest.fixture
def restore(other_db: Database) -> BackupService:
    return BackupService(
        other_db, CategoryRepository(other_db), ContentItemRepository(other_db)
    )


@pytest.fixture
def populated(make_category, make_item):
    """Two categories, one uncategorized item and one item with an image."""
    food = make_category("Food", sort_order=0)
    make_category("Tech", sort_order=1)
    photo = make_item(
        "Photo", food, image_data=b"\xff\xd8jpeg", metadata={"site_name": "cam"}
    )
    link = make_item("Link", url="https://example.com", is_hidden=True)
    return {"food": food, "photo": photo, "link": link}


class TestExport:
    """Tests for export_backup."""

    def test_writes_items_json_and_images(self, backup: BackupService, populated, tmp_path: Path):
        root = backup.export_backup(tmp_path / "backups")

        assert root.parent == tmp_path / "backups"
        assert root.name.startswith("stash-backup-")

        payload = json.loads((root / "items.json").read_text())
        assert payload["version"] == 2
        assert [c["name"] for c in payload["categories"]] == ["Food", "Tech"]

        by_title = {i["title"]: i for i in payload["items"]}
        assert by_title["Photo"]["category_name"] == "Food"
        assert by_title["Photo"]["has_image"] is True
        assert by_title["Photo"]["metadata"] == {"site_name": "cam"}
        assert by_title["Link"]["category_name"] is None
        assert by_title["Link"]["is_hidden"] is True

        image = root / "images" / f"{populated['photo'].id}.jpg"
        assert image.read_bytes() == b"\xff\xd8jpeg"

    def test_empty_store(self, backup: BackupService, tmp_path: Path):
        root = backup.export_backup(tmp_path)

        payload = json.loads((root / "items.json").read_text())
        assert payload["categories"] == []
        assert payload["items"] == []


class TestImport:
    """Tests for import_backup."""

    def test_round_trip_into_empty_store(
        self, backup: BackupService, restore: BackupService, other_db: Database, populated,
        tmp_path: Path,
    ):
        root = backup.export_backup(tmp_path / "out")

        result = restore.import_backup(root)

        assert (result.categories, result.items, result.images) == (2, 2, 1)
        items = ContentItemRepository(other_db)
        photo = items.fetch_by_id(populated["photo"].id)
        assert photo.category_name == "Food"
        assert photo.image_data == b"\xff\xd8jpeg"
        assert photo.created_at == populated["photo"].created_at
        link = items.fetch_by_id(populated["link"].id)
        assert link.category_id is None
        assert link.is_hidden is True
        assert CategoryRepository(other_db).fetch_names() == ["Food", "Tech"]

    def test_import_twice_is_idempotent(
        self, backup: BackupService, restore: BackupService, other_db: Database, populated,
        tmp_path: Path,
    ):
        root = backup.export_backup(tmp_path / "out")

        restore.import_backup(root)
        restore.import_backup(root)

        assert CategoryRepository(other_db).count() == 2
        assert ContentItemRepository(other_db).count_all() == 2

    def test_finds_nested_items_json(
        self, backup: BackupService, restore: BackupService, populated, tmp_path: Path
    ):
        root = backup.export_backup(tmp_path / "out")

        result = restore.import_backup(tmp_path / "out")

        assert root.parent == tmp_path / "out"
        assert result.items == 2

    def test_missing_image_is_skipped(
        self, backup: BackupService, restore: BackupService, other_db: Database, populated,
        tmp_path: Path,
    ):
        root = backup.export_backup(tmp_path / "out")
        shutil.rmtree(root / "images")

        result = restore.import_backup(root)

        assert result.images == 0
        assert ContentItemRepository(other_db).fetch_by_id(populated["photo"].id).image_data is None

    def test_missing_items_json(self, restore: BackupService, tmp_path: Path):
        (tmp_path / "empty").mkdir()

        with pytest.raises(BackupError, match="items.json"):
            restore.import_backup(tmp_path / "empty")

    def test_unreadable_items_json(self, restore: BackupService, tmp_path: Path):
        (tmp_path / "items.json").write_text("{not json")

        with pytest.raises(BackupError, match="Unreadable"):
            restore.import_backup(tmp_path)

    @pytest.mark.parametrize(
        "payload",
        [
            {"categories": [{"name": "X"}], "items": []},
            {"categories": [{"id": "c1", "name": "X", "sort_order": "first"}], "items": []},
            {"categories": [{"id": "c1", "name": "X"}], "items": [{"title": "no id"}]},
            {"categories": [], "items": ["just a string"]},
        ],
    )
    def test_malformed_records_apply_nothing(
        self, restore: BackupService, other_db: Database, tmp_path: Path, payload
    ):
        (tmp_path / "items.json").write_text(json.dumps(payload))

        with pytest.raises(BackupError, match="Malformed"):
            restore.import_backup(tmp_path)

        assert CategoryRepository(other_db).fetch_all() == []
        assert ContentItemRepository(other_db).fetch_all() == []

    def test_zip_rejected(self, restore: BackupService, tmp_path: Path):
        with pytest.raises(BackupError, match="Zip"):
            restore.import_backup(tmp_path / "backup.zip")

    def test_merges_with_existing_same_name_category(
        self, backup: BackupService, restore: BackupService, other_db: Database, populated,
        tmp_path: Path,
    ):
        """A local category with the backup's name is re-keyed, keeping its items."""
        local_categories = CategoryRepository(other_db)
        local_items = ContentItemRepository(other_db)
        local_food = local_categories.create("Food")
        local_item = local_items.insert(ContentItem(title="Local", category_id=local_food.id))
        root = backup.export_backup(tmp_path / "out")

        restore.import_backup(root)

        assert local_categories.fetch_names() == ["Food", "Tech"]
        assert local_items.fetch_by_id(local_item.id).category_id == populated["food"].id
        assert local_items.count("Food") == 2
