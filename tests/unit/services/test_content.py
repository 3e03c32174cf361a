"""Tests for ContentService."""

import pytest

from stash.core.config import CategoryConfig, ContentConfig
from stash.services.content import ContentService
from stash.store.database import Database


@pytest.fixture
def content(db: Database, category_repo, content_repo) -> ContentService:
    """Provide a ContentService with small pages."""
    return ContentService(
        db,
        category_repo,
        content_repo,
        ContentConfig(items_per_page=3),
        CategoryConfig(default_categories=["Home", "Food", "Tech"]),
    )


class TestSaveItem:
    """Tests for save_item."""

    def test_save_into_named_category(self, content: ContentService, content_repo, category_repo):
        item = content.save_item("Pasta", category_name="Food", url="https://example.com")

        stored = content_repo.fetch_by_id(item.id)
        assert stored.category_name == "Food"
        assert category_repo.exists("Food")

    def test_save_reuses_category_ignoring_case(self, content: ContentService, category_repo):
        category_repo.create("Food")

        item = content.save_item("Pasta", category_name="food")

        assert item.category_name == "Food"
        assert category_repo.count() == 1

    def test_save_without_category_uses_default(self, content: ContentService, category_repo):
        category_repo.create("Home")
        category_repo.create("Food")

        item = content.save_item("Lamp")

        assert item.category_name == "Home"

    def test_save_on_empty_store_uses_fallback(self, content: ContentService):
        item = content.save_item("Lamp")

        assert item.category_name == "Misc"

    def test_save_with_empty_category_name_uses_misc(self, content: ContentService):
        item = content.save_item("Lamp", category_name="  ")

        assert item.category_name == "Misc"

    def test_double_submit_saves_once(self, content: ContentService, content_repo):
        first = content.save_item("Pasta", url="https://example.com/pasta")
        second = content.save_item("Pasta", url="https://example.com/pasta")

        assert second.id == first.id
        assert content_repo.count_all() == 1

    def test_same_title_other_url_is_saved(self, content: ContentService, content_repo):
        content.save_item("Pasta", url="https://a.example")
        content.save_item("Pasta", url="https://b.example")

        assert content_repo.count_all() == 2

    def test_metadata_is_stored(self, content: ContentService, content_repo):
        item = content.save_item("Video", metadata={"site_name": "YouTube"})

        assert content_repo.fetch_by_id(item.id).metadata == {"site_name": "YouTube"}


class TestItemEdits:
    """Tests for move, hide and delete."""

    def test_move_item_creates_category(self, content: ContentService, content_repo):
        item = content.save_item("Pasta", category_name="Food")

        category = content.move_item(item, "Recipes")

        assert category.name == "Recipes"
        assert content_repo.fetch_by_id(item.id).category_name == "Recipes"

    def test_set_hidden(self, content: ContentService, content_repo):
        item = content.save_item("Secret")

        content.set_hidden(item, True)
        assert content_repo.fetch_by_id(item.id).is_hidden is True

        content.set_hidden(item, False)
        assert content_repo.fetch_by_id(item.id).is_hidden is False

    def test_delete_items(self, content: ContentService, content_repo):
        items = [content.save_item(f"item-{n}") for n in range(3)]

        assert content.delete_items(items[:2]) == 2
        assert [i.id for i in content_repo.fetch_all()] == [items[2].id]


class TestPaging:
    """Tests for load_page."""

    def test_pages_are_cumulative(self, content: ContentService, make_item):
        for n in range(7):
            make_item(f"item-{n}", created_at=f"2024-01-0{n + 1}T00:00:00+00:00")

        first = content.load_page(1)
        assert [i.title for i in first.items] == ["item-6", "item-5", "item-4"]
        assert first.has_more is True

        third = content.load_page(3)
        assert len(third.items) == 7
        assert third.has_more is False

    def test_exact_page_has_no_more(self, content: ContentService, make_item):
        for n in range(3):
            make_item(f"item-{n}")

        page = content.load_page(1)

        assert len(page.items) == 3
        assert page.has_more is False


class TestSeedDefaults:
    """Tests for seed_default_categories."""

    def test_seed_on_empty_store(self, content: ContentService, category_repo):
        created = content.seed_default_categories()

        assert [c.name for c in created] == ["Home", "Food", "Tech"]
        assert [c.sort_order for c in category_repo.fetch_all()] == [0, 1, 2]
        assert category_repo.get_default_category_name() == "Home"

    def test_seed_skipped_when_categories_exist(self, content: ContentService, category_repo):
        category_repo.create("Mine")

        assert content.seed_default_categories() == []
        assert category_repo.fetch_names() == ["Mine"]
