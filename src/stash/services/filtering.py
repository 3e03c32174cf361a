"""In-memory filtering of already-fetched content items."""

from ..core.types import ContentItem, fold_text

# A query for one of these also matches the others
_QUERY_ALIASES = {"twitter": ("twitter", "x.com")}


class ContentFilterService:
    """Filters items by category and free-text query."""

    def filter(
        self, items: list[ContentItem], category: str | None, query: str
    ) -> list[ContentItem]:
        """Filter items by category name, then by query.

        Args:
            items: Items to filter.
            category: Category name to keep, or None for all.
            query: Free text; blank keeps everything.
        """
        filtered = self._filter_by_category(items, category)

        search = fold_text(query.strip())
        if not search:
            return filtered

        terms = _QUERY_ALIASES.get(search, (search,))
        return [item for item in filtered if self._matches(item, terms)]

    def count_by_category(self, items: list[ContentItem], category: str | None) -> int:
        return len(self._filter_by_category(items, category))

    @staticmethod
    def _filter_by_category(items: list[ContentItem], category: str | None) -> list[ContentItem]:
        if category is None:
            return list(items)
        return [item for item in items if item.category_name == category]

    @staticmethod
    def _matches(item: ContentItem, terms: tuple[str, ...]) -> bool:
        description = item.metadata.get("best_description") or item.description or ""
        metadata_text = " ".join(item.metadata.values()).replace("_", " ")
        haystacks = [
            fold_text(item.title),
            fold_text(description),
            fold_text(item.url or ""),
            fold_text(metadata_text),
        ]
        return any(term in text for term in terms for text in haystacks)
