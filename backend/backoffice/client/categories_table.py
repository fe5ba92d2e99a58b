"""
View-model behind the admin categories table.

Parent rows show the total product count (own plus subcategories);
subcategory rows show only their own count. Subcategories are listed under
their parent while the parent is expanded.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Set

from backoffice.client.api import ApiError, CategoriesAPI
from backoffice.services.category_aggregator import enrich, format_product_label

logger = logging.getLogger(__name__)


@dataclass
class CategoryRow:
    category: Dict[str, Any]
    is_subcategory: bool
    product_label: str
    expandable: bool = False
    expanded: bool = False

    @property
    def id(self) -> int:
        return self.category["id"]

    @property
    def name(self) -> str:
        return self.category["name"]


@dataclass
class CategoriesTableView:
    search_term: str = ""
    categories: List[Dict[str, Any]] = field(default_factory=list)
    flat_categories: List[Dict[str, Any]] = field(default_factory=list)
    expanded: Set[int] = field(default_factory=set)
    loading: bool = False

    async def load(self) -> bool:
        """
        Fetch the category snapshot and aggregate product counts.

        On failure the error is logged and the current rows are kept.
        Returns whether the snapshot was refreshed.
        """
        self.loading = True
        try:
            response = await CategoriesAPI.get_categories(True)
        except ApiError as e:
            logger.error(f"Failed to fetch categories: {e}")
            return False
        finally:
            self.loading = False

        flat = response.get("flat_categories") or []
        self.flat_categories = enrich(flat, flat)
        self.categories = enrich(response.get("categories") or [], flat)
        return True

    def toggle_expanded(self, category_id: int):
        if category_id in self.expanded:
            self.expanded.discard(category_id)
        else:
            self.expanded.add(category_id)

    def is_expanded(self, category_id: int) -> bool:
        return category_id in self.expanded

    def _matches(self, category: Dict[str, Any]) -> bool:
        term = self.search_term.lower()
        name = (category.get("name") or "").lower()
        description = (category.get("description") or "").lower()
        return term in name or term in description

    def filtered_categories(self) -> List[Dict[str, Any]]:
        """Top-level categories matching the search term, directly or via a subcategory."""
        return [
            category
            for category in self.categories
            if self._matches(category)
            or any(self._matches(sub) for sub in category.get("subcategories") or [])
        ]

    def _resolve(self, category: Dict[str, Any]) -> Dict[str, Any]:
        """Swap a nested subcategory for its enriched flat-list record."""
        for enriched in self.flat_categories:
            if enriched["id"] == category["id"]:
                return enriched
        return category

    def rows(self) -> Iterator[CategoryRow]:
        for category in self.filtered_categories():
            subcategories = category.get("subcategories") or []
            yield CategoryRow(
                category=category,
                is_subcategory=False,
                product_label=format_product_label(category.get("total_product_count")),
                expandable=bool(subcategories),
                expanded=self.is_expanded(category["id"]),
            )

            if not self.is_expanded(category["id"]):
                continue

            for subcategory in subcategories:
                display = self._resolve(subcategory)
                yield CategoryRow(
                    category=display,
                    is_subcategory=True,
                    product_label=format_product_label(display.get("own_product_count")),
                )

    def find(self, category_id: int) -> Optional[Dict[str, Any]]:
        for category in self.flat_categories:
            if category["id"] == category_id:
                return category
        return None

    async def delete_category(self, category_id: int):
        """
        Delete a category and reload the table.

        Raises:
            ApiError: If the server refuses the deletion
        """
        try:
            await CategoriesAPI.delete_category(category_id)
        except ApiError as e:
            logger.error(f"Failed to delete category {category_id}: {e}")
            raise

        self.expanded.discard(category_id)
        await self.load()
