"""
Product-count aggregation over the category hierarchy.

Works on a snapshot of category records (mappings carrying ``id``,
``parent_id`` and ``product_count``) as returned by ``GET /api/categories``.
Every category gains ``own_product_count`` (its direct count) and
``total_product_count`` (its direct count plus the totals of all of its
descendants). The snapshot itself is never modified.

The parent/child graph must be acyclic; a cycle in ``parent_id`` raises
``RecursionError``.
"""

from collections import defaultdict
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

CategoryRecord = Mapping[str, Any]


class CategoryAggregator:
    """Computes recursive product totals for one category snapshot."""

    def __init__(self, flat_categories: Iterable[CategoryRecord]):
        self._by_id: Dict[Any, CategoryRecord] = {}
        self._children: Dict[Any, List[Any]] = defaultdict(list)

        for category in flat_categories:
            self._by_id[category["id"]] = category
            parent_id = category.get("parent_id")
            if parent_id is not None:
                self._children[parent_id].append(category["id"])

    def own_count(self, category_id: Any) -> int:
        category = self._by_id.get(category_id)
        if category is None:
            return 0
        return category.get("product_count") or 0

    def total_count(self, category_id: Any) -> int:
        """Direct count of ``category_id`` plus the totals of its children.

        Unknown ids contribute 0.
        """
        total = self.own_count(category_id)
        for child_id in self._children.get(category_id, ()):
            total += self.total_count(child_id)
        return total

    def enrich(self, categories: Iterable[CategoryRecord]) -> List[Dict[str, Any]]:
        """Return copies of ``categories`` with own and total counts attached."""
        return [
            {
                **category,
                "own_product_count": category.get("product_count"),
                "total_product_count": self.total_count(category["id"]),
            }
            for category in categories
        ]


def compute_total(category_id: Any, flat_categories: Sequence[CategoryRecord]) -> int:
    """Total product count for one category in the given snapshot."""
    return CategoryAggregator(flat_categories).total_count(category_id)


def enrich(
    categories: Iterable[CategoryRecord], flat_categories: Sequence[CategoryRecord]
) -> List[Dict[str, Any]]:
    """Attach ``own_product_count`` and ``total_product_count`` to each category.

    ``categories`` may be the flat list itself or the top-level list; totals
    are always resolved against ``flat_categories``. Calling this again on an
    already enriched list yields the same totals.
    """
    return CategoryAggregator(flat_categories).enrich(categories)


def format_product_label(count: Optional[int]) -> str:
    """Render a product count as ``"1 Product"`` or ``"N Products"``."""
    safe_count = count or 0
    return f"{safe_count} Product{'' if safe_count == 1 else 's'}"
