"""
Read-side queries for categories.

Categories come back as plain dicts carrying every column plus the
query-time ``product_count`` (active products assigned directly to the
category) and the parent's name.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy import func
from sqlalchemy.orm import Session, aliased

from backoffice.models.category import Category
from backoffice.models.product import Product

logger = logging.getLogger(__name__)

CATEGORY_FIELDS = [column.name for column in Category.__table__.columns]


class CategoryStore:
    """Category listings with direct product counts."""

    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        active_counts = (
            self.db.query(
                Product.category_id.label("category_id"),
                func.count(Product.id).label("product_count"),
            )
            .filter(Product.is_active == True)  # noqa: E712
            .group_by(Product.category_id)
            .subquery()
        )
        parent = aliased(Category)

        return (
            self.db.query(
                Category,
                func.coalesce(active_counts.c.product_count, 0),
                parent.name,
            )
            .outerjoin(active_counts, active_counts.c.category_id == Category.id)
            .outerjoin(parent, Category.parent_id == parent.id)
        )

    @staticmethod
    def _to_record(
        category: Category, product_count: int, parent_name: Optional[str]
    ) -> Dict[str, Any]:
        record = {field: getattr(category, field) for field in CATEGORY_FIELDS}
        record["product_count"] = int(product_count or 0)
        record["parent_name"] = parent_name
        return record

    def list_flat(self) -> List[Dict[str, Any]]:
        """Every category, top-level ones first, then by sort order and name."""
        rows = self._query().order_by(
            Category.parent_id.is_(None).desc(),
            Category.sort_order,
            Category.name,
        )
        return [self._to_record(*row) for row in rows]

    def list_tree(self) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
        """
        Top-level categories with their direct subcategories attached.

        Returns:
            Tuple of (top-level categories with ``subcategories``, flat list)
        """
        flat = self.list_flat()

        nodes = {record["id"]: {**record, "subcategories": []} for record in flat}
        roots = []
        for record in flat:
            if record["parent_id"] is None:
                roots.append(nodes[record["id"]])

        for record in flat:
            if record["parent_id"] is not None:
                parent = nodes.get(record["parent_id"])
                if parent is not None:
                    parent["subcategories"].append(nodes[record["id"]])
                else:
                    logger.warning(
                        f"Category {record['id']} references missing parent {record['parent_id']}"
                    )

        return roots, flat

    def list_top_level(self) -> List[Dict[str, Any]]:
        rows = (
            self._query()
            .filter(Category.parent_id.is_(None))
            .order_by(Category.sort_order, Category.name)
        )
        return [self._to_record(*row) for row in rows]

    def list_subcategories(self, parent_id: int) -> List[Dict[str, Any]]:
        rows = (
            self._query()
            .filter(Category.parent_id == parent_id)
            .order_by(Category.sort_order, Category.name)
        )
        return [self._to_record(*row) for row in rows]

    def get_record(self, category_id: int) -> Optional[Dict[str, Any]]:
        row = self._query().filter(Category.id == category_id).first()
        if row is None:
            return None
        return self._to_record(*row)

    def get_detail(self, category_id: int) -> Optional[Dict[str, Any]]:
        """A single category with its direct subcategories, or None."""
        record = self.get_record(category_id)
        if record is None:
            return None
        record["subcategories"] = self.list_subcategories(category_id)
        return record
