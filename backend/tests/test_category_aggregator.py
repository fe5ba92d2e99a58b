"""Tests for product-count aggregation over the category hierarchy."""

import pytest
from backoffice.services.category_aggregator import (
    CategoryAggregator,
    compute_total,
    enrich,
    format_product_label,
)


@pytest.fixture
def flat():
    return [
        {"id": 1, "parent_id": None, "product_count": 5},
        {"id": 2, "parent_id": 1, "product_count": 3},
        {"id": 3, "parent_id": 1, "product_count": 0},
    ]


@pytest.mark.unit
class TestComputeTotal:
    """Test recursive totals."""

    def test_parent_includes_children(self, flat):
        assert compute_total(1, flat) == 8

    def test_leaf_totals_equal_own_count(self, flat):
        assert compute_total(2, flat) == 3
        assert compute_total(3, flat) == 0

    def test_missing_category_is_zero(self, flat):
        assert compute_total(99, flat) == 0
        assert compute_total(1, []) == 0

    def test_null_or_absent_product_count_is_zero(self):
        flat = [
            {"id": 1, "parent_id": None, "product_count": None},
            {"id": 2, "parent_id": 1},
            {"id": 3, "parent_id": 1, "product_count": 4},
        ]
        assert compute_total(1, flat) == 4
        assert compute_total(2, flat) == 0

    def test_children_of_missing_parent_still_count(self):
        # Orphans are reachable through their parent_id even if the parent row is gone
        flat = [{"id": 5, "parent_id": 4, "product_count": 2}]
        assert compute_total(4, flat) == 2

    def test_arbitrary_depth(self):
        flat = [
            {"id": 1, "parent_id": None, "product_count": 1},
            {"id": 2, "parent_id": 1, "product_count": 2},
            {"id": 3, "parent_id": 2, "product_count": 4},
            {"id": 4, "parent_id": 3, "product_count": 8},
        ]
        assert compute_total(1, flat) == 15
        assert compute_total(3, flat) == 12

    def test_order_of_flat_list_does_not_matter(self, flat):
        assert compute_total(1, list(reversed(flat))) == 8

    def test_total_is_own_plus_children_totals(self):
        flat = [
            {"id": 1, "parent_id": None, "product_count": 2},
            {"id": 2, "parent_id": 1, "product_count": 1},
            {"id": 3, "parent_id": 2, "product_count": 6},
            {"id": 4, "parent_id": 1, "product_count": 0},
            {"id": 5, "parent_id": None, "product_count": 7},
        ]
        aggregator = CategoryAggregator(flat)
        for category in flat:
            children = [c for c in flat if c["parent_id"] == category["id"]]
            expected = (category["product_count"] or 0) + sum(
                aggregator.total_count(child["id"]) for child in children
            )
            assert aggregator.total_count(category["id"]) == expected
            assert aggregator.total_count(category["id"]) >= aggregator.own_count(
                category["id"]
            )

    def test_cycle_raises_recursion_error(self):
        flat = [
            {"id": 1, "parent_id": 2, "product_count": 1},
            {"id": 2, "parent_id": 1, "product_count": 1},
        ]
        with pytest.raises(RecursionError):
            compute_total(1, flat)


@pytest.mark.unit
class TestEnrich:
    """Test enrichment of category collections."""

    def test_enrich_flat_list(self, flat):
        enriched = enrich(flat, flat)

        assert [c["total_product_count"] for c in enriched] == [8, 3, 0]
        assert [c["own_product_count"] for c in enriched] == [5, 3, 0]

    def test_enrich_top_level_list(self):
        flat = [
            {"id": 10, "parent_id": None, "product_count": 2},
            {"id": 11, "parent_id": 10, "product_count": 4},
        ]
        top_level = [
            {
                "id": 10,
                "parent_id": None,
                "name": "Parent",
                "product_count": 2,
                "subcategories": [{"id": 11, "parent_id": 10, "product_count": 4}],
            }
        ]

        enriched = enrich(top_level, flat)

        assert enriched[0]["own_product_count"] == 2
        assert enriched[0]["total_product_count"] == 6
        assert enriched[0]["name"] == "Parent"
        assert enriched[0]["subcategories"] == top_level[0]["subcategories"]

    def test_inputs_are_not_mutated(self, flat):
        snapshot = [dict(c) for c in flat]
        enrich(flat, flat)
        assert flat == snapshot

    def test_idempotent(self, flat):
        once = enrich(flat, flat)
        twice = enrich(once, flat)

        assert [c["total_product_count"] for c in twice] == [
            c["total_product_count"] for c in once
        ]
        assert [c["own_product_count"] for c in twice] == [5, 3, 0]

    def test_enrich_empty(self):
        assert enrich([], []) == []


@pytest.mark.unit
class TestFormatProductLabel:
    """Test product count pluralization."""

    @pytest.mark.parametrize(
        "count,label",
        [
            (0, "0 Products"),
            (1, "1 Product"),
            (2, "2 Products"),
            (21, "21 Products"),
            (None, "0 Products"),
        ],
    )
    def test_labels(self, count, label):
        assert format_product_label(count) == label
