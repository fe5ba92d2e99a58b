"""Tests for products API endpoints."""

import pytest
from backoffice.models.product import Product


@pytest.mark.unit
class TestListProducts:
    """Test product listing, filters and pagination."""

    def test_list_products(self, authenticated_client, category_tree):
        response = authenticated_client.get("/api/products/")

        assert response.status_code == 200
        data = response.json()
        assert len(data["products"]) == 4
        assert data["pagination"] == {"page": 1, "limit": 10, "total": 4, "pages": 1}

    def test_derived_status(self, authenticated_client, category_tree):
        response = authenticated_client.get("/api/products/")

        statuses = {p["sku"]: p["status"] for p in response.json()["products"]}
        assert statuses["CAB-1"] == "active"
        assert statuses["PHN-B"] == "low_stock"
        # Low stock wins over the inactive flag
        assert statuses["PHN-OLD"] == "low_stock"

    def test_out_of_stock_status(self, authenticated_client, category_tree, db_session):
        db_session.add(Product(name="Gone", sku="GONE-1", price=9, stock_quantity=0))
        db_session.commit()

        response = authenticated_client.get(
            "/api/products/", params={"status": "out_of_stock"}
        )

        products = response.json()["products"]
        assert [p["sku"] for p in products] == ["GONE-1"]
        assert products[0]["status"] == "out_of_stock"
        assert products[0]["category_name"] is None

    def test_category_names_attached(self, authenticated_client, category_tree):
        response = authenticated_client.get("/api/products/", params={"search": "PHN-A"})

        product = response.json()["products"][0]
        assert product["category_name"] == "Phones"
        assert product["parent_category_name"] == "Electronics"
        assert product["category_parent_id"] == category_tree["electronics"].id

    def test_search(self, authenticated_client, category_tree):
        response = authenticated_client.get("/api/products/", params={"search": "phone"})

        assert response.json()["pagination"]["total"] == 3

    def test_filter_by_category_name(self, authenticated_client, category_tree):
        response = authenticated_client.get(
            "/api/products/", params={"category": "Phones"}
        )
        assert response.json()["pagination"]["total"] == 3

        response = authenticated_client.get("/api/products/", params={"category": "all"})
        assert response.json()["pagination"]["total"] == 4

    def test_filter_inactive(self, authenticated_client, category_tree):
        response = authenticated_client.get(
            "/api/products/", params={"status": "inactive"}
        )
        assert [p["sku"] for p in response.json()["products"]] == ["PHN-OLD"]

    def test_invalid_status_filter(self, authenticated_client, category_tree):
        response = authenticated_client.get(
            "/api/products/", params={"status": "bogus"}
        )
        assert response.status_code == 400

    def test_pagination(self, authenticated_client, category_tree):
        response = authenticated_client.get(
            "/api/products/", params={"page": 2, "limit": 3}
        )

        data = response.json()
        assert len(data["products"]) == 1
        assert data["pagination"] == {"page": 2, "limit": 3, "total": 4, "pages": 2}


@pytest.mark.unit
class TestProductCrud:
    """Test product create, update and delete."""

    def test_get_product(self, authenticated_client, category_tree, db_session):
        product = db_session.query(Product).filter(Product.sku == "CAB-1").first()

        response = authenticated_client.get(f"/api/products/{product.id}")

        assert response.status_code == 200
        assert response.json()["product"]["name"] == "Cable"

    def test_get_missing_product(self, authenticated_client):
        response = authenticated_client.get("/api/products/999")
        assert response.status_code == 404

    def test_create_product(self, authenticated_client, category_tree):
        response = authenticated_client.post(
            "/api/products/",
            json={
                "name": "Laptop Pro",
                "sku": "LAP-PRO",
                "price": 1999.99,
                "stock_quantity": 5,
                "category_id": category_tree["laptops"].id,
                "images": ["https://example.com/a.jpg"],
            },
        )

        assert response.status_code == 201
        product = response.json()["product"]
        assert product["sku"] == "LAP-PRO"
        assert product["price"] == pytest.approx(1999.99)
        assert product["status"] == "low_stock"
        assert product["images"] == ["https://example.com/a.jpg"]
        assert product["low_stock_threshold"] == 10

    def test_new_product_counts_towards_category(
        self, authenticated_client, category_tree
    ):
        laptops_id = category_tree["laptops"].id
        authenticated_client.post(
            "/api/products/",
            json={"name": "Laptop", "sku": "LAP-1", "price": 999, "category_id": laptops_id},
        )

        response = authenticated_client.get(f"/api/categories/{laptops_id}")
        assert response.json()["category"]["product_count"] == 1

    def test_duplicate_sku(self, authenticated_client, category_tree):
        response = authenticated_client.post(
            "/api/products/", json={"name": "Copy", "sku": "CAB-1", "price": 1}
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "SKU already exists"

    def test_unknown_category(self, authenticated_client):
        response = authenticated_client.post(
            "/api/products/",
            json={"name": "Lost", "sku": "LOST-1", "price": 1, "category_id": 999},
        )
        assert response.status_code == 400

    def test_price_required(self, authenticated_client):
        response = authenticated_client.post(
            "/api/products/", json={"name": "Free", "sku": "FREE-1"}
        )
        assert response.status_code == 422

    def test_update_product(self, authenticated_client, category_tree, db_session):
        product = db_session.query(Product).filter(Product.sku == "PHN-OLD").first()

        response = authenticated_client.put(
            f"/api/products/{product.id}", json={"stock_quantity": 50, "is_active": True}
        )

        assert response.status_code == 200
        assert response.json()["product"]["status"] == "active"

    def test_update_missing_product(self, authenticated_client):
        response = authenticated_client.put("/api/products/999", json={"name": "X"})
        assert response.status_code == 404

    def test_delete_product(self, authenticated_client, category_tree, db_session):
        product = db_session.query(Product).filter(Product.sku == "CAB-1").first()
        product_id = product.id

        response = authenticated_client.delete(f"/api/products/{product_id}")

        assert response.status_code == 200
        assert db_session.query(Product).filter(Product.id == product_id).first() is None

    def test_cannot_delete_ordered_product(self, authenticated_client, sales_data):
        cable_id = sales_data["products"]["CAB-1"].id

        response = authenticated_client.delete(f"/api/products/{cable_id}")

        assert response.status_code == 400
        assert "existing orders" in response.json()["detail"]

    def test_viewer_cannot_create(self, viewer_client):
        response = viewer_client.post(
            "/api/products/", json={"name": "X", "sku": "X-1", "price": 1}
        )
        assert response.status_code == 403


@pytest.mark.unit
class TestBulkStock:
    """Test bulk stock updates."""

    def test_bulk_update(self, authenticated_client, category_tree, db_session):
        products = {p.sku: p.id for p in db_session.query(Product).all()}

        response = authenticated_client.put(
            "/api/products/bulk/stock",
            json={
                "updates": [
                    {"id": products["CAB-1"], "stock_quantity": 0},
                    {"id": products["PHN-A"], "stock_quantity": 7},
                ]
            },
        )

        assert response.status_code == 200
        cable = authenticated_client.get(f"/api/products/{products['CAB-1']}").json()
        assert cable["product"]["stock_quantity"] == 0
        assert cable["product"]["status"] == "out_of_stock"

    def test_bulk_update_requires_items(self, authenticated_client):
        response = authenticated_client.put(
            "/api/products/bulk/stock", json={"updates": []}
        )
        assert response.status_code == 400

    def test_bulk_update_unknown_product(self, authenticated_client, category_tree):
        response = authenticated_client.put(
            "/api/products/bulk/stock",
            json={"updates": [{"id": 999, "stock_quantity": 1}]},
        )
        assert response.status_code == 404
