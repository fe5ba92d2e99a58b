"""
Pytest configuration and fixtures for back-office tests.
"""

import os

# Settings are read at import time
os.environ.setdefault("SECRET_KEY", "test_secret_key_for_testing_only")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
import httpx
from datetime import datetime, timedelta
from typing import Generator
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from backoffice.core.database import Base, get_db
from backoffice.core.auth import create_user_token, hash_password
from backoffice.models.user import AdminUser
from backoffice.models.category import Category
from backoffice.models.product import Product
from backoffice.models.customer import Customer
from backoffice.models.order import Order, OrderItem
from backoffice.models.banner import Banner
from backoffice.services.dashboard_analytics import month_start, shift_months
from backoffice.client import api as client_api


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"
ADMIN_PASSWORD = "secret123"


@pytest.fixture(scope="function")
def db_engine():
    """Create a test database engine."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Create a test database session."""
    TestingSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=db_engine
    )
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def test_app(db_session):
    """Create a FastAPI test app without lifespan events."""
    from fastapi import FastAPI
    from backoffice.api.endpoints import (
        auth,
        categories,
        products,
        banners,
        customers,
        orders,
        analytics,
    )

    test_app = FastAPI(title="Back-Office - Test", version="1.0.0")

    test_app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
    test_app.include_router(
        categories.router, prefix="/api/categories", tags=["categories"]
    )
    test_app.include_router(products.router, prefix="/api/products", tags=["products"])
    test_app.include_router(banners.router, prefix="/api/banners", tags=["banners"])
    test_app.include_router(
        customers.router, prefix="/api/customers", tags=["customers"]
    )
    test_app.include_router(orders.router, prefix="/api/orders", tags=["orders"])
    test_app.include_router(
        analytics.router, prefix="/api/analytics", tags=["analytics"]
    )

    @test_app.get("/health")
    def health():
        return {"status": "ok"}

    # Override database dependency
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    test_app.dependency_overrides[get_db] = override_get_db

    return test_app


@pytest.fixture(scope="function")
def client(test_app) -> TestClient:
    """Create a test client without entering context manager."""
    return TestClient(test_app, raise_server_exceptions=False)


@pytest.fixture(scope="function")
def test_admin(db_session) -> AdminUser:
    """Create an admin account."""
    user = AdminUser(
        username="admin",
        email="admin@example.com",
        password_hash=hash_password(ADMIN_PASSWORD),
        role="admin",
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture(scope="function")
def test_viewer(db_session) -> AdminUser:
    """Create a non-admin (read-only) account."""
    user = AdminUser(
        username="viewer",
        email="viewer@example.com",
        password_hash=hash_password(ADMIN_PASSWORD),
        role="viewer",
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture(scope="function")
def auth_headers(test_admin) -> dict:
    """Create authentication headers for test requests."""
    return {"Authorization": f"Bearer {create_user_token(test_admin)}"}


@pytest.fixture(scope="function")
def authenticated_client(client, auth_headers) -> TestClient:
    """Create an authenticated admin test client."""
    client.headers.update(auth_headers)
    return client


@pytest.fixture(scope="function")
def viewer_client(test_app, test_viewer) -> TestClient:
    """Create a test client authenticated as a non-admin."""
    viewer = TestClient(test_app, raise_server_exceptions=False)
    viewer.headers.update(
        {"Authorization": f"Bearer {create_user_token(test_viewer)}"}
    )
    return viewer


@pytest.fixture(scope="function")
def category_tree(db_session) -> dict:
    """
    Two top-level categories and two subcategories:

    Electronics (1 active product)
      Phones (2 active, 1 inactive)
      Laptops (no products)
    Books (no products, no subcategories)
    """
    electronics = Category(name="Electronics", slug="electronics", sort_order=0)
    books = Category(name="Books", slug="books", description="Paper and ebooks", sort_order=1)
    db_session.add_all([electronics, books])
    db_session.commit()

    phones = Category(
        name="Phones", slug="phones", parent_id=electronics.id, sort_order=0
    )
    laptops = Category(
        name="Laptops", slug="laptops", parent_id=electronics.id, sort_order=1
    )
    db_session.add_all([phones, laptops])
    db_session.commit()

    db_session.add_all(
        [
            Product(name="Cable", sku="CAB-1", price=5, stock_quantity=50, category_id=electronics.id),
            Product(name="Phone A", sku="PHN-A", price=300, stock_quantity=20, category_id=phones.id),
            Product(name="Phone B", sku="PHN-B", price=400, stock_quantity=3, category_id=phones.id),
            Product(
                name="Phone Old",
                sku="PHN-OLD",
                price=100,
                stock_quantity=10,
                category_id=phones.id,
                is_active=False,
            ),
        ]
    )
    db_session.commit()

    return {
        "electronics": electronics,
        "books": books,
        "phones": phones,
        "laptops": laptops,
    }


@pytest.fixture(scope="function")
def api_transport(test_app):
    """Route the admin client's requests into the test app."""
    client_api.set_transport(httpx.ASGITransport(app=test_app))
    yield
    client_api.set_transport(None)
    client_api.remove_auth_token()


@pytest.fixture(autouse=True)
def reset_client_session():
    """Every test starts logged out."""
    client_api.remove_auth_token()
    yield
    client_api.remove_auth_token()


@pytest.fixture(scope="function")
def sales_data(db_session, category_tree) -> dict:
    """
    Four customers and three orders over the current and previous month.

    alice (2 orders, 635 spent)  -> ORD-1001 paid/delivered this month,
                                    ORD-1002 paid/shipped last month
    bob   (1 order, 400 spent)   -> ORD-1003 pending this month
    carol (inactive, no orders)
    dave  (imported totals: 5 orders, 1500 spent, no order rows)
    """
    now = datetime.utcnow()
    current = month_start(now)
    previous = shift_months(current, -1)
    elapsed = now - current

    alice = Customer(
        first_name="Alice", last_name="Archer", email="alice@example.com",
        phone="555-0101", total_orders=2, total_spent=635,
    )
    bob = Customer(
        first_name="Bob", last_name="Baker", email="bob@example.com",
        total_orders=1, total_spent=400,
    )
    carol = Customer(
        first_name="Carol", last_name="Cole", email="carol@example.com",
        is_active=False,
    )
    dave = Customer(
        first_name="Dave", last_name="Dunn", email="dave@example.com",
        total_orders=5, total_spent=1500,
    )
    db_session.add_all([alice, bob, carol, dave])
    db_session.commit()

    products = {
        p.sku: p
        for p in db_session.query(Product).filter(
            Product.sku.in_(["CAB-1", "PHN-A", "PHN-B"])
        )
    }

    def line(sku, quantity, unit_price):
        product = products[sku]
        return OrderItem(
            product_id=product.id,
            product_name=product.name,
            product_sku=sku,
            quantity=quantity,
            unit_price=unit_price,
            total_price=quantity * unit_price,
        )

    first = Order(
        order_number="ORD-1001", customer_id=alice.id,
        status="delivered", payment_status="paid",
        subtotal=605, total_amount=605,
        created_at=current + elapsed / 3,
        items=[line("PHN-A", 2, 300), line("CAB-1", 1, 5)],
    )
    second = Order(
        order_number="ORD-1002", customer_id=alice.id,
        status="shipped", payment_status="paid",
        subtotal=20, shipping_amount=10, total_amount=30,
        created_at=previous + timedelta(days=3),
        items=[line("CAB-1", 4, 5)],
    )
    third = Order(
        order_number="ORD-1003", customer_id=bob.id,
        status="pending", payment_status="pending",
        subtotal=400, total_amount=400,
        created_at=current + elapsed / 2,
        items=[line("PHN-B", 1, 400)],
    )
    db_session.add_all([first, second, third])
    db_session.commit()

    return {
        "now": now,
        "customers": {"alice": alice, "bob": bob, "carol": carol, "dave": dave},
        "orders": {"first": first, "second": second, "third": third},
        "products": products,
    }


@pytest.fixture(scope="function")
def banners(db_session) -> dict:
    """One banner in each display state; two of them live."""
    now = datetime.utcnow()
    records = {
        "hero": Banner(
            title="Hero", image_url="/img/hero.jpg", display_order=0,
            start_date=now - timedelta(days=1), end_date=now + timedelta(days=1),
        ),
        "sale": Banner(
            title="Summer Sale", image_url="/img/sale.jpg", display_order=1,
            text_overlay="Up to 50% off",
        ),
        "upcoming": Banner(
            title="Coming Soon", image_url="/img/soon.jpg", display_order=2,
            start_date=now + timedelta(days=2),
        ),
        "expired": Banner(
            title="Old Promo", image_url="/img/old.jpg", display_order=3,
            end_date=now - timedelta(days=2),
        ),
        "hidden": Banner(
            title="Hidden", image_url="/img/hidden.jpg", display_order=4,
            is_active=False,
        ),
    }
    db_session.add_all(records.values())
    db_session.commit()
    return records
