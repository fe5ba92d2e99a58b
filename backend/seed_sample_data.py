#!/usr/bin/env python3
"""
Script to seed the back-office database with a default admin account and a
small two-level category tree with products, a few customers with orders,
and homepage banners.

Usage: python3 seed_sample_data.py
"""

import logging
import sys

from backoffice.core.config import settings
from backoffice.core.database import Base, SessionLocal, engine
from backoffice.core.auth import hash_password
from backoffice.models import (
    AdminUser,
    Banner,
    Category,
    Customer,
    Order,
    OrderItem,
    Product,
)

logger = logging.getLogger("seed")

SAMPLE_CATEGORIES = [
    {
        "name": "Electronics",
        "slug": "electronics",
        "description": "Gadgets and devices",
        "subcategories": [
            {"name": "Phones", "slug": "phones", "description": "Smartphones"},
            {"name": "Laptops", "slug": "laptops", "description": "Portable computers"},
        ],
    },
    {
        "name": "Clothing",
        "slug": "clothing",
        "description": "Apparel for everyone",
        "subcategories": [
            {"name": "Shirts", "slug": "shirts", "description": "Casual and formal"},
        ],
    },
]

SAMPLE_PRODUCTS = [
    {"name": "Phone X", "sku": "PHN-001", "price": 699, "stock_quantity": 25, "category": "phones"},
    {"name": "Phone Mini", "sku": "PHN-002", "price": 499, "stock_quantity": 4, "category": "phones"},
    {"name": "Ultrabook 13", "sku": "LAP-001", "price": 1299, "stock_quantity": 8, "category": "laptops"},
    {"name": "USB-C Cable", "sku": "ELC-001", "price": 12, "stock_quantity": 200, "category": "electronics"},
    {"name": "Oxford Shirt", "sku": "SHR-001", "price": 45, "stock_quantity": 0, "category": "shirts"},
]

SAMPLE_CUSTOMERS = [
    {"first_name": "Jane", "last_name": "Smith", "email": "jane@example.com", "phone": "555-0100"},
    {"first_name": "Omar", "last_name": "Haddad", "email": "omar@example.com"},
]

# (customer email, status, payment status, [(sku, quantity)])
SAMPLE_ORDERS = [
    ("jane@example.com", "delivered", "paid", [("PHN-001", 1), ("ELC-001", 2)]),
    ("jane@example.com", "processing", "paid", [("LAP-001", 1)]),
    ("omar@example.com", "pending", "pending", [("SHR-001", 3)]),
]

SAMPLE_BANNERS = [
    {"title": "Spring Collection", "image_url": "/images/banners/spring.jpg", "text_overlay": "New arrivals", "display_order": 0},
    {"title": "Free Shipping", "image_url": "/images/banners/shipping.jpg", "link_url": "/shipping", "link_text": "Learn more", "display_order": 1},
]


def seed_admin(db):
    admin = db.query(AdminUser).filter(AdminUser.email == settings.DEFAULT_ADMIN_EMAIL).first()
    if admin:
        logger.info(f"Admin {admin.email} already exists")
        return admin

    admin = AdminUser(
        username=settings.DEFAULT_ADMIN_USERNAME,
        email=settings.DEFAULT_ADMIN_EMAIL,
        password_hash=hash_password(settings.DEFAULT_ADMIN_PASSWORD),
        role="admin",
    )
    db.add(admin)
    db.commit()
    logger.info(f"Created admin {admin.email}")
    return admin


def seed_catalog(db):
    if db.query(Category).count() > 0:
        logger.info("Categories already present, skipping catalog")
        return

    by_slug = {}
    for order, entry in enumerate(SAMPLE_CATEGORIES):
        parent = Category(
            name=entry["name"],
            slug=entry["slug"],
            description=entry["description"],
            sort_order=order,
        )
        db.add(parent)
        db.flush()
        by_slug[parent.slug] = parent

        for sub_order, sub in enumerate(entry["subcategories"]):
            child = Category(parent_id=parent.id, sort_order=sub_order, **sub)
            db.add(child)
            db.flush()
            by_slug[child.slug] = child

    for item in SAMPLE_PRODUCTS:
        data = dict(item)
        category = by_slug[data.pop("category")]
        db.add(Product(category_id=category.id, **data))

    db.commit()
    logger.info(
        f"Created {len(by_slug)} categories and {len(SAMPLE_PRODUCTS)} products"
    )


def seed_sales(db):
    if db.query(Customer).count() > 0:
        logger.info("Customers already present, skipping sales")
        return

    customers = {}
    for data in SAMPLE_CUSTOMERS:
        customer = Customer(**data)
        db.add(customer)
        customers[customer.email] = customer
    db.flush()

    products = {p.sku: p for p in db.query(Product).all()}
    for number, (email, status, payment_status, lines) in enumerate(SAMPLE_ORDERS, start=1):
        customer = customers[email]
        items = [
            OrderItem(
                product_id=products[sku].id,
                product_name=products[sku].name,
                product_sku=sku,
                quantity=quantity,
                unit_price=products[sku].price,
                total_price=products[sku].price * quantity,
            )
            for sku, quantity in lines
        ]
        total = sum(item.total_price for item in items)
        db.add(
            Order(
                order_number=f"ORD-{number:06d}",
                customer_id=customer.id,
                status=status,
                payment_status=payment_status,
                subtotal=total,
                total_amount=total,
                items=items,
            )
        )
        customer.total_orders = (customer.total_orders or 0) + 1
        customer.total_spent = (customer.total_spent or 0) + total

    db.commit()
    logger.info(
        f"Created {len(SAMPLE_CUSTOMERS)} customers and {len(SAMPLE_ORDERS)} orders"
    )


def seed_banners(db):
    if db.query(Banner).count() > 0:
        logger.info("Banners already present, skipping")
        return

    db.add_all(Banner(**data) for data in SAMPLE_BANNERS)
    db.commit()
    logger.info(f"Created {len(SAMPLE_BANNERS)} banners")


def main():
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        seed_admin(db)
        seed_catalog(db)
        seed_sales(db)
        seed_banners(db)
    except Exception:
        db.rollback()
        logger.exception("Seeding failed")
        return 1
    finally:
        db.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
