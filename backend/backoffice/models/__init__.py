from .user import AdminUser
from .category import Category
from .product import Product
from .customer import Customer, CustomerAddress
from .order import Order, OrderItem
from .banner import Banner

__all__ = [
    "AdminUser",
    "Category",
    "Product",
    "Customer",
    "CustomerAddress",
    "Order",
    "OrderItem",
    "Banner",
]
