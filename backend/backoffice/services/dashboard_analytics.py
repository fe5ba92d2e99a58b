"""
Dashboard analytics - store-wide figures for the admin overview page.

All timestamps are naive UTC, matching what the models store. Monthly series
cover a fixed window of calendar months ending with the current one; months
without activity are reported as zero.
"""

import calendar
import logging
from collections import Counter, defaultdict
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from backoffice.models.customer import Customer
from backoffice.models.order import Order, OrderItem
from backoffice.models.product import Product

logger = logging.getLogger(__name__)


def month_start(moment: datetime) -> datetime:
    return moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def shift_months(start: datetime, months: int) -> datetime:
    """Move a first-of-month timestamp by ``months`` (negative goes back)."""
    index = start.year * 12 + (start.month - 1) + months
    return start.replace(year=index // 12, month=index % 12 + 1)


def growth_rate(current: float, previous: float) -> float:
    """Percentage change, rounded to one decimal. 0 when there is no baseline."""
    if not previous:
        return 0.0
    return round((current - previous) / previous * 100, 1)


def time_ago(moment: datetime, now: Optional[datetime] = None) -> str:
    """Coarse relative time, e.g. ``"5 minutes ago"``."""
    now = now or datetime.utcnow()
    seconds = max(int((now - moment).total_seconds()), 0)

    if seconds < 60:
        return f"{seconds} seconds ago"
    if seconds < 3600:
        return f"{seconds // 60} minutes ago"
    if seconds < 86400:
        return f"{seconds // 3600} hours ago"
    return f"{seconds // 86400} days ago"


class DashboardAnalytics:
    """Read-only aggregate queries over orders, products and customers."""

    def __init__(self, db: Session, now: Optional[datetime] = None):
        self.db = db
        self.now = now or datetime.utcnow()

    def _month_window(self, months: int) -> List[datetime]:
        current = month_start(self.now)
        return [shift_months(current, offset) for offset in range(1 - months, 1)]

    @staticmethod
    def _month_key(moment: datetime) -> Tuple[int, int]:
        return moment.year, moment.month

    def overview(self) -> Dict[str, float]:
        """Headline numbers plus month-over-month growth."""
        current = month_start(self.now)
        previous = shift_months(current, -1)

        paid_orders = self.db.query(Order).filter(Order.payment_status == "paid")

        total_revenue = (
            self.db.query(func.coalesce(func.sum(Order.total_amount), 0))
            .filter(Order.payment_status == "paid")
            .scalar()
        )

        revenue_by_month = defaultdict(float)
        for created_at, amount in (
            paid_orders.filter(Order.created_at >= previous)
            .with_entities(Order.created_at, Order.total_amount)
            .all()
        ):
            revenue_by_month[created_at >= current] += float(amount or 0)

        orders_this_month = (
            self.db.query(Order).filter(Order.created_at >= current).count()
        )
        orders_last_month = (
            self.db.query(Order)
            .filter(Order.created_at >= previous, Order.created_at < current)
            .count()
        )

        return {
            "total_revenue": float(total_revenue or 0),
            "total_orders": self.db.query(Order).count(),
            "total_products": self.db.query(Product)
            .filter(Product.is_active == True)  # noqa: E712
            .count(),
            "total_customers": self.db.query(Customer)
            .filter(Customer.is_active == True)  # noqa: E712
            .count(),
            "revenue_growth": growth_rate(
                revenue_by_month[True], revenue_by_month[False]
            ),
            "orders_growth": growth_rate(orders_this_month, orders_last_month),
            "low_stock_products": self.db.query(Product)
            .filter(
                Product.is_active == True,  # noqa: E712
                Product.stock_quantity <= Product.low_stock_threshold,
            )
            .count(),
            "pending_orders": self.db.query(Order)
            .filter(Order.status == "pending")
            .count(),
        }

    def revenue_chart(self, months: int = 6) -> List[Dict]:
        """Paid revenue and order count per calendar month."""
        window = self._month_window(months)
        rows = (
            self.db.query(Order.created_at, Order.total_amount)
            .filter(Order.payment_status == "paid", Order.created_at >= window[0])
            .all()
        )

        revenue = defaultdict(float)
        orders = Counter()
        for created_at, amount in rows:
            key = self._month_key(created_at)
            revenue[key] += float(amount or 0)
            orders[key] += 1

        return [
            {
                "month": calendar.month_abbr[start.month],
                "revenue": round(revenue[self._month_key(start)], 2),
                "orders": orders[self._month_key(start)],
            }
            for start in window
        ]

    def top_products(self, limit: int = 10) -> List[Dict]:
        """
        Best sellers by units sold across paid orders.

        ``percentage`` is relative to the top seller.
        """
        units = func.sum(OrderItem.quantity)
        rows = (
            self.db.query(
                Product.id,
                Product.name,
                Product.image_url,
                units,
                func.sum(OrderItem.total_price),
                func.count(func.distinct(OrderItem.order_id)),
            )
            .select_from(OrderItem)
            .join(Product, OrderItem.product_id == Product.id)
            .join(Order, OrderItem.order_id == Order.id)
            .filter(Order.payment_status == "paid")
            .group_by(Product.id, Product.name, Product.image_url)
            .order_by(units.desc(), Product.id.asc())
            .limit(limit)
            .all()
        )

        top_sold = rows[0][3] if rows else 1
        return [
            {
                "product_id": product_id,
                "name": name,
                "image_url": image_url,
                "total_sold": int(total_sold),
                "revenue": float(revenue or 0),
                "order_count": order_count,
                "percentage": round(total_sold / top_sold * 100),
            }
            for product_id, name, image_url, total_sold, revenue, order_count in rows
        ]

    def recent_orders(self, limit: int = 5) -> List[Dict]:
        rows = (
            self.db.query(Order, Customer.first_name, Customer.last_name)
            .outerjoin(Customer, Order.customer_id == Customer.id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .limit(limit)
            .all()
        )
        return [
            {
                "id": order.id,
                "order_number": order.order_number,
                "status": order.status,
                "total_amount": float(order.total_amount or 0),
                "customer_name": f"{first_name} {last_name}" if first_name else None,
                "created_at": order.created_at,
                "time_ago": time_ago(order.created_at, self.now),
            }
            for order, first_name, last_name in rows
        ]

    def order_status_distribution(self) -> List[Dict]:
        counts = (
            self.db.query(Order.status, func.count(Order.id))
            .group_by(Order.status)
            .all()
        )
        total = sum(count for _, count in counts)
        distribution = [
            {
                "status": status,
                "count": count,
                "percentage": round(count * 100 / total, 1),
            }
            for status, count in counts
        ]
        distribution.sort(key=lambda entry: (-entry["count"], entry["status"]))
        return distribution

    def customer_growth(self, months: int = 12) -> List[Dict]:
        """New customer sign-ups per calendar month."""
        window = self._month_window(months)
        signups = Counter(
            self._month_key(created_at)
            for (created_at,) in self.db.query(Customer.created_at)
            .filter(Customer.created_at >= window[0])
            .all()
        )
        return [
            {
                "month": calendar.month_abbr[start.month],
                "customers": signups[self._month_key(start)],
            }
            for start in window
        ]
