from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import func, or_
from sqlalchemy.orm import Session
from datetime import datetime
from decimal import Decimal
from typing import Optional
import logging
import math
import uuid

from backoffice.core.database import get_db
from backoffice.core.auth import get_current_user, require_admin
from backoffice.core.logging_config import log_audit_event, get_client_ip
from backoffice.api.validation import (
    PageParam,
    PageLimitParam,
    validate_string_length,
    validate_status_filter,
)
from backoffice.models.customer import Customer
from backoffice.models.order import Order, OrderItem, ORDER_STATUSES, PAYMENT_STATUSES
from backoffice.models.product import Product
from backoffice.models.user import AdminUser
from backoffice.schemas.order import (
    OrderCreate,
    OrderStatusUpdate,
    OrderListResponse,
    OrderDetailResponse,
    OrderMutationResponse,
    OrderStatsResponse,
)
from backoffice.schemas.auth import MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter()

ORDER_NOT_FOUND = "Order not found"
CENTS = Decimal("0.01")

ORDER_FIELDS = [column.name for column in Order.__table__.columns]
ITEM_FIELDS = [column.name for column in OrderItem.__table__.columns]


def _money(value) -> Decimal:
    return Decimal(str(value or 0)).quantize(CENTS)


def _generate_order_number() -> str:
    return f"ORD-{uuid.uuid4().hex[:8].upper()}"


def _order_query(db: Session):
    item_counts = (
        db.query(OrderItem.order_id, func.count(OrderItem.id).label("item_count"))
        .group_by(OrderItem.order_id)
        .subquery()
    )
    return (
        db.query(
            Order,
            Customer.first_name,
            Customer.last_name,
            Customer.email,
            Customer.phone,
            func.coalesce(item_counts.c.item_count, 0),
        )
        .outerjoin(Customer, Order.customer_id == Customer.id)
        .outerjoin(item_counts, item_counts.c.order_id == Order.id)
    )


def _to_record(order, first_name, last_name, email, phone, item_count) -> dict:
    record = {field: getattr(order, field) for field in ORDER_FIELDS}
    record.update(
        {
            "customer_name": f"{first_name} {last_name}" if first_name else None,
            "customer_email": email,
            "customer_phone": phone,
            "item_count": item_count,
        }
    )
    return record


def _get_detail(db: Session, order_id: int):
    row = _order_query(db).filter(Order.id == order_id).first()
    if not row:
        return None

    order = _to_record(*row)
    items = (
        db.query(OrderItem, Product.image_url)
        .outerjoin(Product, OrderItem.product_id == Product.id)
        .filter(OrderItem.order_id == order_id)
        .order_by(OrderItem.id)
        .all()
    )
    order["items"] = [
        {**{field: getattr(item, field) for field in ITEM_FIELDS}, "product_image": image}
        for item, image in items
    ]
    return order


def _get_order_or_404(db: Session, order_id: int) -> Order:
    order = db.query(Order).filter(Order.id == order_id).first()
    if not order:
        raise HTTPException(status_code=404, detail=ORDER_NOT_FOUND)
    return order


@router.get("/", response_model=OrderListResponse)
def get_orders(
    page: int = PageParam,
    limit: int = PageLimitParam,
    search: Optional[str] = None,
    status: Optional[str] = None,
    payment_status: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(get_current_user),
):
    """
    List orders, newest first, with customer name and item count.

    ``search`` matches the order number or the customer's name or email.
    ``status`` and ``payment_status`` filter exactly; ``all`` disables them.
    """
    validate_string_length(search, "search", max_length=200)
    if status == "all":
        status = None
    if payment_status == "all":
        payment_status = None
    validate_status_filter(status, ORDER_STATUSES)
    validate_status_filter(payment_status, PAYMENT_STATUSES, "payment_status")

    query = _order_query(db)

    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(
                Order.order_number.ilike(pattern),
                Customer.first_name.ilike(pattern),
                Customer.last_name.ilike(pattern),
                Customer.email.ilike(pattern),
            )
        )

    if status:
        query = query.filter(Order.status == status)
    if payment_status:
        query = query.filter(Order.payment_status == payment_status)

    total = query.count()
    rows = (
        query.order_by(Order.created_at.desc(), Order.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return {
        "orders": [_to_record(*row) for row in rows],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": math.ceil(total / limit),
        },
    }


@router.get("/stats/overview", response_model=OrderStatsResponse)
def get_order_stats(
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(get_current_user),
):
    counts = dict(
        db.query(Order.status, func.count(Order.id)).group_by(Order.status).all()
    )
    revenue = (
        db.query(func.coalesce(func.sum(Order.total_amount), 0))
        .filter(Order.payment_status == "paid")
        .scalar()
    )

    stats = {status: counts.get(status, 0) for status in ORDER_STATUSES}
    stats["total"] = sum(counts.values())
    stats["revenue"] = float(revenue or 0)
    return {"stats": stats}


@router.get("/{order_id}", response_model=OrderDetailResponse)
def get_order(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(get_current_user),
):
    order = _get_detail(db, order_id)
    if order is None:
        raise HTTPException(status_code=404, detail=ORDER_NOT_FOUND)
    return {"order": order}


@router.post("/", response_model=OrderMutationResponse, status_code=201)
def create_order(
    payload: OrderCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_admin),
):
    """
    Create a pending order for a customer.

    Line items default to the product's current price, name and SKU. The
    total is subtotal plus tax and shipping minus discount, and is added to
    the customer's running totals.
    """
    customer = db.query(Customer).filter(Customer.id == payload.customer_id).first()
    if not customer:
        raise HTTPException(status_code=400, detail="Customer not found")

    product_ids = {item.product_id for item in payload.items}
    products = {
        p.id: p for p in db.query(Product).filter(Product.id.in_(product_ids)).all()
    }
    missing = sorted(product_id for product_id in product_ids if product_id not in products)
    if missing:
        raise HTTPException(status_code=400, detail=f"Products not found: {missing}")

    items = []
    subtotal = Decimal("0")
    for item in payload.items:
        product = products[item.product_id]
        unit_price = _money(item.unit_price if item.unit_price is not None else product.price)
        line_total = (unit_price * item.quantity).quantize(CENTS)
        subtotal += line_total
        items.append(
            OrderItem(
                product_id=product.id,
                product_name=item.product_name or product.name,
                product_sku=item.product_sku or product.sku,
                quantity=item.quantity,
                unit_price=unit_price,
                total_price=line_total,
            )
        )

    tax_amount = _money(payload.tax_amount)
    shipping_amount = _money(payload.shipping_amount)
    discount_amount = _money(payload.discount_amount)
    total_amount = subtotal + tax_amount + shipping_amount - discount_amount
    if total_amount < 0:
        raise HTTPException(status_code=400, detail="Discount exceeds order total")

    now = datetime.utcnow()
    order = Order(
        order_number=_generate_order_number(),
        customer_id=customer.id,
        status="pending",
        payment_status="pending",
        payment_method=payload.payment_method,
        subtotal=subtotal,
        tax_amount=tax_amount,
        shipping_amount=shipping_amount,
        discount_amount=discount_amount,
        total_amount=total_amount,
        notes=payload.notes,
        shipping_address=payload.shipping_address,
        billing_address=payload.billing_address,
        items=items,
    )
    db.add(order)

    customer.total_orders = (customer.total_orders or 0) + 1
    customer.total_spent = _money(customer.total_spent) + total_amount
    customer.last_order_date = now

    db.commit()
    db.refresh(order)

    log_audit_event(
        event_type="order.created",
        message=f"Order {order.order_number} created",
        user_id=str(current_user.id),
        username=current_user.email,
        ip_address=get_client_ip(request),
        event_category="admin",
        order_id=order.id,
        total_amount=str(total_amount),
    )

    return {"message": "Order created successfully", "order": _get_detail(db, order.id)}


@router.put("/{order_id}/status", response_model=OrderMutationResponse)
def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_admin),
):
    """
    Update fulfilment and payment state.

    Moving to ``shipped`` or ``delivered`` stamps ``shipped_at`` or
    ``delivered_at``.
    """
    update_data = {
        key: value
        for key, value in payload.model_dump(exclude_unset=True).items()
        if value
    }
    if not update_data:
        raise HTTPException(status_code=400, detail="No fields to update")

    order = _get_order_or_404(db, order_id)

    for key, value in update_data.items():
        setattr(order, key, value)

    if update_data.get("status") == "shipped":
        order.shipped_at = datetime.utcnow()
    elif update_data.get("status") == "delivered":
        order.delivered_at = datetime.utcnow()

    db.commit()

    log_audit_event(
        event_type="order.status.updated",
        message=f"Order {order_id} updated",
        user_id=str(current_user.id),
        username=current_user.email,
        ip_address=get_client_ip(request),
        event_category="admin",
        fields=sorted(update_data.keys()),
    )

    return {"message": "Order updated successfully", "order": _get_detail(db, order_id)}


@router.delete("/{order_id}", response_model=MessageResponse)
def delete_order(
    order_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_admin),
):
    """Delete an order and its items, and take it off the customer's totals."""
    order = _get_order_or_404(db, order_id)

    customer = order.customer
    if customer is not None:
        customer.total_orders = max((customer.total_orders or 0) - 1, 0)
        customer.total_spent = max(
            _money(customer.total_spent) - _money(order.total_amount), Decimal("0")
        )

    db.delete(order)
    db.commit()

    log_audit_event(
        event_type="order.deleted",
        message=f"Order {order_id} deleted",
        user_id=str(current_user.id),
        username=current_user.email,
        ip_address=get_client_ip(request),
        event_category="admin",
    )

    return {"message": "Order deleted successfully"}
