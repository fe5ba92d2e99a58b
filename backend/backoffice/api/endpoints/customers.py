from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import case, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from datetime import datetime
from typing import Optional
import logging
import math

from backoffice.core.database import get_db
from backoffice.core.auth import get_current_user, require_admin
from backoffice.core.logging_config import log_audit_event, get_client_ip
from backoffice.api.validation import (
    PageParam,
    PageLimitParam,
    validate_string_length,
    validate_status_filter,
)
from backoffice.models.customer import Customer, CustomerAddress
from backoffice.models.order import Order
from backoffice.models.user import AdminUser
from backoffice.schemas.customer import (
    CustomerCreate,
    CustomerUpdate,
    AddressCreate,
    CustomerListResponse,
    CustomerDetailResponse,
    CustomerMutationResponse,
    AddressMutationResponse,
    CustomerStatsResponse,
)
from backoffice.schemas.auth import MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter()

CUSTOMER_NOT_FOUND = "Customer not found"
DUPLICATE_EMAIL = "Email already exists"

# Lifetime spend above which a customer counts as VIP
VIP_SPEND_THRESHOLD = 1000
RECENT_ORDER_LIMIT = 10

CUSTOMER_FIELDS = [column.name for column in Customer.__table__.columns]
ADDRESS_FIELDS = [column.name for column in CustomerAddress.__table__.columns]

customer_status = case(
    (Customer.is_active == False, "inactive"),  # noqa: E712
    (Customer.total_spent > VIP_SPEND_THRESHOLD, "vip"),
    (Customer.total_orders <= 1, "new"),
    else_="active",
)

STATUS_FILTERS = {
    "active": [Customer.is_active == True],  # noqa: E712
    "inactive": [Customer.is_active == False],  # noqa: E712
    "vip": [Customer.total_spent > VIP_SPEND_THRESHOLD],
    "new": [Customer.total_orders <= 1],
}


def _to_record(customer: Customer, status: str) -> dict:
    record = {field: getattr(customer, field) for field in CUSTOMER_FIELDS}
    record["status"] = status
    return record


def _get_record(db: Session, customer_id: int):
    row = (
        db.query(Customer, customer_status)
        .filter(Customer.id == customer_id)
        .first()
    )
    return _to_record(*row) if row else None


def _get_customer_or_404(db: Session, customer_id: int) -> Customer:
    customer = db.query(Customer).filter(Customer.id == customer_id).first()
    if not customer:
        raise HTTPException(status_code=404, detail=CUSTOMER_NOT_FOUND)
    return customer


def _commit_or_conflict(db: Session):
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail=DUPLICATE_EMAIL)


@router.get("/", response_model=CustomerListResponse)
def get_customers(
    page: int = PageParam,
    limit: int = PageLimitParam,
    search: Optional[str] = None,
    status: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(get_current_user),
):
    """
    List customers, newest first, with pagination.

    ``search`` matches first name, last name, email or phone; ``status`` is
    one of active, inactive, vip or new.
    """
    validate_string_length(search, "search", max_length=200)
    validate_status_filter(status, STATUS_FILTERS.keys())

    query = db.query(Customer, customer_status)

    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(
                Customer.first_name.ilike(pattern),
                Customer.last_name.ilike(pattern),
                Customer.email.ilike(pattern),
                Customer.phone.ilike(pattern),
            )
        )

    if status:
        query = query.filter(*STATUS_FILTERS[status])

    total = query.count()
    rows = (
        query.order_by(Customer.created_at.desc(), Customer.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return {
        "customers": [_to_record(*row) for row in rows],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": math.ceil(total / limit),
        },
    }


@router.get("/stats/overview", response_model=CustomerStatsResponse)
def get_customer_stats(
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(get_current_user),
):
    now = datetime.utcnow()
    month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

    buyers = (
        db.query(Customer.total_spent, Customer.total_orders)
        .filter(Customer.total_orders > 0)
        .all()
    )
    averages = [float(spent or 0) / orders for spent, orders in buyers]

    stats = {
        "total": db.query(Customer).count(),
        "active": db.query(Customer).filter(*STATUS_FILTERS["active"]).count(),
        "inactive": db.query(Customer).filter(*STATUS_FILTERS["inactive"]).count(),
        "new_this_month": db.query(Customer)
        .filter(Customer.created_at >= month_start)
        .count(),
        "vip": db.query(Customer).filter(*STATUS_FILTERS["vip"]).count(),
        "avg_order_value": round(sum(averages) / len(averages), 2) if averages else 0,
    }
    return {"stats": stats}


@router.get("/{customer_id}", response_model=CustomerDetailResponse)
def get_customer(
    customer_id: int,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(get_current_user),
):
    """A customer with their latest orders and saved addresses."""
    customer = _get_record(db, customer_id)
    if customer is None:
        raise HTTPException(status_code=404, detail=CUSTOMER_NOT_FOUND)

    orders = (
        db.query(Order)
        .filter(Order.customer_id == customer_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .limit(RECENT_ORDER_LIMIT)
        .all()
    )
    addresses = (
        db.query(CustomerAddress)
        .filter(CustomerAddress.customer_id == customer_id)
        .order_by(CustomerAddress.id)
        .all()
    )

    customer["recent_orders"] = [
        {
            "id": order.id,
            "order_number": order.order_number,
            "status": order.status,
            "payment_status": order.payment_status,
            "total_amount": order.total_amount,
            "created_at": order.created_at,
        }
        for order in orders
    ]
    customer["addresses"] = [
        {field: getattr(address, field) for field in ADDRESS_FIELDS}
        for address in addresses
    ]
    return {"customer": customer}


@router.post("/", response_model=CustomerMutationResponse, status_code=201)
def create_customer(
    customer: CustomerCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_admin),
):
    db_customer = Customer(**customer.model_dump())
    db.add(db_customer)
    _commit_or_conflict(db)
    db.refresh(db_customer)

    log_audit_event(
        event_type="customer.created",
        message=f"Customer {db_customer.id} created",
        user_id=str(current_user.id),
        username=current_user.email,
        ip_address=get_client_ip(request),
        event_category="admin",
    )

    return {
        "message": "Customer created successfully",
        "customer": _get_record(db, db_customer.id),
    }


@router.put("/{customer_id}", response_model=CustomerMutationResponse)
def update_customer(
    customer_id: int,
    customer_update: CustomerUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_admin),
):
    customer = _get_customer_or_404(db, customer_id)
    update_data = customer_update.model_dump(exclude_unset=True)

    for key, value in update_data.items():
        setattr(customer, key, value)

    _commit_or_conflict(db)

    log_audit_event(
        event_type="customer.updated",
        message=f"Customer {customer_id} updated",
        user_id=str(current_user.id),
        username=current_user.email,
        ip_address=get_client_ip(request),
        event_category="admin",
        fields=sorted(update_data.keys()),
    )

    return {
        "message": "Customer updated successfully",
        "customer": _get_record(db, customer_id),
    }


@router.delete("/{customer_id}", response_model=MessageResponse)
def delete_customer(
    customer_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_admin),
):
    """Delete a customer. Refused while they have orders."""
    order_count = db.query(Order).filter(Order.customer_id == customer_id).count()
    if order_count > 0:
        raise HTTPException(
            status_code=400,
            detail="Cannot delete customer with existing orders. Consider deactivating instead.",
        )

    customer = _get_customer_or_404(db, customer_id)
    db.delete(customer)
    db.commit()

    log_audit_event(
        event_type="customer.deleted",
        message=f"Customer {customer_id} deleted",
        user_id=str(current_user.id),
        username=current_user.email,
        ip_address=get_client_ip(request),
        event_category="admin",
    )

    return {"message": "Customer deleted successfully"}


@router.post(
    "/{customer_id}/addresses", response_model=AddressMutationResponse, status_code=201
)
def add_customer_address(
    customer_id: int,
    address: AddressCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_admin),
):
    """Attach an address. A new default replaces the previous default of the same type."""
    _get_customer_or_404(db, customer_id)

    if address.is_default:
        db.query(CustomerAddress).filter(
            CustomerAddress.customer_id == customer_id,
            CustomerAddress.type == address.type,
        ).update({CustomerAddress.is_default: False})

    db_address = CustomerAddress(customer_id=customer_id, **address.model_dump())
    db.add(db_address)
    db.commit()
    db.refresh(db_address)

    log_audit_event(
        event_type="customer.address.created",
        message=f"Address added for customer {customer_id}",
        user_id=str(current_user.id),
        username=current_user.email,
        ip_address=get_client_ip(request),
        event_category="admin",
    )

    return {
        "message": "Address added successfully",
        "address": {field: getattr(db_address, field) for field in ADDRESS_FIELDS},
    }
