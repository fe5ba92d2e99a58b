from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy import case, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, aliased
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
from backoffice.models.category import Category
from backoffice.models.product import Product
from backoffice.models.order import OrderItem
from backoffice.models.user import AdminUser
from backoffice.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductListResponse,
    ProductDetailResponse,
    ProductMutationResponse,
    BulkStockUpdateRequest,
)
from backoffice.schemas.auth import MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter()

PRODUCT_NOT_FOUND = "Product not found"
DUPLICATE_SKU = "SKU already exists"

PRODUCT_FIELDS = [column.name for column in Product.__table__.columns]

# Stock problems take precedence over the active flag
product_status = case(
    (Product.stock_quantity == 0, "out_of_stock"),
    (Product.stock_quantity <= Product.low_stock_threshold, "low_stock"),
    (Product.is_active == True, "active"),  # noqa: E712
    else_="inactive",
)

STATUS_FILTERS = {
    "active": [Product.is_active == True, Product.stock_quantity > 0],  # noqa: E712
    "out_of_stock": [Product.stock_quantity == 0],
    "low_stock": [
        Product.stock_quantity > 0,
        Product.stock_quantity <= Product.low_stock_threshold,
    ],
    "inactive": [Product.is_active == False],  # noqa: E712
}


def _product_query(db: Session):
    category = aliased(Category)
    parent_category = aliased(Category)
    query = (
        db.query(
            Product,
            category.name,
            parent_category.name,
            category.parent_id,
            product_status,
        )
        .outerjoin(category, Product.category_id == category.id)
        .outerjoin(parent_category, category.parent_id == parent_category.id)
    )
    return query, category


def _to_record(product, category_name, parent_category_name, category_parent_id, status):
    record = {field: getattr(product, field) for field in PRODUCT_FIELDS}
    record.update(
        {
            "category_name": category_name,
            "parent_category_name": parent_category_name,
            "category_parent_id": category_parent_id,
            "status": status,
        }
    )
    return record


def _get_record(db: Session, product_id: int):
    query, _ = _product_query(db)
    row = query.filter(Product.id == product_id).first()
    return _to_record(*row) if row else None


def _ensure_category_exists(db: Session, category_id):
    if category_id is None:
        return
    if not db.query(Category.id).filter(Category.id == category_id).first():
        raise HTTPException(status_code=400, detail="Category not found")


@router.get("/", response_model=ProductListResponse)
def get_products(
    page: int = PageParam,
    limit: int = PageLimitParam,
    search: Optional[str] = None,
    category: Optional[str] = None,
    status: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(get_current_user),
):
    """
    List products, newest first, with pagination.

    ``search`` matches name, SKU or description; ``category`` filters on the
    category name (``all`` disables the filter); ``status`` filters on the
    derived stock status.
    """
    validate_string_length(search, "search", max_length=200)
    validate_status_filter(status, STATUS_FILTERS.keys())

    query, category_alias = _product_query(db)

    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(
                Product.name.ilike(pattern),
                Product.sku.ilike(pattern),
                Product.description.ilike(pattern),
            )
        )

    if category and category != "all":
        query = query.filter(category_alias.name == category)

    if status:
        query = query.filter(*STATUS_FILTERS[status])

    total = query.count()
    rows = (
        query.order_by(Product.created_at.desc(), Product.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return {
        "products": [_to_record(*row) for row in rows],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": math.ceil(total / limit),
        },
    }


@router.put("/bulk/stock", response_model=MessageResponse)
def bulk_update_stock(
    payload: BulkStockUpdateRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_admin),
):
    """Set stock quantities for several products in one commit."""
    if not payload.updates:
        raise HTTPException(status_code=400, detail="Updates array is required")

    ids = [update.id for update in payload.updates]
    products = {p.id: p for p in db.query(Product).filter(Product.id.in_(ids)).all()}

    missing = [product_id for product_id in ids if product_id not in products]
    if missing:
        raise HTTPException(status_code=404, detail=f"Products not found: {missing}")

    for update in payload.updates:
        products[update.id].stock_quantity = update.stock_quantity

    db.commit()

    log_audit_event(
        event_type="product.stock.bulk_updated",
        message=f"Stock updated for {len(ids)} products",
        user_id=str(current_user.id),
        username=current_user.email,
        ip_address=get_client_ip(request),
        event_category="admin",
    )
    return {"message": "Stock updated successfully"}


@router.get("/{product_id}", response_model=ProductDetailResponse)
def get_product(
    product_id: int,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(get_current_user),
):
    product = _get_record(db, product_id)
    if product is None:
        raise HTTPException(status_code=404, detail=PRODUCT_NOT_FOUND)
    return {"product": product}


@router.post("/", response_model=ProductMutationResponse, status_code=201)
def create_product(
    product: ProductCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_admin),
):
    _ensure_category_exists(db, product.category_id)

    db_product = Product(**product.model_dump())
    db.add(db_product)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail=DUPLICATE_SKU)
    db.refresh(db_product)

    log_audit_event(
        event_type="product.created",
        message=f"Product '{db_product.sku}' created",
        user_id=str(current_user.id),
        username=current_user.email,
        ip_address=get_client_ip(request),
        event_category="admin",
        product_id=db_product.id,
    )

    return {
        "message": "Product created successfully",
        "product": _get_record(db, db_product.id),
    }


@router.put("/{product_id}", response_model=ProductMutationResponse)
def update_product(
    product_id: int,
    product_update: ProductUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_admin),
):
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail=PRODUCT_NOT_FOUND)

    update_data = product_update.model_dump(exclude_unset=True)
    _ensure_category_exists(db, update_data.get("category_id"))

    for key, value in update_data.items():
        setattr(product, key, value)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail=DUPLICATE_SKU)

    log_audit_event(
        event_type="product.updated",
        message=f"Product {product_id} updated",
        user_id=str(current_user.id),
        username=current_user.email,
        ip_address=get_client_ip(request),
        event_category="admin",
        fields=sorted(update_data.keys()),
    )

    return {
        "message": "Product updated successfully",
        "product": _get_record(db, product_id),
    }


@router.delete("/{product_id}", response_model=MessageResponse)
def delete_product(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_admin),
):
    """Delete a product. Refused while order lines reference it."""
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail=PRODUCT_NOT_FOUND)

    if db.query(OrderItem).filter(OrderItem.product_id == product_id).count() > 0:
        raise HTTPException(
            status_code=400,
            detail="Cannot delete product with existing orders. Consider deactivating instead.",
        )

    db.delete(product)
    db.commit()

    log_audit_event(
        event_type="product.deleted",
        message=f"Product {product_id} deleted",
        user_id=str(current_user.id),
        username=current_user.email,
        ip_address=get_client_ip(request),
        event_category="admin",
    )

    return {"message": "Product deleted successfully"}
