from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from slugify import slugify
import logging

from backoffice.core.database import get_db
from backoffice.core.auth import get_current_user, require_admin
from backoffice.core.logging_config import log_audit_event, get_client_ip
from backoffice.models.category import Category
from backoffice.models.product import Product
from backoffice.models.user import AdminUser
from backoffice.services.category_store import CategoryStore
from backoffice.schemas.category import (
    CategoryCreate,
    CategoryUpdate,
    CategoryListResponse,
    CategoryDetailResponse,
    SubcategoryListResponse,
    CategoryMutationResponse,
    CategoryReorderRequest,
)
from backoffice.schemas.auth import MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter()

CATEGORY_NOT_FOUND = "Category not found"
DUPLICATE_CATEGORY = "Category name or slug already exists"


def _ensure_parent_exists(db: Session, parent_id):
    if parent_id is None:
        return
    exists = db.query(Category.id).filter(Category.id == parent_id).first()
    if not exists:
        raise HTTPException(status_code=400, detail="Parent category not found")


def _ensure_not_descendant(db: Session, category_id: int, parent_id):
    """Reject a new parent that sits anywhere below ``category_id``."""
    seen = set()
    current = parent_id
    while current is not None and current not in seen:
        if current == category_id:
            raise HTTPException(
                status_code=400,
                detail="Category cannot be moved under its own subcategory",
            )
        seen.add(current)
        row = db.query(Category.parent_id).filter(Category.id == current).first()
        current = row.parent_id if row else None


def _commit_or_conflict(db: Session):
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail=DUPLICATE_CATEGORY)


@router.get(
    "/", response_model=CategoryListResponse, response_model_exclude_unset=True
)
def get_categories(
    include_subcategories: bool = True,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(get_current_user),
):
    """
    List categories.

    With ``include_subcategories`` (the default) the response holds the
    top-level categories with their subcategories nested, plus every category
    as a flat list. Without it, only top-level categories are returned.
    """
    store = CategoryStore(db)

    if include_subcategories:
        roots, flat = store.list_tree()
        return {"categories": roots, "flat_categories": flat}

    return {"categories": store.list_top_level()}


@router.put("/reorder", response_model=MessageResponse)
def reorder_categories(
    payload: CategoryReorderRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_admin),
):
    """Apply new sort_order values; either all of them are saved or none."""
    if not payload.categories:
        raise HTTPException(status_code=400, detail="Categories array is required")

    ids = [item.id for item in payload.categories]
    categories = db.query(Category).filter(Category.id.in_(ids)).all()
    category_map = {category.id: category for category in categories}

    missing = [category_id for category_id in ids if category_id not in category_map]
    if missing:
        raise HTTPException(
            status_code=404, detail=f"Categories not found: {missing}"
        )

    for item in payload.categories:
        category_map[item.id].sort_order = item.sort_order

    db.commit()

    log_audit_event(
        event_type="category.reordered",
        message=f"Reordered {len(ids)} categories",
        user_id=str(current_user.id),
        username=current_user.email,
        ip_address=get_client_ip(request),
        event_category="admin",
    )
    return {"message": "Categories reordered successfully"}


@router.get("/{category_id}/subcategories", response_model=SubcategoryListResponse)
def get_subcategories(
    category_id: int,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(get_current_user),
):
    """Direct subcategories of a category, with their product counts."""
    return {"subcategories": CategoryStore(db).list_subcategories(category_id)}


@router.get("/{category_id}", response_model=CategoryDetailResponse)
def get_category(
    category_id: int,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(get_current_user),
):
    category = CategoryStore(db).get_detail(category_id)
    if category is None:
        raise HTTPException(status_code=404, detail=CATEGORY_NOT_FOUND)
    return {"category": category}


@router.post("/", response_model=CategoryMutationResponse, status_code=201)
def create_category(
    category: CategoryCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_admin),
):
    """
    Create a category.

    The slug is derived from the name when not supplied. A ``parent_id``
    makes the new category a subcategory of an existing one.
    """
    data = category.model_dump()
    data["slug"] = data.get("slug") or slugify(category.name)
    if not data["slug"]:
        raise HTTPException(
            status_code=400, detail="Category name and slug are required"
        )

    _ensure_parent_exists(db, data.get("parent_id"))

    db_category = Category(**data)
    db.add(db_category)
    _commit_or_conflict(db)
    db.refresh(db_category)

    logger.info(f"Created category {db_category.id} ({db_category.slug})")
    log_audit_event(
        event_type="category.created",
        message=f"Category '{db_category.name}' created",
        user_id=str(current_user.id),
        username=current_user.email,
        ip_address=get_client_ip(request),
        event_category="admin",
        category_id=db_category.id,
    )

    return {
        "message": "Category created successfully",
        "category": CategoryStore(db).get_record(db_category.id),
    }


@router.put("/{category_id}", response_model=CategoryMutationResponse)
def update_category(
    category_id: int,
    category_update: CategoryUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_admin),
):
    """
    Update a category in place.

    A category cannot become its own parent or be nested under one of its
    descendants.
    """
    update_data = category_update.model_dump(exclude_unset=True)

    if update_data.get("parent_id") is not None and update_data["parent_id"] == category_id:
        raise HTTPException(
            status_code=400, detail="Category cannot be its own parent"
        )

    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise HTTPException(status_code=404, detail=CATEGORY_NOT_FOUND)

    _ensure_parent_exists(db, update_data.get("parent_id"))
    _ensure_not_descendant(db, category_id, update_data.get("parent_id"))

    for key, value in update_data.items():
        setattr(category, key, value)

    _commit_or_conflict(db)

    log_audit_event(
        event_type="category.updated",
        message=f"Category {category_id} updated",
        user_id=str(current_user.id),
        username=current_user.email,
        ip_address=get_client_ip(request),
        event_category="admin",
        fields=sorted(update_data.keys()),
    )

    return {
        "message": "Category updated successfully",
        "category": CategoryStore(db).get_record(category_id),
    }


@router.delete("/{category_id}", response_model=MessageResponse)
def delete_category(
    category_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_admin),
):
    """
    Delete a category.

    Refused while any product (active or not) is assigned to it or while it
    still has subcategories.
    """
    product_count = db.query(Product).filter(Product.category_id == category_id).count()
    if product_count > 0:
        raise HTTPException(
            status_code=400,
            detail="Cannot delete category with existing products. Move products to another category first.",
        )

    subcategory_count = (
        db.query(Category).filter(Category.parent_id == category_id).count()
    )
    if subcategory_count > 0:
        raise HTTPException(
            status_code=400,
            detail="Cannot delete category with subcategories. Delete subcategories first.",
        )

    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise HTTPException(status_code=404, detail=CATEGORY_NOT_FOUND)

    db.delete(category)
    db.commit()

    log_audit_event(
        event_type="category.deleted",
        message=f"Category {category_id} deleted",
        user_id=str(current_user.id),
        username=current_user.email,
        ip_address=get_client_ip(request),
        event_category="admin",
    )

    return {"message": "Category deleted successfully"}
