from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import case, or_
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
from backoffice.models.banner import Banner
from backoffice.models.user import AdminUser
from backoffice.schemas.banner import (
    BannerCreate,
    BannerUpdate,
    BannerListResponse,
    ActiveBannerListResponse,
    BannerDetailResponse,
    BannerMutationResponse,
    BannerReorderRequest,
)
from backoffice.schemas.auth import MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter()

BANNER_NOT_FOUND = "Banner not found"

BANNER_FIELDS = [column.name for column in Banner.__table__.columns]


def banner_status(now: datetime):
    """Derived display state: inactive, then scheduled, then expired, else active."""
    return case(
        (Banner.is_active == False, "inactive"),  # noqa: E712
        (Banner.start_date > now, "scheduled"),
        (Banner.end_date < now, "expired"),
        else_="active",
    )


def _live_filters(now: datetime):
    return [
        Banner.is_active == True,  # noqa: E712
        or_(Banner.start_date.is_(None), Banner.start_date <= now),
        or_(Banner.end_date.is_(None), Banner.end_date >= now),
    ]


def _status_filters(now: datetime):
    return {
        "active": _live_filters(now),
        "inactive": [Banner.is_active == False],  # noqa: E712
        "scheduled": [Banner.start_date > now],
        "expired": [Banner.end_date < now],
    }


def _to_record(banner: Banner, status: str) -> dict:
    record = {field: getattr(banner, field) for field in BANNER_FIELDS}
    record["status"] = status
    return record


def _get_record(db: Session, banner_id: int):
    row = (
        db.query(Banner, banner_status(datetime.utcnow()))
        .filter(Banner.id == banner_id)
        .first()
    )
    return _to_record(*row) if row else None


def _get_banner_or_404(db: Session, banner_id: int) -> Banner:
    banner = db.query(Banner).filter(Banner.id == banner_id).first()
    if not banner:
        raise HTTPException(status_code=404, detail=BANNER_NOT_FOUND)
    return banner


@router.get("/", response_model=BannerListResponse)
def get_banners(
    page: int = PageParam,
    limit: int = PageLimitParam,
    search: Optional[str] = None,
    status: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(get_current_user),
):
    """
    List banners in display order with pagination.

    ``search`` matches title, description or overlay text; ``status`` is one
    of active, inactive, scheduled or expired.
    """
    now = datetime.utcnow()
    filters = _status_filters(now)
    validate_string_length(search, "search", max_length=200)
    validate_status_filter(status, filters.keys())

    query = db.query(Banner, banner_status(now))

    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(
                Banner.title.ilike(pattern),
                Banner.description.ilike(pattern),
                Banner.text_overlay.ilike(pattern),
            )
        )

    if status:
        query = query.filter(*filters[status])

    total = query.count()
    rows = (
        query.order_by(
            Banner.display_order.asc(), Banner.created_at.desc(), Banner.id.desc()
        )
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return {
        "banners": [_to_record(*row) for row in rows],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": math.ceil(total / limit),
        },
    }


@router.get("/active", response_model=ActiveBannerListResponse)
def get_active_banners(db: Session = Depends(get_db)):
    """Banners currently live on the storefront. No authentication required."""
    now = datetime.utcnow()
    banners = (
        db.query(Banner)
        .filter(*_live_filters(now))
        .order_by(Banner.display_order.asc(), Banner.id.asc())
        .all()
    )
    return {"banners": [_to_record(banner, "active") for banner in banners]}


@router.put("/reorder", response_model=MessageResponse)
def reorder_banners(
    payload: BannerReorderRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_admin),
):
    """Apply new display orders in one commit. Unknown ids abort the whole batch."""
    if not payload.banners:
        raise HTTPException(status_code=400, detail="Banners array is required")

    ids = [item.id for item in payload.banners]
    banners = {b.id: b for b in db.query(Banner).filter(Banner.id.in_(ids)).all()}

    missing = [banner_id for banner_id in ids if banner_id not in banners]
    if missing:
        raise HTTPException(status_code=404, detail=f"Banners not found: {missing}")

    for item in payload.banners:
        banners[item.id].display_order = item.display_order

    db.commit()

    log_audit_event(
        event_type="banner.reordered",
        message=f"{len(ids)} banners reordered",
        user_id=str(current_user.id),
        username=current_user.email,
        ip_address=get_client_ip(request),
        event_category="admin",
    )
    return {"message": "Banners reordered successfully"}


@router.get("/{banner_id}", response_model=BannerDetailResponse)
def get_banner(
    banner_id: int,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(get_current_user),
):
    banner = _get_record(db, banner_id)
    if banner is None:
        raise HTTPException(status_code=404, detail=BANNER_NOT_FOUND)
    return {"banner": banner}


@router.post("/", response_model=BannerMutationResponse, status_code=201)
def create_banner(
    banner: BannerCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_admin),
):
    db_banner = Banner(**banner.model_dump())
    db.add(db_banner)
    db.commit()
    db.refresh(db_banner)

    log_audit_event(
        event_type="banner.created",
        message=f"Banner '{db_banner.title}' created",
        user_id=str(current_user.id),
        username=current_user.email,
        ip_address=get_client_ip(request),
        event_category="admin",
        banner_id=db_banner.id,
    )

    return {
        "message": "Banner created successfully",
        "banner": _get_record(db, db_banner.id),
    }


@router.put("/{banner_id}", response_model=BannerMutationResponse)
def update_banner(
    banner_id: int,
    banner_update: BannerUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_admin),
):
    banner = _get_banner_or_404(db, banner_id)
    update_data = banner_update.model_dump(exclude_unset=True)

    start_date = update_data.get("start_date", banner.start_date)
    end_date = update_data.get("end_date", banner.end_date)
    if start_date and end_date and end_date < start_date:
        raise HTTPException(
            status_code=400, detail="End date must not be before start date"
        )

    for key, value in update_data.items():
        setattr(banner, key, value)

    db.commit()

    log_audit_event(
        event_type="banner.updated",
        message=f"Banner {banner_id} updated",
        user_id=str(current_user.id),
        username=current_user.email,
        ip_address=get_client_ip(request),
        event_category="admin",
        fields=sorted(update_data.keys()),
    )

    return {
        "message": "Banner updated successfully",
        "banner": _get_record(db, banner_id),
    }


@router.put("/{banner_id}/toggle", response_model=BannerMutationResponse)
def toggle_banner(
    banner_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_admin),
):
    """Flip the active flag."""
    banner = _get_banner_or_404(db, banner_id)
    banner.is_active = not banner.is_active
    db.commit()

    log_audit_event(
        event_type="banner.toggled",
        message=f"Banner {banner_id} {'enabled' if banner.is_active else 'disabled'}",
        user_id=str(current_user.id),
        username=current_user.email,
        ip_address=get_client_ip(request),
        event_category="admin",
    )

    return {
        "message": "Banner status toggled successfully",
        "banner": _get_record(db, banner_id),
    }


@router.delete("/{banner_id}", response_model=MessageResponse)
def delete_banner(
    banner_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_admin),
):
    banner = _get_banner_or_404(db, banner_id)
    db.delete(banner)
    db.commit()

    log_audit_event(
        event_type="banner.deleted",
        message=f"Banner {banner_id} deleted",
        user_id=str(current_user.id),
        username=current_user.email,
        ip_address=get_client_ip(request),
        event_category="admin",
    )

    return {"message": "Banner deleted successfully"}
