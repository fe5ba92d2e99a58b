from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
import logging

from backoffice.core.database import get_db
from backoffice.core.auth import get_current_user
from backoffice.models.user import AdminUser
from backoffice.services.dashboard_analytics import DashboardAnalytics
from backoffice.schemas.analytics import (
    DashboardResponse,
    RevenueChartResponse,
    TopProductsResponse,
    RecentOrdersResponse,
    OrderStatusResponse,
    CustomerGrowthResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/dashboard", response_model=DashboardResponse)
def get_dashboard(
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(get_current_user),
):
    """Headline store figures with month-over-month growth."""
    return {"stats": DashboardAnalytics(db).overview()}


@router.get("/revenue-chart", response_model=RevenueChartResponse)
def get_revenue_chart(
    months: int = Query(6, ge=1, le=24),
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(get_current_user),
):
    return {"chart_data": DashboardAnalytics(db).revenue_chart(months)}


@router.get("/top-products", response_model=TopProductsResponse)
def get_top_products(
    limit: int = Query(10, ge=1, le=50),
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(get_current_user),
):
    return {"top_products": DashboardAnalytics(db).top_products(limit)}


@router.get("/recent-orders", response_model=RecentOrdersResponse)
def get_recent_orders(
    limit: int = Query(5, ge=1, le=50),
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(get_current_user),
):
    return {"recent_orders": DashboardAnalytics(db).recent_orders(limit)}


@router.get("/order-status", response_model=OrderStatusResponse)
def get_order_status_distribution(
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(get_current_user),
):
    return {"status_data": DashboardAnalytics(db).order_status_distribution()}


@router.get("/customer-growth", response_model=CustomerGrowthResponse)
def get_customer_growth(
    months: int = Query(12, ge=1, le=36),
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(get_current_user),
):
    return {"growth_data": DashboardAnalytics(db).customer_growth(months)}
