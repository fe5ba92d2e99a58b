from pydantic import BaseModel
from datetime import datetime
from typing import List, Optional


class DashboardStats(BaseModel):
    total_revenue: float
    total_orders: int
    total_products: int
    total_customers: int
    revenue_growth: float
    orders_growth: float
    low_stock_products: int
    pending_orders: int


class DashboardResponse(BaseModel):
    stats: DashboardStats


class RevenuePoint(BaseModel):
    month: str
    revenue: float
    orders: int


class RevenueChartResponse(BaseModel):
    chart_data: List[RevenuePoint]


class TopProduct(BaseModel):
    product_id: int
    name: str
    image_url: Optional[str] = None
    total_sold: int
    revenue: float
    order_count: int
    percentage: int


class TopProductsResponse(BaseModel):
    top_products: List[TopProduct]


class RecentOrder(BaseModel):
    id: int
    order_number: str
    status: str
    total_amount: float
    customer_name: Optional[str] = None
    created_at: datetime
    time_ago: str


class RecentOrdersResponse(BaseModel):
    recent_orders: List[RecentOrder]


class StatusShare(BaseModel):
    status: str
    count: int
    percentage: float


class OrderStatusResponse(BaseModel):
    status_data: List[StatusShare]


class GrowthPoint(BaseModel):
    month: str
    customers: int


class CustomerGrowthResponse(BaseModel):
    growth_data: List[GrowthPoint]
