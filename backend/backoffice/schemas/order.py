from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from backoffice.schemas.product import Pagination

OrderStatus = Literal["pending", "processing", "shipped", "delivered", "cancelled"]
PaymentStatus = Literal["pending", "paid", "failed", "refunded"]


class OrderItemCreate(BaseModel):
    product_id: int
    quantity: int = Field(gt=0)
    # Default to the product's current price, name and SKU
    unit_price: Optional[float] = Field(default=None, ge=0)
    product_name: Optional[str] = None
    product_sku: Optional[str] = None


class OrderCreate(BaseModel):
    customer_id: int
    items: List[OrderItemCreate] = Field(min_length=1)
    payment_method: Optional[str] = None
    notes: Optional[str] = None
    shipping_address: Optional[Dict[str, Any]] = None
    billing_address: Optional[Dict[str, Any]] = None
    shipping_amount: float = Field(default=0, ge=0)
    tax_amount: float = Field(default=0, ge=0)
    discount_amount: float = Field(default=0, ge=0)


class OrderStatusUpdate(BaseModel):
    status: Optional[OrderStatus] = None
    payment_status: Optional[PaymentStatus] = None
    tracking_number: Optional[str] = None
    notes: Optional[str] = None


class OrderItem(BaseModel):
    id: int
    product_id: int
    product_name: str
    product_sku: str
    quantity: int
    unit_price: float
    total_price: float
    product_image: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class Order(BaseModel):
    id: int
    order_number: str
    customer_id: int
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    status: str
    payment_status: str
    payment_method: Optional[str] = None
    subtotal: float
    tax_amount: float = 0
    shipping_amount: float = 0
    discount_amount: float = 0
    total_amount: float
    currency: str = "USD"
    notes: Optional[str] = None
    tracking_number: Optional[str] = None
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    item_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class OrderDetail(Order):
    customer_phone: Optional[str] = None
    shipping_address: Optional[Dict[str, Any]] = None
    billing_address: Optional[Dict[str, Any]] = None
    items: List[OrderItem] = []


class OrderListResponse(BaseModel):
    orders: List[Order]
    pagination: Pagination


class OrderDetailResponse(BaseModel):
    order: OrderDetail


class OrderMutationResponse(BaseModel):
    message: str
    order: OrderDetail


class OrderStats(BaseModel):
    total: int
    pending: int
    processing: int
    shipped: int
    delivered: int
    cancelled: int
    revenue: float


class OrderStatsResponse(BaseModel):
    stats: OrderStats
