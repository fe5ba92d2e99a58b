from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from typing import List, Literal, Optional

from backoffice.schemas.product import Pagination


class CustomerBase(BaseModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=255)
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    avatar_url: Optional[str] = None
    is_active: bool = True
    email_verified: bool = False


class CustomerCreate(CustomerBase):
    pass


class CustomerUpdate(BaseModel):
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[str] = Field(default=None, min_length=3, max_length=255)
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    avatar_url: Optional[str] = None
    is_active: Optional[bool] = None
    email_verified: Optional[bool] = None


class Customer(CustomerBase):
    id: int
    status: str
    total_orders: int = 0
    total_spent: float = 0
    last_order_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class AddressCreate(BaseModel):
    type: Literal["shipping", "billing"] = "shipping"
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    company: Optional[str] = None
    address_line_1: str = Field(min_length=1)
    address_line_2: Optional[str] = None
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    postal_code: str = Field(min_length=1)
    country: str = Field(min_length=1)
    is_default: bool = False


class Address(AddressCreate):
    id: int
    customer_id: int

    model_config = ConfigDict(from_attributes=True)


class CustomerOrderSummary(BaseModel):
    id: int
    order_number: str
    status: str
    payment_status: str
    total_amount: float
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CustomerDetail(Customer):
    recent_orders: List[CustomerOrderSummary] = []
    addresses: List[Address] = []


class CustomerListResponse(BaseModel):
    customers: List[Customer]
    pagination: Pagination


class CustomerDetailResponse(BaseModel):
    customer: CustomerDetail


class CustomerMutationResponse(BaseModel):
    message: str
    customer: Customer


class AddressMutationResponse(BaseModel):
    message: str
    address: Address


class CustomerStats(BaseModel):
    total: int
    active: int
    inactive: int
    new_this_month: int
    vip: int
    avg_order_value: float


class CustomerStatsResponse(BaseModel):
    stats: CustomerStats
