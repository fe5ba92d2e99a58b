from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Any, Dict, List, Optional


class ProductBase(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    sku: str = Field(min_length=1, max_length=100)
    price: float = Field(gt=0)
    cost_price: Optional[float] = 0
    stock_quantity: int = Field(default=0, ge=0)
    low_stock_threshold: int = Field(default=10, ge=0)
    category_id: Optional[int] = None
    image_url: Optional[str] = None
    images: Optional[List[str]] = None
    weight: Optional[float] = None
    dimensions: Optional[Dict[str, Any]] = None
    is_active: bool = True
    is_featured: bool = False
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None


class ProductCreate(ProductBase):
    pass


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    sku: Optional[str] = Field(default=None, min_length=1, max_length=100)
    price: Optional[float] = Field(default=None, gt=0)
    cost_price: Optional[float] = None
    stock_quantity: Optional[int] = Field(default=None, ge=0)
    low_stock_threshold: Optional[int] = Field(default=None, ge=0)
    category_id: Optional[int] = None
    image_url: Optional[str] = None
    images: Optional[List[str]] = None
    weight: Optional[float] = None
    dimensions: Optional[Dict[str, Any]] = None
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None


class Product(ProductBase):
    id: int
    status: str
    category_name: Optional[str] = None
    parent_category_name: Optional[str] = None
    category_parent_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class ProductListResponse(BaseModel):
    products: List[Product]
    pagination: Pagination


class ProductDetailResponse(BaseModel):
    product: Product


class ProductMutationResponse(BaseModel):
    message: str
    product: Product


class StockUpdate(BaseModel):
    id: int
    stock_quantity: int = Field(ge=0)


class BulkStockUpdateRequest(BaseModel):
    updates: List[StockUpdate]
