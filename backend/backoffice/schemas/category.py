from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import List, Optional


class CategoryBase(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    image_url: Optional[str] = None
    parent_id: Optional[int] = None
    is_active: bool = True
    sort_order: int = 0


class CategoryCreate(CategoryBase):
    slug: Optional[str] = Field(default=None, max_length=255)  # Derived from name if omitted


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    slug: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    image_url: Optional[str] = None
    parent_id: Optional[int] = None
    is_active: Optional[bool] = None
    sort_order: Optional[int] = None


class Category(CategoryBase):
    id: int
    slug: str
    product_count: int = 0
    parent_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CategoryWithSubcategories(Category):
    subcategories: List[Category] = []


class CategoryListResponse(BaseModel):
    """Top-level categories, plus the flat list when subcategories are included."""

    categories: List[CategoryWithSubcategories]
    flat_categories: Optional[List[Category]] = None


class CategoryDetailResponse(BaseModel):
    category: CategoryWithSubcategories


class SubcategoryListResponse(BaseModel):
    subcategories: List[Category]


class CategoryMutationResponse(BaseModel):
    message: str
    category: Category


class CategoryOrder(BaseModel):
    id: int
    sort_order: int


class CategoryReorderRequest(BaseModel):
    categories: List[CategoryOrder]
