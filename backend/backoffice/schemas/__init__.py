from backoffice.schemas.category import (
    Category,
    CategoryCreate,
    CategoryUpdate,
    CategoryWithSubcategories,
    CategoryListResponse,
)
from backoffice.schemas.product import (
    Product,
    ProductCreate,
    ProductUpdate,
    ProductListResponse,
)
from backoffice.schemas.auth import (
    LoginRequest,
    LoginResponse,
    AdminUserRead,
    ChangePasswordRequest,
)

__all__ = [
    "Category",
    "CategoryCreate",
    "CategoryUpdate",
    "CategoryWithSubcategories",
    "CategoryListResponse",
    "Product",
    "ProductCreate",
    "ProductUpdate",
    "ProductListResponse",
    "LoginRequest",
    "LoginResponse",
    "AdminUserRead",
    "ChangePasswordRequest",
]
