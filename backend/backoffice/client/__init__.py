from backoffice.client.api import (
    ApiError,
    AuthAPI,
    CategoriesAPI,
    ProductsAPI,
    BannersAPI,
    CustomersAPI,
    OrdersAPI,
    AnalyticsAPI,
    get_auth_token,
    set_auth_token,
    remove_auth_token,
)
from backoffice.client.categories_table import CategoriesTableView, CategoryRow
from backoffice.client.category_form import CategoryForm

__all__ = [
    "ApiError",
    "AuthAPI",
    "CategoriesAPI",
    "ProductsAPI",
    "BannersAPI",
    "CustomersAPI",
    "OrdersAPI",
    "AnalyticsAPI",
    "get_auth_token",
    "set_auth_token",
    "remove_auth_token",
    "CategoriesTableView",
    "CategoryRow",
    "CategoryForm",
]
