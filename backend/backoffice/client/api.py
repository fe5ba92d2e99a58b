"""
Async client for the back-office REST API.

The bearer token is process-wide session state: ``AuthAPI.login`` stores it,
``AuthAPI.logout`` clears it, and every request made while it is set carries
it in the ``Authorization`` header.
"""

import httpx
import logging
from typing import Any, Dict, List, Optional

from backoffice.core.config import settings

logger = logging.getLogger(__name__)

_auth_token: Optional[str] = None

# Replaced in tests with an httpx.MockTransport
_transport: Optional[httpx.AsyncBaseTransport] = None


class ApiError(Exception):
    """A request to the back-office API failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def set_auth_token(token: str):
    global _auth_token
    _auth_token = token


def get_auth_token() -> Optional[str]:
    return _auth_token


def remove_auth_token():
    global _auth_token
    _auth_token = None


def set_transport(transport: Optional[httpx.AsyncBaseTransport]):
    global _transport
    _transport = transport


def _headers() -> Dict[str, str]:
    headers = {"Content-Type": "application/json"}
    token = get_auth_token()
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return "Network error"
    if isinstance(body, dict):
        detail = body.get("detail") or body.get("error")
        if isinstance(detail, str):
            return detail
    return "API request failed"


async def api_request(
    method: str,
    endpoint: str,
    json: Optional[Any] = None,
    params: Optional[Dict[str, Any]] = None,
) -> Any:
    """
    Send one request and return the decoded JSON body.

    Raises:
        ApiError: On transport failure or a non-2xx response
    """
    if params:
        params = {key: value for key, value in params.items() if value}

    try:
        async with httpx.AsyncClient(
            base_url=settings.API_BASE_URL,
            timeout=settings.API_TIMEOUT,
            transport=_transport,
        ) as client:
            response = await client.request(
                method, endpoint, json=json, params=params, headers=_headers()
            )
    except httpx.RequestError as e:
        logger.error(f"Request to {endpoint} failed: {e}")
        raise ApiError("Network error")

    if response.is_error:
        message = _error_message(response)
        logger.warning(f"{method} {endpoint} returned {response.status_code}: {message}")
        raise ApiError(message, status_code=response.status_code)

    return response.json()


class AuthAPI:
    @staticmethod
    async def login(email: str, password: str) -> Dict[str, Any]:
        response = await api_request(
            "POST", "/auth/login", json={"email": email, "password": password}
        )
        if response.get("token"):
            set_auth_token(response["token"])
        return response

    @staticmethod
    async def get_current_user() -> Dict[str, Any]:
        return await api_request("GET", "/auth/me")

    @staticmethod
    async def change_password(current_password: str, new_password: str):
        return await api_request(
            "PUT",
            "/auth/change-password",
            json={"current_password": current_password, "new_password": new_password},
        )

    @staticmethod
    def logout():
        remove_auth_token()


class CategoriesAPI:
    @staticmethod
    async def get_categories(include_subcategories: bool = True) -> Dict[str, Any]:
        flag = "true" if include_subcategories else "false"
        return await api_request(
            "GET", "/categories/", params={"include_subcategories": flag}
        )

    @staticmethod
    async def get_category(category_id: int) -> Dict[str, Any]:
        return await api_request("GET", f"/categories/{category_id}")

    @staticmethod
    async def get_subcategories(category_id: int) -> Dict[str, Any]:
        return await api_request("GET", f"/categories/{category_id}/subcategories")

    @staticmethod
    async def create_category(category_data: Dict[str, Any]) -> Dict[str, Any]:
        return await api_request("POST", "/categories/", json=category_data)

    @staticmethod
    async def update_category(
        category_id: int, category_data: Dict[str, Any]
    ) -> Dict[str, Any]:
        return await api_request("PUT", f"/categories/{category_id}", json=category_data)

    @staticmethod
    async def delete_category(category_id: int) -> Dict[str, Any]:
        return await api_request("DELETE", f"/categories/{category_id}")

    @staticmethod
    async def reorder_categories(orders: List[Dict[str, int]]) -> Dict[str, Any]:
        return await api_request(
            "PUT", "/categories/reorder", json={"categories": orders}
        )


class ProductsAPI:
    @staticmethod
    async def get_products(
        page: Optional[int] = None,
        limit: Optional[int] = None,
        search: Optional[str] = None,
        category: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Dict[str, Any]:
        params = {
            "page": page,
            "limit": limit,
            "search": search,
            "category": category,
            "status": status,
        }
        return await api_request("GET", "/products/", params=params)

    @staticmethod
    async def get_product(product_id: int) -> Dict[str, Any]:
        return await api_request("GET", f"/products/{product_id}")

    @staticmethod
    async def create_product(product_data: Dict[str, Any]) -> Dict[str, Any]:
        return await api_request("POST", "/products/", json=product_data)

    @staticmethod
    async def update_product(
        product_id: int, product_data: Dict[str, Any]
    ) -> Dict[str, Any]:
        return await api_request("PUT", f"/products/{product_id}", json=product_data)

    @staticmethod
    async def delete_product(product_id: int) -> Dict[str, Any]:
        return await api_request("DELETE", f"/products/{product_id}")

    @staticmethod
    async def bulk_update_stock(updates: List[Dict[str, int]]) -> Dict[str, Any]:
        return await api_request("PUT", "/products/bulk/stock", json={"updates": updates})


class BannersAPI:
    @staticmethod
    async def get_banners(
        page: Optional[int] = None,
        limit: Optional[int] = None,
        search: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Dict[str, Any]:
        params = {"page": page, "limit": limit, "search": search, "status": status}
        return await api_request("GET", "/banners/", params=params)

    @staticmethod
    async def get_active_banners() -> Dict[str, Any]:
        return await api_request("GET", "/banners/active")

    @staticmethod
    async def get_banner(banner_id: int) -> Dict[str, Any]:
        return await api_request("GET", f"/banners/{banner_id}")

    @staticmethod
    async def create_banner(banner_data: Dict[str, Any]) -> Dict[str, Any]:
        return await api_request("POST", "/banners/", json=banner_data)

    @staticmethod
    async def update_banner(banner_id: int, banner_data: Dict[str, Any]) -> Dict[str, Any]:
        return await api_request("PUT", f"/banners/{banner_id}", json=banner_data)

    @staticmethod
    async def toggle_banner(banner_id: int) -> Dict[str, Any]:
        return await api_request("PUT", f"/banners/{banner_id}/toggle")

    @staticmethod
    async def delete_banner(banner_id: int) -> Dict[str, Any]:
        return await api_request("DELETE", f"/banners/{banner_id}")

    @staticmethod
    async def reorder_banners(orders: List[Dict[str, int]]) -> Dict[str, Any]:
        return await api_request("PUT", "/banners/reorder", json={"banners": orders})


class CustomersAPI:
    @staticmethod
    async def get_customers(
        page: Optional[int] = None,
        limit: Optional[int] = None,
        search: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Dict[str, Any]:
        params = {"page": page, "limit": limit, "search": search, "status": status}
        return await api_request("GET", "/customers/", params=params)

    @staticmethod
    async def get_customer(customer_id: int) -> Dict[str, Any]:
        return await api_request("GET", f"/customers/{customer_id}")

    @staticmethod
    async def create_customer(customer_data: Dict[str, Any]) -> Dict[str, Any]:
        return await api_request("POST", "/customers/", json=customer_data)

    @staticmethod
    async def update_customer(
        customer_id: int, customer_data: Dict[str, Any]
    ) -> Dict[str, Any]:
        return await api_request("PUT", f"/customers/{customer_id}", json=customer_data)

    @staticmethod
    async def delete_customer(customer_id: int) -> Dict[str, Any]:
        return await api_request("DELETE", f"/customers/{customer_id}")

    @staticmethod
    async def add_address(customer_id: int, address: Dict[str, Any]) -> Dict[str, Any]:
        return await api_request(
            "POST", f"/customers/{customer_id}/addresses", json=address
        )

    @staticmethod
    async def get_stats() -> Dict[str, Any]:
        return await api_request("GET", "/customers/stats/overview")


class OrdersAPI:
    @staticmethod
    async def get_orders(
        page: Optional[int] = None,
        limit: Optional[int] = None,
        search: Optional[str] = None,
        status: Optional[str] = None,
        payment_status: Optional[str] = None,
    ) -> Dict[str, Any]:
        params = {
            "page": page,
            "limit": limit,
            "search": search,
            "status": status,
            "payment_status": payment_status,
        }
        return await api_request("GET", "/orders/", params=params)

    @staticmethod
    async def get_order(order_id: int) -> Dict[str, Any]:
        return await api_request("GET", f"/orders/{order_id}")

    @staticmethod
    async def create_order(order_data: Dict[str, Any]) -> Dict[str, Any]:
        return await api_request("POST", "/orders/", json=order_data)

    @staticmethod
    async def update_order_status(
        order_id: int, status_data: Dict[str, Any]
    ) -> Dict[str, Any]:
        return await api_request("PUT", f"/orders/{order_id}/status", json=status_data)

    @staticmethod
    async def delete_order(order_id: int) -> Dict[str, Any]:
        return await api_request("DELETE", f"/orders/{order_id}")

    @staticmethod
    async def get_stats() -> Dict[str, Any]:
        return await api_request("GET", "/orders/stats/overview")


class AnalyticsAPI:
    @staticmethod
    async def get_dashboard() -> Dict[str, Any]:
        return await api_request("GET", "/analytics/dashboard")

    @staticmethod
    async def get_revenue_chart() -> Dict[str, Any]:
        return await api_request("GET", "/analytics/revenue-chart")

    @staticmethod
    async def get_top_products() -> Dict[str, Any]:
        return await api_request("GET", "/analytics/top-products")

    @staticmethod
    async def get_recent_orders() -> Dict[str, Any]:
        return await api_request("GET", "/analytics/recent-orders")

    @staticmethod
    async def get_order_status() -> Dict[str, Any]:
        return await api_request("GET", "/analytics/order-status")

    @staticmethod
    async def get_customer_growth() -> Dict[str, Any]:
        return await api_request("GET", "/analytics/customer-growth")
