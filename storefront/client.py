import os
from typing import Any, Dict, List, Optional

import requests

from . import schemas
from .routes import API, Route, build_url

API_BASE_URL = os.getenv("API_BASE_URL", "http://127.0.0.1:5000")


class ApiError(RuntimeError):
    def __init__(self, status_code: int, message: str, field: Optional[str] = None):
        super().__init__(f"HTTP {status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.field = field


def _err(resp) -> ApiError:
    try:
        body = resp.json()
    except ValueError:
        return ApiError(resp.status_code, resp.text or f"HTTP {resp.status_code}")
    if isinstance(body, dict) and "message" in body:
        return ApiError(resp.status_code, str(body["message"]), body.get("field"))
    return ApiError(resp.status_code, str(body))


class StorefrontClient:
    """
    Talks to the storefront API through the shared route contract.

    ``session`` may be any object with a requests-style
    ``request(method, url, params=..., json=...)``; it keeps the login cookie
    between calls.
    """

    def __init__(self, base_url: str = API_BASE_URL, session=None, timeout: float = 10):
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    def _call(self, route: Route, payload: Any = None, **path_params):
        url = self.base_url + build_url(route.path, **path_params)
        kwargs: Dict[str, Any] = {}
        body = route.parse_input(payload) if route.input is not None else None
        if body is not None:
            data = body.model_dump(by_alias=True, exclude_none=True, mode="json")
            if route.method == "GET":
                kwargs["params"] = data
            else:
                kwargs["json"] = data
        if self.timeout and isinstance(self.session, requests.Session):
            kwargs["timeout"] = self.timeout

        resp = self.session.request(route.method, url, **kwargs)
        if resp.status_code >= 400:
            raise _err(resp)
        if resp.status_code == 204 or not resp.content:
            return route.parse_response(resp.status_code, None)
        return route.parse_response(resp.status_code, resp.json())

    # ---- auth ----
    def login(self, username: str, password: str) -> schemas.UserOut:
        return self._call(API.auth.login, {"username": username, "password": password})

    def logout(self) -> None:
        self._call(API.auth.logout)

    def current_user(self) -> schemas.UserOut:
        return self._call(API.auth.user)

    # ---- products ----
    def list_products(
        self, search: Optional[str] = None, category: Optional[str] = None
    ) -> List[schemas.ProductOut]:
        return self._call(API.products.list, {"search": search, "category": category})

    def get_product(self, product_id: int) -> schemas.ProductOut:
        return self._call(API.products.get, id=product_id)

    def create_product(self, product: Dict[str, Any]) -> schemas.ProductOut:
        return self._call(API.products.create, product)

    def update_product(self, product_id: int, changes: Dict[str, Any]) -> schemas.ProductOut:
        return self._call(API.products.update, changes, id=product_id)

    def delete_product(self, product_id: int) -> None:
        self._call(API.products.delete, id=product_id)

    # ---- orders ----
    def create_order(self, order: Dict[str, Any]) -> schemas.OrderWithItemsOut:
        return self._call(API.orders.create, order)

    def list_orders(self) -> List[schemas.OrderOut]:
        return self._call(API.orders.list)

    def get_order(self, order_id: int) -> schemas.OrderDetailOut:
        return self._call(API.orders.get, id=order_id)

    def update_order_status(self, order_id: int, status: str) -> schemas.OrderOut:
        return self._call(API.orders.update_status, {"status": status}, id=order_id)
