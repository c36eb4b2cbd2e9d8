"""
Shared request/response contract for the storefront HTTP API.

Every operation is declared once as a ``Route``: its method, its path, the
shape of its input and the shape of its response per status code. The
FastAPI app registers its endpoints from these declarations and the Python
client builds and parses its requests from them, so both sides agree on
field names without keeping two copies of the types.

Paths use ``{param}`` placeholders; ``build_url`` fills them in.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional, Type

from pydantic import BaseModel, TypeAdapter

from . import schemas

_PLACEHOLDER = re.compile(r"{(\w+)}")


@dataclass(frozen=True)
class Route:
    name: str
    method: str
    path: str
    input: Optional[Type[BaseModel]] = None
    responses: Mapping[int, Any] = field(default_factory=dict)

    @property
    def success_status(self) -> int:
        return min(status for status in self.responses if status < 300)

    @property
    def response_model(self):
        return self.responses[self.success_status]

    def parse_input(self, payload: Any) -> Optional[BaseModel]:
        if self.input is None:
            return None
        if isinstance(payload, self.input):
            return payload
        return self.input.model_validate(payload or {})

    def parse_response(self, status: int, payload: Any):
        """
        Validate a response body against the shape declared for ``status``.

        Raises:
            KeyError: the route does not declare that status code.
            pydantic.ValidationError: the body does not match the declared shape.
        """
        if status not in self.responses:
            raise KeyError(f"{self.name}: undeclared response status {status}")
        shape = self.responses[status]
        if shape is None:
            return None
        return TypeAdapter(shape).validate_python(payload)


def build_url(path: str, **params) -> str:
    def _replace(match):
        key = match.group(1)
        if key not in params:
            raise ValueError(f"Missing path parameter '{key}' for {path}")
        return str(params[key])

    return _PLACEHOLDER.sub(_replace, path)


def _errors(*statuses: int) -> Dict[int, Any]:
    return {status: schemas.ErrorOut for status in statuses}


@dataclass(frozen=True)
class AuthRoutes:
    login: Route = Route(
        name="auth.login",
        method="POST",
        path="/api/login",
        input=schemas.LoginRequest,
        responses={200: schemas.UserOut, **_errors(400, 401)},
    )
    logout: Route = Route(
        name="auth.logout",
        method="POST",
        path="/api/logout",
        responses={200: None},
    )
    user: Route = Route(
        name="auth.user",
        method="GET",
        path="/api/user",
        responses={200: schemas.UserOut, **_errors(401)},
    )


@dataclass(frozen=True)
class ProductRoutes:
    list: Route = Route(
        name="products.list",
        method="GET",
        path="/api/products",
        input=schemas.ProductListQuery,
        responses={200: List[schemas.ProductOut], **_errors(400)},
    )
    get: Route = Route(
        name="products.get",
        method="GET",
        path="/api/products/{id}",
        responses={200: schemas.ProductOut, **_errors(400, 404)},
    )
    create: Route = Route(
        name="products.create",
        method="POST",
        path="/api/products",
        input=schemas.ProductCreate,
        responses={201: schemas.ProductOut, **_errors(400, 401)},
    )
    update: Route = Route(
        name="products.update",
        method="PUT",
        path="/api/products/{id}",
        input=schemas.ProductUpdate,
        responses={200: schemas.ProductOut, **_errors(400, 401, 404)},
    )
    delete: Route = Route(
        name="products.delete",
        method="DELETE",
        path="/api/products/{id}",
        responses={204: None, **_errors(400, 401, 404)},
    )


@dataclass(frozen=True)
class OrderRoutes:
    create: Route = Route(
        name="orders.create",
        method="POST",
        path="/api/orders",
        input=schemas.OrderCreate,
        responses={201: schemas.OrderWithItemsOut, **_errors(400, 500)},
    )
    list: Route = Route(
        name="orders.list",
        method="GET",
        path="/api/orders",
        responses={200: List[schemas.OrderOut], **_errors(401)},
    )
    get: Route = Route(
        name="orders.get",
        method="GET",
        path="/api/orders/{id}",
        responses={200: schemas.OrderDetailOut, **_errors(400, 401, 404)},
    )
    update_status: Route = Route(
        name="orders.update_status",
        method="PATCH",
        path="/api/orders/{id}/status",
        input=schemas.OrderStatusUpdate,
        responses={200: schemas.OrderOut, **_errors(400, 401, 404)},
    )


@dataclass(frozen=True)
class ApiContract:
    auth: AuthRoutes = AuthRoutes()
    products: ProductRoutes = ProductRoutes()
    orders: OrderRoutes = OrderRoutes()

    def routes(self) -> Iterator[Route]:
        for group in (self.auth, self.products, self.orders):
            for value in vars(group).values():
                yield value


API = ApiContract()
