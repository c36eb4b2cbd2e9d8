from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

OrderStatus = Literal["pending", "completed"]

# largest value an INTEGER column holds
MAX_INT = 2**31 - 1


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


class RequestModel(ApiModel):
    # request values handed to business logic are immutable
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True, extra="ignore"
    )


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class ErrorOut(BaseModel):
    message: str
    field: Optional[str] = None


class LoginRequest(RequestModel):
    username: str = Field(min_length=1, max_length=150)
    password: str = Field(min_length=1, max_length=128)


class UserOut(ApiModel):
    id: int
    username: str


class ProductListQuery(RequestModel):
    search: Optional[str] = None
    category: Optional[str] = None

    @field_validator("search", "category", mode="before")
    @classmethod
    def blank_filter_is_no_filter(cls, value):
        return _blank_to_none(value)


class ProductCreate(RequestModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=200)
    description: str = ""
    price: int = Field(ge=0, le=MAX_INT)
    image_url: str = Field(default="", max_length=500)
    category: str = Field(min_length=1, max_length=80)
    available: bool = True


class ProductUpdate(RequestModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    price: Optional[int] = Field(default=None, ge=0, le=MAX_INT)
    image_url: Optional[str] = Field(default=None, max_length=500)
    category: Optional[str] = Field(default=None, min_length=1, max_length=80)
    available: Optional[bool] = None


class ProductOut(ApiModel):
    id: int
    name: str
    description: str
    price: int
    image_url: str
    category: str
    available: bool


class OrderItemIn(RequestModel):
    product_id: int = Field(ge=1, le=MAX_INT)
    quantity: int = Field(ge=1, le=MAX_INT)


class OrderCreate(RequestModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    customer_name: str = Field(min_length=1, max_length=200)
    customer_address: str = Field(min_length=1)
    customer_phone: str = Field(min_length=1, max_length=50)
    customer_email: Optional[EmailStr] = None
    items: List[OrderItemIn] = Field(min_length=1)

    @field_validator("customer_email", mode="before")
    @classmethod
    def blank_email_is_missing(cls, value):
        return _blank_to_none(value)


class OrderStatusUpdate(RequestModel):
    status: OrderStatus


class OrderOut(ApiModel):
    id: int
    customer_name: str
    customer_address: str
    customer_phone: str
    customer_email: Optional[str] = None
    total_amount: int
    status: str
    created_at: datetime


class OrderItemOut(ApiModel):
    id: int
    order_id: int
    product_id: int
    quantity: int
    price: int


class OrderWithItemsOut(OrderOut):
    items: List[OrderItemOut]


class OrderItemWithProduct(OrderItemOut):
    # None once the product has been deleted from the catalog
    product: Optional[ProductOut] = None


class OrderDetailOut(OrderOut):
    items: List[OrderItemWithProduct]
