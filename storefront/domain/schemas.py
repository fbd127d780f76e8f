# storefront/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import List
from decimal import Decimal
from datetime import datetime

from storefront.domain.order_status import OrderStatus

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


# koszyk


class ItemIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    product_id: int = Field(..., gt=0, description="ID produktu (musi być > 0)")
    quantity: int = Field(1, ge=1, description="Ilość produktu (co najmniej 1)")
    size: str | None = Field(None, max_length=64)
    color: str | None = Field(None, max_length=64)


class QuantityIn(BaseModel):
    """Schema dla zmiany ilosci linii koszyka (<= 0 usuwa linie)."""

    line_id: int = Field(..., gt=0)
    quantity: int


class ProductOut(BaseModel):
    id: int
    name: str
    price: Decimal
    image_url: str | None = None
    sku: str | None = None


class CartLineOut(BaseModel):
    """Linia koszyka z aktualnymi danymi z katalogu."""

    id: int
    product_id: int
    quantity: int
    size: str | None = None
    color: str | None = None
    product: ProductOut | None = None
    available: bool = True
    line_total: Decimal = Decimal("0.00")


class CartOut(BaseModel):
    """Schema dla koszyka (response)."""

    items: List[CartLineOut]
    subtotal: Decimal
    item_count: int = 0
    session_id: str | None = None


class MergeOut(BaseModel):
    merged_lines: int
    cart: CartOut


# adresy


class AddressIn(BaseModel):
    """Schema dla zapisu adresu dostawy."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    address_line1: str = Field(..., min_length=1, max_length=255)
    address_line2: str | None = Field(None, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    zip_code: str = Field(..., min_length=1, max_length=20)
    country: str = Field("United States", min_length=1, max_length=100)
    phone: str | None = Field(None, max_length=40)


class AddressCreate(AddressIn):
    is_default: bool = False


class AddressUpdate(BaseModel):
    """Czesciowa aktualizacja adresu - tylko podane pola."""

    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    address_line1: str | None = Field(None, max_length=255)
    address_line2: str | None = Field(None, max_length=255)
    city: str | None = Field(None, max_length=100)
    state: str | None = Field(None, max_length=100)
    zip_code: str | None = Field(None, max_length=20)
    country: str | None = Field(None, max_length=100)
    phone: str | None = Field(None, max_length=40)
    is_default: bool | None = None


class AddressOut(BaseModel):
    id: int
    first_name: str
    last_name: str
    address_line1: str
    address_line2: str | None = None
    city: str
    state: str
    zip_code: str
    country: str
    phone: str | None = None
    is_default: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# zamowienia


class OrderCreate(BaseModel):
    """Schema dla skladania zamowienia (checkout)."""

    email: str | None = Field(None, pattern=EMAIL_PATTERN, max_length=255)
    shipping_address: AddressIn | None = None
    address_id: int | None = Field(None, gt=0)
    payment_method: str = Field("card", min_length=1, max_length=32)
    payment_intent_id: str = Field(..., min_length=1, max_length=128)


class OrderLineOut(BaseModel):
    """Linia zamowienia - kopia danych produktu z chwili zakupu."""

    product_id: int
    product_name: str
    product_image_url: str | None = None
    unit_price: Decimal
    quantity: int
    size: str | None = None
    color: str | None = None
    sku: str | None = None

    model_config = ConfigDict(from_attributes=True)


class ShippingAddressOut(BaseModel):
    first_name: str
    last_name: str
    address_line1: str
    address_line2: str | None = None
    city: str
    state: str
    zip_code: str
    country: str
    phone: str | None = None


class OrderOut(BaseModel):
    """Schema dla zamowienia (response)."""

    order_number: str
    email: str
    status: OrderStatus
    subtotal: Decimal
    shipping_fee: Decimal
    tax: Decimal
    discount: Decimal
    total: Decimal
    shipping_address: ShippingAddressOut
    payment_method: str
    tracking_number: str | None = None
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None
    created_at: datetime
    items: List[OrderLineOut]


class OrderListOut(BaseModel):
    orders: List[OrderOut]


class StatusChangeIn(BaseModel):
    status: OrderStatus
    tracking_number: str | None = Field(None, min_length=1, max_length=128)


class LinkGuestOrdersOut(BaseModel):
    linked_count: int
